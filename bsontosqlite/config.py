from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

JSON_MODES = ("relaxed", "canonical")
DEFAULT_OUTPUT = "output.db"
DEFAULT_PROGRESS_EVERY = 1000


@dataclass(frozen=True)
class ConvertConfig:
    bson_path: Path
    metadata_path: Path
    output_path: Path = Path(DEFAULT_OUTPUT)
    verbose: int = 0
    json_mode: str = "relaxed"
    progress_every: int = DEFAULT_PROGRESS_EVERY

    def __post_init__(self):
        if self.json_mode not in JSON_MODES:
            raise ValueError(f"json_mode must be one of {JSON_MODES}")
        if self.progress_every <= 0:
            raise ValueError("progress_every must be positive")

    @classmethod
    def from_args(cls, args) -> ConvertConfig:
        """Build the run configuration from an argparse namespace."""
        return cls(
            bson_path=Path(args.bson).expanduser(),
            metadata_path=Path(args.metadata).expanduser(),
            output_path=Path(args.output).expanduser(),
            verbose=args.verbose,
            json_mode=args.json_mode,
        )
