from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from . import logger
from .codec import document_id, to_json
from .config import DEFAULT_PROGRESS_EVERY, ConvertConfig
from .errors import ReadError
from .metadata import load_metadata
from .scanner import DocumentScanner
from .sink import SQLiteSink


@dataclass
class ImportStats:
    inserted: int = 0
    decode_failures: int = 0
    serialize_failures: int = 0
    insert_failures: int = 0
    truncated: bool = False
    invalid_size: bool = False
    bytes_scanned: int = 0

    @property
    def failures(self) -> int:
        return self.decode_failures + self.serialize_failures + self.insert_failures


def read_dump(path: Path) -> bytes:
    logger.debug(f"Reading BSON file (file={path})")
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ReadError(f"failed to read BSON file {path}: {e}") from e


def import_documents(
    sink: SQLiteSink,
    buffer,
    json_mode: str = "relaxed",
    progress_every: int = DEFAULT_PROGRESS_EVERY,
) -> ImportStats:
    """
    Upsert every decodable document of a dump buffer into the sink's table

    Undecodable documents, documents that cannot be written as JSON and rows
    SQLite rejects are logged as warnings and counted, the import goes on.

    :param sink: sink on which ensure_table was already called
    :param buffer: the whole dump file content
    :param json_mode: "relaxed" or "canonical" Extended JSON
    :param progress_every: log a progress line every this many inserted rows
    :return: ImportStats of this run
    """
    stats = ImportStats()
    scanner = DocumentScanner(buffer)
    t0 = time.time()

    for doc in scanner:
        doc_id = document_id(doc)
        try:
            data = to_json(doc, json_mode)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize document to JSON (doc_id={doc_id}, error={e})")
            stats.serialize_failures += 1
            continue

        try:
            sink.upsert(doc_id, data)
        except sqlite3.Error as e:
            logger.warning(f"Failed to insert document (doc_id={doc_id}, error={e})")
            stats.insert_failures += 1
            continue

        stats.inserted += 1
        if stats.inserted % progress_every == 0:
            logger.info(f"Progress (documents_processed={stats.inserted})")

    stats.decode_failures = scanner.decode_failures
    stats.truncated = scanner.truncated
    stats.invalid_size = scanner.stopped_on_invalid_size
    stats.bytes_scanned = scanner.bytes_scanned

    dt = time.time() - t0
    logger.info(
        f"BSON import completed (total_documents={stats.inserted}, "
        f"decode_failures={stats.decode_failures}, "
        f"serialize_failures={stats.serialize_failures}, "
        f"insert_failures={stats.insert_failures}, truncated={stats.truncated}, "
        f"invalid_size={stats.invalid_size}) in {dt:.1f}s")
    return stats


def run_convert(config: ConvertConfig) -> ImportStats:
    """
    Convert one collection dump into a table of the output database

    :raises BsonToSqliteError: on any fatal condition, after which nothing
        more is attempted
    """
    logger.info(
        f"Starting BSON to SQLite conversion (bson_file={config.bson_path}, "
        f"metadata_file={config.metadata_path}, output_file={config.output_path})")

    metadata = load_metadata(config.metadata_path)

    with SQLiteSink(config.output_path) as sink:
        sink.ensure_table(metadata.target_collection)
        buffer = read_dump(config.bson_path)
        stats = import_documents(
            sink,
            buffer,
            json_mode=config.json_mode,
            progress_every=config.progress_every,
        )

    logger.info("Conversion completed successfully")
    return stats
