"""
Reading of the `<collection>.metadata.json` descriptor written next to
every collection by mongodump.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import logger
from .errors import ParseError, ReadError


class IndexSpec(BaseModel):
    """One entry of the `indexes` array. Parsed and logged, never applied."""
    model_config = ConfigDict(extra="ignore")

    v: Any = Field(None, description="Index version as written by the server")
    key: Dict[str, Any] = Field(default_factory=dict, description="Field -> direction")
    name: str = Field("", description="Index name")

    @field_validator("key", "name", mode="before")
    def null_is_missing(cls, v, info):
        if v is None:
            return {} if info.field_name == "key" else ""
        return v


class Metadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    database: str = ""
    collection: str = ""
    collection_name: str = Field("", alias="collectionName")
    type: str = ""
    uuid: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    indexes: List[IndexSpec] = Field(default_factory=list)

    @field_validator("database", "collection", "collection_name", "type", "uuid", mode="before")
    def null_string(cls, v):
        return "" if v is None else v

    @field_validator("metadata", mode="before")
    def null_mapping(cls, v):
        return {} if v is None else v

    @field_validator("indexes", mode="before")
    def null_list(cls, v):
        return [] if v is None else v

    @property
    def target_collection(self) -> str:
        """`collection` wins, older dumps only carry `collectionName`."""
        return self.collection or self.collection_name


def load_metadata(path: Union[str, Path]) -> Metadata:
    """
    Read and validate a metadata descriptor

    :param path: path to the metadata.json file
    :return: the parsed Metadata
    :raises ReadError: if the file cannot be read
    :raises ParseError: if the content is not JSON or not a JSON object
        with the expected field types
    """
    logger.debug(f"Parsing metadata file (file={path})")
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ReadError(f"failed to read metadata file {path}: {e}") from e

    try:
        content = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"failed to parse metadata JSON {path}: {e}") from e

    if not isinstance(content, dict):
        raise ParseError(
            f"metadata {path} must be a JSON object, got {type(content).__name__}")

    try:
        metadata = Metadata.model_validate(content)
    except ValidationError as e:
        raise ParseError(f"metadata {path} has an unexpected shape: {e}") from e

    logger.info(
        f"Metadata parsed successfully "
        f"(database={metadata.database}, collection={metadata.target_collection})")
    if metadata.indexes:
        names = [index.name for index in metadata.indexes]
        logger.debug(f"Index definitions are not applied (indexes={names})")
    return metadata
