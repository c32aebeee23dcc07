"""
Turning decoded documents into the (document_id, data) pair stored per row
"""
from bson import json_util
from bson.json_util import CANONICAL_JSON_OPTIONS, RELAXED_JSON_OPTIONS

JSON_OPTIONS = {
    "relaxed": RELAXED_JSON_OPTIONS,
    "canonical": CANONICAL_JSON_OPTIONS,
}


def document_id(doc: dict) -> str:
    """Stringified `_id`, or the empty string when the document has none."""
    if "_id" not in doc:
        return ""
    return str(doc["_id"])


def to_json(doc: dict, mode: str = "relaxed") -> str:
    """
    Serialize a decoded document as MongoDB Extended JSON

    Plain JSON types are written as-is, BSON specific ones (ObjectId,
    datetime, Binary, Decimal128, ...) as their `$`-prefixed wrappers, so
    `json_util.loads` gives back an equal document.

    :raises TypeError: for a value json_util has no representation for
    """
    return json_util.dumps(doc, json_options=JSON_OPTIONS[mode])
