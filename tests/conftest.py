import json
from pathlib import Path
from typing import Dict, Any, List

import bson
import pytest


def write_metadata(path: Path, **fields) -> Path:
    content: Dict[str, Any] = {
        "database": "shop",
        "collection": "orders",
        "type": "collection",
        "uuid": "3f0c4a4be8e54a4c9d4f1f0d7b0f1c2a",
        "metadata": {},
        "indexes": [{"v": 2, "key": {"_id": 1}, "name": "_id_"}],
    }
    content.update(fields)
    path.write_text(json.dumps(content))
    return path


def encode_all(docs: List[dict]) -> bytes:
    return b"".join(bson.encode(doc) for doc in docs)


@pytest.fixture
def sample_docs() -> List[dict]:
    return [
        {"_id": i, "name": f"order-{i}", "total": i * 1.5, "paid": i % 2 == 0,
         "items": [{"sku": "A", "qty": i}], "note": None}
        for i in range(1, 6)
    ]


@pytest.fixture
def metadata_path(tmp_path: Path) -> Path:
    return write_metadata(tmp_path / "orders.metadata.json")


@pytest.fixture
def dump_path(tmp_path: Path, sample_docs: List[dict]) -> Path:
    path = tmp_path / "orders.bson"
    path.write_bytes(encode_all(sample_docs))
    return path
