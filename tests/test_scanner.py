import logging
import struct

import bson
import pytest
from bson.objectid import ObjectId

from bsontosqlite.scanner import DocumentScanner, DocumentSpan, ScanState, iter_spans
from conftest import encode_all

# length prefix is valid, the trailing byte is not the 0x00 terminator
CORRUPT_DOC = b"\x06\x00\x00\x00\x00\x01"


def test_spans_follow_length_prefix():
    """ Test case to check that spans are delimited by each document's size prefix. """
    first, second = bson.encode({"a": 1}), bson.encode({"b": "two"})
    spans = list(iter_spans(first + second))
    assert spans == [DocumentSpan(0, len(first)), DocumentSpan(len(first), len(second))]
    assert spans[1].end == len(first) + len(second)


def test_empty_buffer():
    """ Test case to check that an empty dump yields nothing. """
    scanner = DocumentScanner(b"")
    assert list(scanner) == []
    assert not scanner.truncated
    assert scanner.bytes_scanned == 0


def test_short_tail_is_clean_end(caplog):
    """ Test case to check that fewer than 4 trailing bytes end the scan without a warning. """
    data = bson.encode({"a": 1}) + b"\x01\x02"
    with caplog.at_level(logging.WARNING, logger="bsontosqlite"):
        docs = list(DocumentScanner(data))
    assert docs == [{"a": 1}]
    assert caplog.records == []


def test_decodes_documents(sample_docs):
    """ Test case to check that every well-formed document is decoded. """
    scanner = DocumentScanner(encode_all(sample_docs))
    assert list(scanner) == sample_docs
    assert scanner.decode_failures == 0


def test_truncated_last_document(sample_docs, caplog):
    """ Test case to check that a truncated last document stops the scan with a warning. """
    data = encode_all(sample_docs)
    cut = data[:-3]
    scanner = DocumentScanner(cut)
    with caplog.at_level(logging.WARNING, logger="bsontosqlite"):
        docs = list(scanner)
    assert docs == sample_docs[:-1]
    assert scanner.truncated
    assert scanner.bytes_scanned == len(encode_all(sample_docs[:-1]))
    assert "Incomplete document at end of file" in caplog.text


def test_corrupt_document_is_skipped(caplog):
    """ Test case to check that an undecodable document is skipped and the scan continues. """
    docs = [{"_id": 1}, {"_id": 2}]
    data = bson.encode(docs[0]) + CORRUPT_DOC + bson.encode(docs[1])
    scanner = DocumentScanner(data)
    with caplog.at_level(logging.WARNING, logger="bsontosqlite"):
        decoded = list(scanner)
    assert decoded == docs
    assert scanner.decode_failures == 1
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert f"offset={len(bson.encode(docs[0]))}" in warnings[0].getMessage()


def test_corrupted_size_derails_following_documents():
    """ Test case to check that the cursor trusts the declared size even when it is wrong. """
    good = bson.encode({"_id": 1})
    victim = bytearray(bson.encode({"_id": 2, "pad": "x" * 20}))
    # shrink the declared size: the rest of this document is read as the next one
    struct.pack_into("<I", victim, 0, 8)
    tail = bson.encode({"_id": 3})
    scanner = DocumentScanner(good + bytes(victim) + tail)
    decoded = list(scanner)
    assert decoded[0] == {"_id": 1}
    assert {"_id": 3} not in decoded
    assert scanner.decode_failures >= 1


@pytest.mark.parametrize("size", [0, 3])
def test_size_below_prefix_stops(size, caplog):
    """ Test case to check that a declared size smaller than the prefix ends the scan. """
    data = bson.encode({"a": 1}) + struct.pack("<I", size) + bson.encode({"b": 2})
    state = ScanState()
    with caplog.at_level(logging.WARNING, logger="bsontosqlite"):
        spans = list(iter_spans(data, state))
    assert len(spans) == 1
    assert state.invalid_size
    assert "Invalid document size" in caplog.text


def test_bson_types_survive_decode():
    """ Test case to check that BSON specific values are decoded. """
    oid = ObjectId()
    doc = {"_id": oid, "blob": bson.Binary(b"\x00\x01", 128), "nested": {"list": [1, "a", None]}}
    assert list(DocumentScanner(bson.encode(doc))) == [doc]


def test_single_use():
    """ Test case to check that a scanner cannot be iterated twice. """
    scanner = DocumentScanner(bson.encode({"a": 1}))
    list(scanner)
    with pytest.raises(RuntimeError):
        iter(scanner)
