"""Walk a mongodump `.bson` file held in memory, one document at a time.

A dump is a plain concatenation of BSON documents. Every document starts
with its own total size as a little-endian int32, so the scanner only has to
read that prefix to find where the next document begins; the body is handed
to `bson.decode` untouched.

Recovery rules:

- fewer than 4 bytes left: clean end of stream
- declared size past the end of the buffer: truncated dump, warn and stop
- declared size below 4: no progress is possible, warn and stop
- body fails to decode: warn, skip the declared size, keep going

Known limitation: the cursor always moves by the *declared* size, also after
a decode failure. If a size prefix itself is corrupted, every following
document is read from the wrong offset and is lost. There is no attempt to
resync on a plausible document boundary.
"""

import struct
from dataclasses import dataclass
from typing import Iterator, Optional

import bson
from bson.codec_options import CodecOptions, DatetimeConversion
from bson.errors import BSONError

from . import logger

SIZE_PREFIX = struct.Struct("<I")
MIN_DOCUMENT_SIZE = SIZE_PREFIX.size

# dates outside datetime.datetime's range come back as DatetimeMS instead of failing
DEFAULT_CODEC_OPTIONS = CodecOptions(datetime_conversion=DatetimeConversion.DATETIME_AUTO)


@dataclass(frozen=True)
class DocumentSpan:
    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size


class ScanState:
    """What a span walk ended on. Filled in while iter_spans runs."""

    def __init__(self):
        self.cursor = 0
        self.truncated = False
        self.invalid_size = False


def iter_spans(buffer, state: Optional[ScanState] = None) -> Iterator[DocumentSpan]:
    """Yield the byte range of every length-prefixed document in `buffer`."""
    if state is None:
        state = ScanState()
    length = len(buffer)
    cursor = 0
    while length - cursor >= MIN_DOCUMENT_SIZE:
        (size,) = SIZE_PREFIX.unpack_from(buffer, cursor)
        if size < MIN_DOCUMENT_SIZE:
            logger.warning(f"Invalid document size, stopping scan (offset={cursor}, size={size})")
            state.invalid_size = True
            break
        if cursor + size > length:
            logger.warning(
                f"Incomplete document at end of file (offset={cursor}, expected_size={size}, "
                f"available={length - cursor})")
            state.truncated = True
            break
        span = DocumentSpan(offset=cursor, size=size)
        cursor += size
        state.cursor = cursor
        yield span
    state.cursor = cursor


class DocumentScanner:
    """
    Single forward pass over a dump buffer, yielding decoded documents

    Undecodable documents are logged and counted in `decode_failures`, the
    scan carries on with the next span. After iteration `truncated` tells
    whether the dump ended in the middle of a document and `bytes_scanned`
    how far the cursor got.
    """

    def __init__(self, buffer, codec_options: CodecOptions = DEFAULT_CODEC_OPTIONS):
        self.buffer = memoryview(buffer)
        self.codec_options = codec_options
        self.decode_failures = 0
        self._state = ScanState()
        self._started = False

    @property
    def truncated(self) -> bool:
        return self._state.truncated

    @property
    def stopped_on_invalid_size(self) -> bool:
        return self._state.invalid_size

    @property
    def bytes_scanned(self) -> int:
        return self._state.cursor

    def __iter__(self) -> Iterator[dict]:
        if self._started:
            raise RuntimeError("DocumentScanner can only be iterated once")
        self._started = True
        return self._scan()

    def _scan(self) -> Iterator[dict]:
        for span in iter_spans(self.buffer, self._state):
            data = self.buffer[span.offset:span.end]
            try:
                doc = bson.decode(data, codec_options=self.codec_options)
            except (BSONError, ValueError) as e:
                logger.warning(
                    f"Failed to decode BSON document (offset={span.offset}, size={span.size}, "
                    f"error={e})")
                self.decode_failures += 1
                continue
            yield doc
