__version__ = '0.1.0'

from .log import setup_logger

# quiet by default, the CLI raises the level from -v
logger = setup_logger()

from .errors import (BsonToSqliteError, ReadError, ParseError, DatabaseOpenError,
                     TableCreateError, InvalidTableNameError)
from .config import ConvertConfig
from .metadata import Metadata, IndexSpec, load_metadata
from .scanner import DocumentSpan, DocumentScanner, iter_spans
from .sink import SQLiteSink, sanitize_table_name
from .convert import ImportStats, import_documents, run_convert
