class BsonToSqliteError(Exception):
    """Base class for errors that abort a conversion run."""


class ReadError(BsonToSqliteError):
    """An input file could not be read."""


class ParseError(BsonToSqliteError):
    """The metadata file is not valid JSON or has the wrong shape."""


class DatabaseOpenError(BsonToSqliteError):
    pass


class TableCreateError(BsonToSqliteError):
    pass


class InvalidTableNameError(BsonToSqliteError):
    """The collection name sanitizes to an unusable table identifier."""
