class IngestionError(Exception):
    """Base class for failures while ingesting a telemetry report."""


class ParseFailure(IngestionError):
    """The request body could not be read as the expected JSON."""


class SinkFailure(IngestionError):
    """The persistence sink rejected the insert."""

    def __init__(self, table: str, cause: Exception | None = None):
        self.table = table
        self.cause = cause
        super().__init__(f"Insert into {table!r} failed: {cause}")


class UnknownTableError(LookupError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"No model registered for table {table!r}")
