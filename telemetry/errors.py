class TelemetryError(Exception):
    """Base class for client-side telemetry failures. None of them reach the page."""


class CaptureUnavailable(TelemetryError):
    """The performance API could not be used in this context."""


class TransportFailure(TelemetryError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Report to {path} was lost: {cause!r}")
