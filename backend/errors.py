"""
PharmaTrack error taxonomy.

Routers translate these into HTTP responses; nothing here knows about HTTP.
"""


class PharmaTrackError(Exception):
    """Base class for all PharmaTrack faults."""

    error_code = "PHARMATRACK_ERROR"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidInput(PharmaTrackError):
    """Caller passed an empty required string, a negative figure, a bad month, etc."""

    error_code = "INVALID_INPUT"


class NotFound(PharmaTrackError):
    """No project with the requested id exists in the collection."""

    error_code = "NOT_FOUND"


class StorageError(PharmaTrackError):
    """The key/value store could not read or write its slot."""

    error_code = "STORAGE_ERROR"


class ConcurrentModification(PharmaTrackError):
    """The slot was saved by another writer between our read and our write."""

    error_code = "CONCURRENT_MODIFICATION"


class ReportInProgress(PharmaTrackError):
    """An AI report for this project is already being generated."""

    error_code = "REPORT_IN_PROGRESS"
