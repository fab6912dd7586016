"""Exception hierarchy for the sync engine.

Record-level errors (RecordPersistError) stay inside a stage. Status
reporting errors (StatusUpdateError) are only logged. Everything else that
escapes a stage fails the job.
"""


class SyncError(Exception):
    """Base class for every error raised by the sync engine."""


class ConfigurationError(SyncError):
    """Access token or store URL missing from the job config."""


class ConnectivityError(SyncError):
    """The initial shop query failed; no stage was attempted."""


class TransientFetchError(SyncError):
    """Network failure or non-2xx status while fetching a page."""


class ThrottleError(TransientFetchError):
    """Shopify answered with a THROTTLED error extension."""


class FatalAPIError(SyncError):
    """A GraphQL error that retrying will not fix."""


class DestinationError(SyncError):
    """A call to the destination write API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RecordPersistError(SyncError):
    """Writing or patching a single record failed."""


class BulkLoadError(SyncError):
    """Loading customers or interactions for aggregation failed."""


class StatusUpdateError(SyncError):
    """Reporting job status or a checkpoint failed."""
