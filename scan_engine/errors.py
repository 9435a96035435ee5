"""
Errors raised at the scan engine's I/O boundaries.

The analysis pipeline itself never raises. Fetching the trigger reference data
and persisting scan events can fail, and both failures are fatal to the
request; reading stored scans back can fail as well. No retries are attempted
here. Product lookups never raise: an unresolved product is analysed as text.
"""


class ScanEngineError(Exception):
    """Base class for scan engine failures surfaced to callers."""


class TriggerDataError(ScanEngineError):
    """The trigger ingredient reference data could not be retrieved."""


class ScanPersistenceError(ScanEngineError):
    """A computed result could not be recorded, so no scan id exists for it."""


class ScanLookupError(ScanEngineError):
    """Stored scan events could not be read back."""
