class WorkerError(Exception):
    """Base exception for result delivery errors."""


class UnknownOutcomeError(WorkerError):
    """Raised when a generation result has an outcome other than success or failure."""
