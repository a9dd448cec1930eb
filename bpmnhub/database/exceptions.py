class StorageError(Exception):
    """Base exception for all persistence errors."""


class ProjectNotFoundError(StorageError):
    """Raised when a project cannot be found in the database."""


class GenerationResultNotFoundError(StorageError):
    """Raised when a generation result row cannot be found."""
