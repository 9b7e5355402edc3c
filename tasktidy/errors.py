"""Error types shared by the store, the duplicate engine and ingestion."""


class TaskTidyError(Exception):
    """Base error for tasktidy failures."""

    pass


class ValidationError(TaskTidyError):
    """Input could not be parsed into a task, event or timeframe."""

    pass


class StorageError(TaskTidyError):
    """Task store query or mutation failed."""

    pass


class NotFoundError(TaskTidyError):
    """A group or task referenced by the caller no longer exists."""

    pass
