class StorageError(Exception):
    """Raised when the record store cannot complete an operation."""


class DuplicateContentHashError(StorageError):
    """Raised when inserting a submission whose content_hash already exists."""

    def __init__(self, content_hash: str) -> None:
        super().__init__(f"Submission with content hash {content_hash} already exists")
        self.content_hash = content_hash


class RecordNotFoundError(StorageError):
    """Raised when an update targets a row that does not exist."""


class InvalidTransitionError(StorageError):
    """Raised when a submission status change would leave a terminal state."""
