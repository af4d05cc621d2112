class ProcessorError(Exception):
    """Base exception for all submission-processing errors."""


class InvalidInputError(ProcessorError):
    """Raised when submitted content is rejected before persistence."""


class SubmissionNotFoundError(ProcessorError):
    """Raised when a submission cannot be found in the record store."""
