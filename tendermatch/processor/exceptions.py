class TenderMatchError(Exception):
    """Base exception for all pipeline and matching errors."""


class ValidationError(TenderMatchError):
    """Raised for bad caller input. Never retried, surfaced verbatim."""


class EmptyFileError(ValidationError):
    """Raised when an uploaded file has no content."""


class FileTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the size cap."""


class UnsupportedFileTypeError(ValidationError):
    """Raised when an uploaded file is not of the accepted MIME type."""


class TooManyPagesError(ValidationError):
    """Raised when an uploaded document exceeds the page cap."""


class UnreadableDocumentError(ValidationError):
    """Raised when an uploaded document cannot be parsed to count its pages."""


class InvalidArgumentError(ValidationError):
    """Raised when an operation argument is out of range."""


class NotFoundError(TenderMatchError):
    """Raised when a referenced record does not exist."""


class JobNotFoundError(NotFoundError):
    """Raised when a processing job cannot be found."""


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found in the database."""


class ProfileNotFoundError(NotFoundError):
    """Raised when a company profile cannot be found."""


class AdapterError(TenderMatchError):
    """Raised when an external capability (OCR, AI) fails."""


class AdapterTimeoutError(AdapterError):
    """Raised when an external capability exceeds its deadline."""


class InternalError(TenderMatchError):
    """Raised on unexpected persistence or state failures."""


class InvalidTransitionError(InternalError):
    """Raised when a job state transition is not allowed."""


class ProfileApplyError(InternalError):
    """Raised when extracted fields could not be applied to a profile."""


class StorageError(InternalError):
    """Raised when the document store cannot read or write a blob."""
