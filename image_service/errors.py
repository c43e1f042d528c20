"""Error taxonomy shared by the domain, the processing engine and the workers."""


class ImageServiceError(Exception):
    """Base class for all errors raised by the service."""


class InvalidArgument(ImageServiceError, ValueError):
    """Bad input supplied by the caller. Never retried."""


class InvalidTransition(ImageServiceError):
    """Task state machine violation."""


class NotFound(ImageServiceError):
    """No task exists for the requested id."""


class ProcessingError(ImageServiceError):
    """Source-side or storage failure. The job handler turns it into a failed task."""


class SourceNotFound(ProcessingError):
    pass


class SourceFetchError(ProcessingError):
    pass


class DecodeError(ProcessingError):
    pass


class EncodeError(ProcessingError):
    pass


class StorageError(ProcessingError):
    pass
