"""Custom Exceptions for the AutoSrt application."""

class AutoSrtError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(AutoSrtError):
    """Exception raised for errors in configuration loading."""
    pass

class FileSystemError(AutoSrtError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

class MediaExtractionError(AutoSrtError):
    """Exception raised when the audio track cannot be extracted from a video."""
    pass

class MediaProbeError(AutoSrtError):
    """Exception raised when extracted audio has no readable stream metadata."""
    pass

class TranscriptionServiceError(AutoSrtError):
    """Exception raised when the speech recognition service call fails.

    ``retryable`` marks transient failures (unavailable, deadline exceeded,
    quota) that a retrying wrapper may attempt again.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable

class EncodingError(AutoSrtError):
    """Exception raised for errors while encoding, writing or parsing subtitle files."""
    pass

class PipelineCancelledError(AutoSrtError):
    """Exception raised when a pipeline run is cancelled by its caller."""
    pass
