"""
Core Exceptions - Error taxonomy shared by every provider and extractor.

Every failure a caller can observe from mediahub is one of the classes
below, so callers can decide between "retry", "pick another provider" and
"fix your setup" without knowing which upstream site answered.
"""

from typing import Optional, Any


class MediaHubError(Exception):
    """Base exception class for all mediahub-specific errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize mediahub error.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class ConfigurationError(MediaHubError):
    """
    Raised for missing optional dependencies or invalid construction arguments.

    Always raised while building a provider, extractor or registry, never
    from inside a search/fetch call.
    """

    def __init__(
        self,
        message: str,
        capability: Optional[str] = None,
        config_path: Optional[str] = None,
        details: Optional[Any] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error description
            capability: Name of the missing capability, if any
            config_path: Path to the problematic configuration file
            details: Additional error context
        """
        super().__init__(message, details)
        self.capability = capability
        self.config_path = config_path


class UpstreamError(MediaHubError):
    """
    Raised when reaching or parsing an upstream source fails.

    The original exception is kept both on ``cause`` and as ``__cause__``
    so tracebacks show the full chain.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Any] = None
    ):
        """
        Initialize upstream error.

        Args:
            message: Error description naming the failed operation
            url: URL that caused the error
            status_code: HTTP status code if applicable
            cause: Original exception raised by the transport or parser
            details: Additional error context (e.g. response body)
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ExtractionError(MediaHubError):
    """Raised when a video extractor cannot turn a server URL into sources."""

    def __init__(
        self,
        message: str,
        server: Optional[str] = None,
        url: Optional[str] = None,
        details: Optional[Any] = None
    ):
        """
        Initialize extraction error.

        Args:
            message: Error description
            server: Name of the streaming server / extractor
            url: Server URL that failed to extract
            details: Additional error context
        """
        super().__init__(message, details)
        self.server = server
        self.url = url


class UnsupportedOperationError(MediaHubError, NotImplementedError):
    """
    Raised when a provider intentionally does not support an operation.

    Subclasses the builtin NotImplementedError so ``except NotImplementedError``
    keeps working for callers that only care about the generic signal.
    """

    def __init__(self, message: str, provider: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.operation = operation


class ProviderNotFoundError(MediaHubError):
    """Raised when a registry lookup names an unknown family or provider."""

    def __init__(self, message: str, family: Optional[str] = None, name: Optional[str] = None):
        super().__init__(message)
        self.family = family
        self.name = name


class ValidationError(MediaHubError):
    """Raised for invalid call arguments, before any network activity."""

    def __init__(self, message: str, field_name: Optional[str] = None, invalid_value: Optional[Any] = None, details: Optional[Any] = None):
        """
        Initialize validation error.

        Args:
            message: Error description
            field_name: Name of the argument that failed validation
            invalid_value: The invalid value that caused the error
            details: Additional error context
        """
        super().__init__(message, details)
        self.field_name = field_name
        self.invalid_value = invalid_value


# Export all exception classes
__all__ = [
    "MediaHubError",
    "ConfigurationError",
    "UpstreamError",
    "ExtractionError",
    "UnsupportedOperationError",
    "ProviderNotFoundError",
    "ValidationError",
]
