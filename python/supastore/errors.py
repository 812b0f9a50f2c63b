"""Storage client error definitions.

Every failure surfaced by the client is a StorageError subclass carrying a
stable error code. Only StorageApiError carries an HTTP status: it is raised
when the service answered, but not with the expected success shape.
"""

from enum import Enum


class StorageErrorCode(str, Enum):
    """Standardized error codes for the storage client.

    Format: E_CATEGORY
    """

    E_CONFIGURATION = "E_CONFIGURATION"
    E_INVALID_HEADER = "E_INVALID_HEADER"
    E_SERIALIZATION = "E_SERIALIZATION"
    E_TRANSPORT = "E_TRANSPORT"
    E_STORAGE_API = "E_STORAGE_API"


class StorageError(Exception):
    """Base exception for storage client errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
    """

    def __init__(self, message: str, code: StorageErrorCode = StorageErrorCode.E_STORAGE_API):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(StorageError):
    """Required environment configuration is missing or unreadable."""

    def __init__(self, message: str):
        super().__init__(message, StorageErrorCode.E_CONFIGURATION)


class InvalidHeaderError(StorageError):
    """A header name or value cannot be sent over HTTP."""

    def __init__(self, message: str):
        super().__init__(message, StorageErrorCode.E_INVALID_HEADER)


class SerializationError(StorageError):
    """A request payload could not be built or encoded."""

    def __init__(self, message: str):
        super().__init__(message, StorageErrorCode.E_SERIALIZATION)


class TransportError(StorageError):
    """The request could not be sent or the response could not be read."""

    def __init__(self, message: str):
        super().__init__(message, StorageErrorCode.E_TRANSPORT)


class StorageApiError(StorageError):
    """The service returned an error status or an unexpected body.

    Attributes:
        status_code: HTTP status code of the response
        message: Raw response body text, verbatim
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message, StorageErrorCode.E_STORAGE_API)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"Operation failed with status: {self.status_code}: {self.message}"
