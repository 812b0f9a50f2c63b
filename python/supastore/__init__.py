"""Typed async client for the Supabase Storage API.

Provides:
- StorageClient for bucket, object, and signed-URL operations
- Typed records and per-call options
- MIME type enumeration with a custom escape hatch
- A StorageError hierarchy carrying stable error codes
"""

from supastore.client import StorageClient
from supastore.errors import (
    ConfigurationError,
    InvalidHeaderError,
    SerializationError,
    StorageApiError,
    StorageError,
    StorageErrorCode,
    TransportError,
)
from supastore.headers import HEADER_API_KEY
from supastore.mime import CustomMimeType, MimeType
from supastore.models import (
    Bucket,
    Column,
    DownloadOptions,
    FileObject,
    FileOptions,
    FileSearchOptions,
    Metadata,
    Order,
    SignedUploadUrlResponse,
    SortBy,
    TransformOptions,
    UploadResponse,
)
from supastore.urls import STORAGE_V1

__all__ = [
    "StorageClient",
    "StorageError",
    "StorageErrorCode",
    "ConfigurationError",
    "InvalidHeaderError",
    "SerializationError",
    "TransportError",
    "StorageApiError",
    "MimeType",
    "CustomMimeType",
    "Bucket",
    "FileObject",
    "Metadata",
    "FileOptions",
    "FileSearchOptions",
    "DownloadOptions",
    "TransformOptions",
    "SortBy",
    "Column",
    "Order",
    "UploadResponse",
    "SignedUploadUrlResponse",
    "HEADER_API_KEY",
    "STORAGE_V1",
]
