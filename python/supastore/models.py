"""Storage resource models, per-call options, and wire DTOs.

Contains:
- Server-owned records (Bucket, FileObject, Metadata), validated from responses
- Per-call option types (FileOptions, DownloadOptions, TransformOptions, ...)
- Request/response payload pairs, one per endpoint

Wire field names (camelCase, `Id`/`Key`, `signedURL`) are mapped with aliases;
Python code always uses the snake_case attribute names.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supastore.mime import MimeLike

# =============================================================================
# Server Records
# =============================================================================


class Bucket(BaseModel):
    """A storage bucket as returned by GET /bucket and GET /bucket/{id}."""

    id: str
    name: str
    owner: str | None = None
    public: bool
    file_size_limit: int | None = None
    allowed_mime_types: list[str] | None = None
    created_at: datetime
    updated_at: datetime


class Metadata(BaseModel):
    """Object metadata attached to listed files.

    Folder entries in a listing have no metadata at all.
    """

    e_tag: str | None = Field(default=None, alias="eTag")
    size: int | None = None
    mimetype: str | None = None
    cache_control: str | None = Field(default=None, alias="cacheControl")
    last_modified: datetime | None = Field(default=None, alias="lastModified")
    content_length: int | None = Field(default=None, alias="contentLength")
    http_status_code: int | None = Field(default=None, alias="httpStatusCode")

    model_config = ConfigDict(populate_by_name=True)


class FileObject(BaseModel):
    """A file or folder entry from POST /object/list/{bucket}.

    Folders carry only `name`; every other field is None.
    """

    name: str
    id: str | None = None
    bucket_id: str | None = None
    owner: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_accessed_at: datetime | None = None
    metadata: Metadata | None = None

    @property
    def is_folder(self) -> bool:
        """Whether this entry is a bare-name folder placeholder."""
        return self.id is None


# =============================================================================
# Per-call Options
# =============================================================================


class Column(str, Enum):
    """Columns a file listing can be sorted by."""

    NAME = "name"
    UPDATED_AT = "updated_at"
    CREATED_AT = "created_at"
    LAST_ACCESSED_AT = "last_accessed_at"


class Order(str, Enum):
    """Sort direction for file listings."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortBy:
    """Listing sort specification. Defaults to name, ascending."""

    column: Column = Column.NAME
    order: Order = Order.ASC


@dataclass(frozen=True)
class FileSearchOptions:
    """Options for list_files.

    Attributes:
        limit: Maximum number of entries to return
        offset: Number of entries to skip
        sort_by: Sort column and direction
        search: Substring filter on entry names
    """

    limit: int = 100
    offset: int = 0
    sort_by: SortBy = field(default_factory=SortBy)
    search: str | None = None


@dataclass(frozen=True)
class FileOptions:
    """Options for upload, update, and signed-URL upload calls.

    Attributes:
        cache_control: Seconds the asset is cached, sent as `cache-control: max-age=N`
        content_type: Content type of the body; the server sniffs it when omitted
        upsert: Overwrite an existing object at the same path
        duplex: Request duplex mode, forwarded as the `duplex` header
    """

    cache_control: int | None = None
    content_type: MimeLike | None = None
    upsert: bool = False
    duplex: str | None = None


@dataclass(frozen=True)
class TransformOptions:
    """Server-side image transformation parameters.

    Attributes:
        width: Target width in pixels
        height: Target height in pixels
        resize: One of "cover", "contain", "fill"; other values are ignored
        format: Output format, e.g. "origin" to keep the source format
        quality: Output quality, 20 to 100
    """

    width: int | None = None
    height: int | None = None
    resize: str | None = None
    format: str | None = None
    quality: int | None = None


@dataclass(frozen=True)
class DownloadOptions:
    """Options for download_file, get_public_url, and create_signed_url.

    Attributes:
        transform: Image transformation; switches to the render endpoint
        download: Ask the server to send the file as an attachment
    """

    transform: TransformOptions | None = None
    download: bool | None = None


# =============================================================================
# Request Payloads
# =============================================================================


class CreateBucketRequest(BaseModel):
    """Request body for POST /bucket."""

    id: str
    name: str = Field(min_length=1)
    public: bool
    allowed_mime_types: list[str] | None = None
    file_size_limit: int | None = Field(default=None, ge=0)


class UpdateBucketRequest(BaseModel):
    """Request body for PUT /bucket/{id}.

    Omitted fields are left unchanged by the server.
    """

    id: str
    public: bool
    allowed_mime_types: list[str] | None = None
    file_size_limit: int | None = Field(default=None, ge=0)


class SortByBody(BaseModel):
    """Wire form of SortBy."""

    column: Column
    order: Order


class ListFilesRequest(BaseModel):
    """Request body for POST /object/list/{bucket}."""

    prefix: str
    limit: int = Field(ge=0)
    offset: int = Field(ge=0)
    sort_by: SortByBody = Field(alias="sortBy")
    search: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class CopyFileRequest(BaseModel):
    """Request body for POST /object/copy."""

    bucket_id: str = Field(alias="bucketId")
    source_key: str = Field(alias="sourceKey")
    destination_bucket: str = Field(alias="destinationBucket")
    destination_key: str = Field(alias="destinationKey")
    copy_metadata: bool = Field(alias="copyMetadata")

    model_config = ConfigDict(populate_by_name=True)


class MoveFileRequest(BaseModel):
    """Request body for POST /object/move."""

    bucket_id: str = Field(alias="bucketId")
    source_key: str = Field(alias="sourceKey")
    destination_bucket: str = Field(alias="destinationBucket")
    destination_key: str = Field(alias="destinationKey")

    model_config = ConfigDict(populate_by_name=True)


class SignedUrlRequest(BaseModel):
    """Request body for POST /object/sign/{bucket}/{path}."""

    expires_in: int = Field(alias="expiresIn", ge=1)
    transform: dict[str, str | int] | None = None

    model_config = ConfigDict(populate_by_name=True)


class MultipleSignedUrlsRequest(BaseModel):
    """Request body for POST /object/sign/{bucket}."""

    expires_in: int = Field(alias="expiresIn", ge=1)
    paths: list[str] = Field(min_length=1)

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Response Payloads
# =============================================================================


class CreateBucketResponse(BaseModel):
    """Response body of POST /bucket."""

    name: str


class MessageResponse(BaseModel):
    """Confirmation body shared by delete, update, empty, and move calls."""

    message: str


class UploadResponse(BaseModel):
    """Response body of object uploads.

    `key` is prefixed with the bucket id, e.g. "avatars/folder/a.png".
    Uploads to a signed URL return no `id`.
    """

    id: str | None = Field(default=None, alias="Id")
    key: str = Field(alias="Key")

    model_config = ConfigDict(populate_by_name=True)


class CopyFileResponse(BaseModel):
    """Response body of POST /object/copy."""

    key: str = Field(alias="Key")

    model_config = ConfigDict(populate_by_name=True)


class SignedUrlResponse(BaseModel):
    """Response body of POST /object/sign/{bucket}/{path}.

    `signed_url` is relative to the storage API root.
    """

    signed_url: str = Field(alias="signedURL", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class SignedUrlItem(BaseModel):
    """One entry of the POST /object/sign/{bucket} response list."""

    path: str | None = None
    signed_url: str | None = Field(default=None, alias="signedURL")
    error: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class SignedUploadUrlResponse(BaseModel):
    """Signed upload URL and the token authorizing the upload.

    Attributes:
        url: Upload path without hostname, relative to the storage API root
        token: Short-lived authorization token for upload_to_signed_url
    """

    url: str
    token: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def token_from_url(cls, data: object) -> object:
        """Fill `token` from the URL query when the body only has `url`."""
        if isinstance(data, dict) and not data.get("token") and isinstance(data.get("url"), str):
            tokens = parse_qs(urlsplit(data["url"]).query).get("token")
            if tokens:
                return {**data, "token": tokens[0]}
        return data
