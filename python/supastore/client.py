"""Supabase Storage API client.

Every public coroutine maps to exactly one HTTP request against
`{base_url}/storage/v1/...`:
- Bucket management (create, get, list, update, empty, delete)
- Object upload, update, download, listing, copy, move, delete
- Signed download URLs and signed upload URLs
- Public URL construction (local only, no request)

Rules:
- No retries, no caching, no timeouts of its own
- Bodies are sent and read whole
- The first failure is raised; nothing is recovered locally
- A 2xx body that does not match the expected shape is reported as a
  StorageApiError carrying the raw body, same as a non-2xx response
"""

from typing import Literal, TypeVar
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from supastore.config import get_settings
from supastore.errors import (
    ConfigurationError,
    SerializationError,
    StorageApiError,
    TransportError,
)
from supastore.headers import (
    HEADER_CACHE_CONTROL,
    HEADER_CONTENT_TYPE,
    HEADER_DUPLEX,
    HEADER_UPSERT,
    auth_headers,
    merge_headers,
    validate_header,
)
from supastore.logging import bind_operation, get_logger
from supastore.mime import MimeLike, mime_to_str
from supastore.models import (
    Bucket,
    CopyFileRequest,
    CopyFileResponse,
    CreateBucketRequest,
    CreateBucketResponse,
    DownloadOptions,
    FileObject,
    FileOptions,
    FileSearchOptions,
    ListFilesRequest,
    MessageResponse,
    MoveFileRequest,
    MultipleSignedUrlsRequest,
    SignedUploadUrlResponse,
    SignedUrlItem,
    SignedUrlRequest,
    SignedUrlResponse,
    SortByBody,
    UpdateBucketRequest,
    UploadResponse,
)
from supastore.urls import (
    absolute_signed_url,
    append_query,
    build_query,
    storage_url,
    transform_params,
    wants_transform,
)

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"

_BUCKET = TypeAdapter(Bucket)
_BUCKET_LIST = TypeAdapter(list[Bucket])
_FILE_LIST = TypeAdapter(list[FileObject])
_SIGNED_URL_ITEMS = TypeAdapter(list[SignedUrlItem])
_CREATE_BUCKET_RESPONSE = TypeAdapter(CreateBucketResponse)
_MESSAGE = TypeAdapter(MessageResponse)
_UPLOAD = TypeAdapter(UploadResponse)
_COPY = TypeAdapter(CopyFileResponse)
_SIGNED_URL = TypeAdapter(SignedUrlResponse)
_SIGNED_UPLOAD_URL = TypeAdapter(SignedUploadUrlResponse)


def _body_text(response: httpx.Response) -> str:
    """Decode a response body for error reporting, whatever its content type."""
    return response.content.decode("utf-8", errors="replace")


def _build(model: type[M], **fields: object) -> M:
    """Construct a request payload, reporting invalid input as SerializationError."""
    try:
        return model(**fields)
    except ValidationError as exc:
        raise SerializationError(f"Invalid {model.__name__}: {exc}") from exc


def _encode(payload: BaseModel) -> str:
    """Encode a request payload to JSON using wire aliases, omitting unset fields."""
    try:
        return payload.model_dump_json(by_alias=True, exclude_none=True)
    except PydanticSerializationError as exc:
        raise SerializationError(f"Failed to serialize {type(payload).__name__}: {exc}") from exc


def _mime_strings(mime_types: list[MimeLike] | None) -> list[str] | None:
    """Convert a list of MIME types to wire strings."""
    if mime_types is None:
        return None
    try:
        return [mime_to_str(mime) for mime in mime_types]
    except ValueError as exc:
        raise SerializationError(str(exc)) from exc


def _require_segments(**segments: str) -> None:
    """Reject bucket ids and object paths that would vanish from the URL.

    An empty segment would turn GET /bucket/{id} into the bucket listing or
    DELETE /object/{bucket}/{path} into the bulk delete route.
    """
    for name, value in segments.items():
        if not value or not value.strip("/"):
            raise SerializationError(f"{name} must not be empty")


def _file_option_headers(options: FileOptions | None) -> dict[str, str]:
    """Map FileOptions to upload headers.

    x-upsert is only sent when true; false is the server default.
    """
    if options is None:
        return {}

    headers: dict[str, str] = {}
    if options.cache_control is not None:
        headers[HEADER_CACHE_CONTROL] = f"max-age={options.cache_control}"
    if options.content_type is not None:
        try:
            headers[HEADER_CONTENT_TYPE] = mime_to_str(options.content_type)
        except ValueError as exc:
            raise SerializationError(str(exc)) from exc
    if options.upsert:
        headers[HEADER_UPSERT] = "true"
    if options.duplex is not None:
        headers[HEADER_DUPLEX] = options.duplex
    return headers


class StorageClient:
    """Async client for the Supabase Storage API.

    The client is never mutated after construction: with_header() returns a
    new client sharing the same transport, so one instance can be used from
    many tasks at once.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | httpx.Headers | None = None,
    ):
        """Initialize the storage client.

        Args:
            base_url: Supabase project URL (e.g., https://xxx.supabase.co).
            api_key: API key, sent as `apikey` and as the bearer token.
                WARN: a service role key bypasses Row Level Security.
            http_client: Shared transport. When omitted the client creates
                (and owns) one without a timeout.
            headers: Default headers added to every request.
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient(timeout=None)
        self._headers = httpx.Headers(headers or {})

    @classmethod
    def new_from_env(cls, *, http_client: httpx.AsyncClient | None = None) -> "StorageClient":
        """Create a client from SUPABASE_URL and SUPABASE_API_KEY.

        Raises:
            ConfigurationError: If either variable is missing or blank.
        """
        try:
            settings = get_settings()
        except ValidationError as exc:
            reasons = "; ".join(str(error["msg"]) for error in exc.errors())
            raise ConfigurationError(f"Environment variable unreadable: {reasons}") from exc

        return cls(
            settings.normalized_url,
            settings.supabase_api_key or "",
            http_client=http_client,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def headers(self) -> httpx.Headers:
        """A copy of the default headers."""
        return httpx.Headers(self._headers)

    def with_header(self, name: str, value: str) -> "StorageClient":
        """Return a client with one more (or one replaced) default header.

        The returned client shares this client's transport but never closes it.

        Raises:
            InvalidHeaderError: If the name or value is not a legal header.
        """
        validate_header(name, value)
        headers = httpx.Headers(self._headers)
        headers[name] = value

        return StorageClient(
            self._base_url,
            self._api_key,
            http_client=self._client,
            headers=headers,
        )

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "StorageClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # =========================================================================
    # Request plumbing
    # =========================================================================

    def _url(self, *segments: str) -> str:
        return storage_url(self._base_url, *segments)

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: str | None = None,
        content: bytes | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the response if its status is 2xx.

        Auth headers are injected last, so neither defaults nor call headers
        can override them.
        """
        call_headers = dict(headers or {})
        if json_body is not None:
            call_headers[HEADER_CONTENT_TYPE] = JSON_CONTENT_TYPE
            content = json_body.encode("utf-8")
        call_headers.update(auth_headers(self._api_key))
        request_headers = merge_headers(self._headers, call_headers)

        with bind_operation(operation):
            logger.debug("storage.request.started", method=method, url_path=urlsplit(url).path)

            try:
                response = await self._client.request(
                    method,
                    url,
                    headers=request_headers,
                    content=content,
                    params=params,
                )
            except httpx.HTTPError as exc:
                logger.warning(
                    "storage.request.transport_failed",
                    method=method,
                    error_type=type(exc).__name__,
                )
                raise TransportError(f"Failed to send request: {exc}") from exc

            if not response.is_success:
                logger.warning(
                    "storage.request.failed", method=method, status_code=response.status_code
                )
                raise StorageApiError(response.status_code, _body_text(response))

        return response

    def _parse(self, response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        """Validate a success body; a non-conforming body becomes a StorageApiError."""
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            logger.warning("storage.response.invalid", status_code=response.status_code)
            raise StorageApiError(response.status_code, _body_text(response)) from exc

    # =========================================================================
    # Buckets
    # =========================================================================

    async def create_bucket(
        self,
        name: str,
        bucket_id: str | None = None,
        public: bool = False,
        allowed_mime_types: list[MimeLike] | None = None,
        file_size_limit: int | None = None,
    ) -> str:
        """Create a bucket and return its name.

        Args:
            name: Visible name of the bucket.
            bucket_id: Identifier used for later calls; defaults to `name`.
            public: Public buckets serve objects without an authorization token.
            allowed_mime_types: Types accepted on upload; None allows all.
            file_size_limit: Maximum upload size in bytes; None for no limit.
        """
        payload = _build(
            CreateBucketRequest,
            id=bucket_id or name,
            name=name,
            public=public,
            allowed_mime_types=_mime_strings(allowed_mime_types),
            file_size_limit=file_size_limit,
        )
        response = await self._request(
            "create_bucket", "POST", self._url("bucket"), json_body=_encode(payload)
        )
        return self._parse(response, _CREATE_BUCKET_RESPONSE).name

    async def delete_bucket(self, bucket_id: str) -> None:
        """Delete a bucket. The bucket must exist and be empty."""
        _require_segments(bucket_id=bucket_id)
        await self._request("delete_bucket", "DELETE", self._url("bucket", bucket_id))

    async def get_bucket(self, bucket_id: str) -> Bucket:
        """Retrieve a single bucket."""
        _require_segments(bucket_id=bucket_id)
        response = await self._request("get_bucket", "GET", self._url("bucket", bucket_id))
        return self._parse(response, _BUCKET)

    async def list_buckets(self) -> list[Bucket]:
        """List all buckets, in the order the server returns them."""
        response = await self._request("list_buckets", "GET", self._url("bucket"))
        return self._parse(response, _BUCKET_LIST)

    async def update_bucket(
        self,
        bucket_id: str,
        public: bool,
        allowed_mime_types: list[MimeLike] | None = None,
        file_size_limit: int | None = None,
    ) -> str:
        """Update a bucket and return the server's confirmation message.

        Options left as None are not sent, and the server keeps their current value.
        """
        _require_segments(bucket_id=bucket_id)
        payload = _build(
            UpdateBucketRequest,
            id=bucket_id,
            public=public,
            allowed_mime_types=_mime_strings(allowed_mime_types),
            file_size_limit=file_size_limit,
        )
        response = await self._request(
            "update_bucket", "PUT", self._url("bucket", bucket_id), json_body=_encode(payload)
        )
        return self._parse(response, _MESSAGE).message

    async def empty_bucket(self, bucket_id: str) -> str:
        """Delete every object in a bucket."""
        _require_segments(bucket_id=bucket_id)
        response = await self._request(
            "empty_bucket", "POST", self._url("bucket", bucket_id, "empty")
        )
        return self._parse(response, _MESSAGE).message

    # =========================================================================
    # Objects
    # =========================================================================

    async def _upload_or_update(
        self,
        operation: str,
        method: Literal["POST", "PUT"],
        bucket_id: str,
        data: bytes,
        path: str,
        options: FileOptions | None,
    ) -> UploadResponse:
        """Shared body of upload_file (POST), update_file and replace_file (PUT)."""
        _require_segments(bucket_id=bucket_id, path=path)
        response = await self._request(
            operation,
            method,
            self._url("object", bucket_id, path),
            headers=_file_option_headers(options),
            content=data,
        )
        return self._parse(response, _UPLOAD)

    async def upload_file(
        self,
        bucket_id: str,
        data: bytes,
        path: str,
        options: FileOptions | None = None,
    ) -> UploadResponse:
        """Upload a new object. Fails if it exists, unless options.upsert is set."""
        return await self._upload_or_update("upload_file", "POST", bucket_id, data, path, options)

    async def update_file(
        self,
        bucket_id: str,
        data: bytes,
        path: str,
        options: FileOptions | None = None,
    ) -> UploadResponse:
        """Overwrite an existing object."""
        return await self._upload_or_update("update_file", "PUT", bucket_id, data, path, options)

    async def replace_file(
        self,
        bucket_id: str,
        data: bytes,
        path: str,
        options: FileOptions | None = None,
    ) -> UploadResponse:
        """Overwrite an existing object. Same request as update_file."""
        return await self._upload_or_update("replace_file", "PUT", bucket_id, data, path, options)

    async def download_file(
        self,
        bucket_id: str,
        path: str,
        options: DownloadOptions | None = None,
    ) -> bytes:
        """Download an object as bytes.

        With options.transform set, the image render endpoint is used instead
        of the plain object endpoint.
        """
        _require_segments(bucket_id=bucket_id, path=path)
        if wants_transform(options):
            url = self._url("render", "image", "authenticated", bucket_id, path)
        else:
            url = self._url("object", bucket_id, path)

        response = await self._request("download_file", "GET", url + build_query(options))
        return response.content

    async def delete_file(self, bucket_id: str, path: str) -> str:
        """Delete one object and return the server's confirmation message."""
        _require_segments(bucket_id=bucket_id, path=path)
        response = await self._request(
            "delete_file", "DELETE", self._url("object", bucket_id, path)
        )
        return self._parse(response, _MESSAGE).message

    async def list_files(
        self,
        bucket_id: str,
        path: str | None = None,
        options: FileSearchOptions | None = None,
    ) -> list[FileObject]:
        """List files and folders under a prefix.

        Args:
            bucket_id: Bucket to list.
            path: Folder prefix; None lists from the bucket root.
            options: Paging, sorting, and name search.
        """
        _require_segments(bucket_id=bucket_id)
        options = options or FileSearchOptions()
        payload = _build(
            ListFilesRequest,
            prefix=path or "",
            limit=options.limit,
            offset=options.offset,
            sort_by=SortByBody(column=options.sort_by.column, order=options.sort_by.order),
            search=options.search,
        )
        response = await self._request(
            "list_files", "POST", self._url("object", "list", bucket_id), json_body=_encode(payload)
        )
        return self._parse(response, _FILE_LIST)

    async def copy_file(
        self,
        from_bucket: str,
        to_bucket: str | None,
        from_path: str,
        to_path: str | None,
        copy_metadata: bool,
    ) -> str:
        """Copy an object and return the new key, prefixed with its bucket.

        The destination bucket defaults to the source bucket, and the
        destination path to the source path.
        """
        payload = _build(
            CopyFileRequest,
            bucket_id=from_bucket,
            source_key=from_path,
            destination_bucket=to_bucket or from_bucket,
            destination_key=to_path or from_path,
            copy_metadata=copy_metadata,
        )
        response = await self._request(
            "copy_file", "POST", self._url("object", "copy"), json_body=_encode(payload)
        )
        return self._parse(response, _COPY).key

    async def move_file(
        self,
        from_bucket: str,
        to_bucket: str | None,
        from_path: str,
        to_path: str,
    ) -> str:
        """Move (rename) an object and return the server's confirmation message.

        The destination bucket defaults to the source bucket.
        """
        payload = _build(
            MoveFileRequest,
            bucket_id=from_bucket,
            source_key=from_path,
            destination_bucket=to_bucket or from_bucket,
            destination_key=to_path,
        )
        response = await self._request(
            "move_file", "POST", self._url("object", "move"), json_body=_encode(payload)
        )
        return self._parse(response, _MESSAGE).message

    # =========================================================================
    # Signed and public URLs
    # =========================================================================

    async def create_signed_url(
        self,
        bucket_id: str,
        path: str,
        expires_in: int,
        options: DownloadOptions | None = None,
    ) -> str:
        """Create a time-limited download URL.

        Returns:
            Absolute URL: base URL + /storage/v1 + the server's signed path.
        """
        _require_segments(bucket_id=bucket_id, path=path)
        transform = None
        if wants_transform(options):
            transform = transform_params(options.transform) or None

        payload = _build(SignedUrlRequest, expires_in=expires_in, transform=transform)
        response = await self._request(
            "create_signed_url",
            "POST",
            self._url("object", "sign", bucket_id, path),
            json_body=_encode(payload),
        )
        signed = self._parse(response, _SIGNED_URL)

        url = absolute_signed_url(self._base_url, signed.signed_url)
        if options is not None and options.download:
            url = append_query(url, {"download": "true"})
        return url

    async def create_multiple_signed_urls(
        self,
        bucket_id: str,
        paths: list[str],
        expires_in: int,
    ) -> list[str]:
        """Create time-limited download URLs for several objects at once.

        Returns:
            Absolute URLs in the order of `paths`.

        Raises:
            StorageApiError: If any path could not be signed. No partial
                results are returned.
        """
        _require_segments(bucket_id=bucket_id)
        payload = _build(MultipleSignedUrlsRequest, expires_in=expires_in, paths=paths)
        response = await self._request(
            "create_multiple_signed_urls",
            "POST",
            self._url("object", "sign", bucket_id),
            json_body=_encode(payload),
        )
        items = self._parse(response, _SIGNED_URL_ITEMS)

        urls = []
        for item in items:
            if item.error or not item.signed_url:
                logger.warning("storage.sign.item_failed", path=item.path)
                raise StorageApiError(response.status_code, _body_text(response))
            urls.append(absolute_signed_url(self._base_url, item.signed_url))
        return urls

    async def create_signed_upload_url(
        self,
        bucket_id: str,
        path: str,
        upsert: bool = False,
    ) -> SignedUploadUrlResponse:
        """Create a signed upload URL and its token.

        Use the token with upload_to_signed_url(). `url` has no hostname.
        """
        _require_segments(bucket_id=bucket_id, path=path)
        headers = {HEADER_UPSERT: "true"} if upsert else None
        response = await self._request(
            "create_signed_upload_url",
            "POST",
            self._url("object", "upload", "sign", bucket_id, path),
            headers=headers,
            json_body="{}",
        )
        return self._parse(response, _SIGNED_UPLOAD_URL)

    async def upload_to_signed_url(
        self,
        bucket_id: str,
        token: str,
        data: bytes,
        path: str,
        options: FileOptions | None = None,
    ) -> UploadResponse:
        """Upload an object with a token from create_signed_upload_url()."""
        _require_segments(bucket_id=bucket_id, path=path)
        response = await self._request(
            "upload_to_signed_url",
            "PUT",
            self._url("object", "upload", "sign", bucket_id, path),
            headers=_file_option_headers(options),
            content=data,
            params={"token": token},
        )
        return self._parse(response, _UPLOAD)

    def get_public_url(
        self,
        bucket_id: str,
        path: str,
        options: DownloadOptions | None = None,
    ) -> str:
        """Build the public URL of an object in a public bucket.

        No request is made. With options.transform set, the URL points at
        the image render endpoint.
        """
        _require_segments(bucket_id=bucket_id, path=path)
        if wants_transform(options):
            url = self._url("render", "image", "public", bucket_id, path)
        else:
            url = self._url("object", "public", bucket_id, path)
        return url + build_query(options)
