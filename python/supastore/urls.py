"""URL and query-string construction for the storage API.

All endpoint URLs are built here:
    {base_url}/storage/v1/{segment}/{segment}/...

Query parameters for image transforms are emitted in a fixed order
(width, height, resize, format, quality, download) so generated URLs are
stable and comparable.
"""

from urllib.parse import urlencode

from supastore.models import DownloadOptions, TransformOptions

STORAGE_V1 = "/storage/v1"

# Resize modes understood by the render endpoint; anything else is dropped
RESIZE_MODES = frozenset({"cover", "contain", "fill"})


def storage_url(base_url: str, *segments: str) -> str:
    """Build an absolute storage API URL.

    Leading and trailing slashes on each segment are dropped so that callers
    can pass object paths as given ("/folder/a.txt" and "folder/a.txt" are
    the same object).

    Example:
        >>> storage_url("https://x.supabase.co", "object", "avatars", "/a.png")
        'https://x.supabase.co/storage/v1/object/avatars/a.png'
    """
    path = "/".join(segment.strip("/") for segment in segments if segment.strip("/"))
    return f"{base_url.rstrip('/')}{STORAGE_V1}/{path}"


def transform_params(transform: TransformOptions) -> dict[str, str | int]:
    """Collect the set transform fields, in query order.

    Unsupported resize values are omitted rather than rejected.
    """
    params: dict[str, str | int] = {}
    if transform.width is not None:
        params["width"] = transform.width
    if transform.height is not None:
        params["height"] = transform.height
    if transform.resize is not None and transform.resize in RESIZE_MODES:
        params["resize"] = transform.resize
    if transform.format is not None:
        params["format"] = transform.format
    if transform.quality is not None:
        params["quality"] = transform.quality
    return params


def build_query(options: DownloadOptions | None) -> str:
    """Build the query string for download and public URLs.

    Returns:
        "" when there is nothing to send, otherwise "?k=v&k=v".
    """
    if options is None:
        return ""

    params: dict[str, str | int] = {}
    if options.transform is not None:
        params.update(transform_params(options.transform))
    if options.download:
        params["download"] = "true"

    if not params:
        return ""
    return f"?{urlencode(params)}"


def wants_transform(options: DownloadOptions | None) -> bool:
    """Whether a request should go to the image render endpoint."""
    return options is not None and options.transform is not None


def append_query(url: str, params: dict[str, str]) -> str:
    """Append query parameters to a URL that may already have a query."""
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(params)}"


def absolute_signed_url(base_url: str, signed_path: str) -> str:
    """Turn the server's signed path into an absolute URL.

    The service usually returns a path relative to the storage API root
    ("/object/sign/..."), but may include the "/storage/v1" prefix or a full URL.
    """
    if signed_path.startswith("http://") or signed_path.startswith("https://"):
        return signed_path

    base_url = base_url.rstrip("/")
    if signed_path.lstrip("/").startswith("storage/"):
        return f"{base_url}/{signed_path.lstrip('/')}"

    return f"{base_url}{STORAGE_V1}/{signed_path.lstrip('/')}"
