"""Header validation and per-request header merging."""

import re
from collections.abc import Mapping

import httpx

from supastore.errors import InvalidHeaderError

HEADER_API_KEY = "apikey"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CACHE_CONTROL = "cache-control"
HEADER_UPSERT = "x-upsert"
HEADER_DUPLEX = "duplex"

# RFC 7230 token
_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Visible ASCII, space and tab; no control characters
_VALUE_RE = re.compile(r"^[\t\x20-\x7e]*$")


def validate_header(name: str, value: str) -> None:
    """Check that a header can be sent as-is.

    Raises:
        InvalidHeaderError: If the name is not a token or the value contains
            control characters or non-ASCII characters.
    """
    if not _NAME_RE.fullmatch(name):
        raise InvalidHeaderError(f"Header name is invalid: {name!r}")
    if not _VALUE_RE.fullmatch(value):
        raise InvalidHeaderError(f"Header value is invalid for {name}")


def auth_headers(api_key: str) -> dict[str, str]:
    """Build the apikey and bearer headers for a credential."""
    return {
        HEADER_API_KEY: api_key,
        HEADER_AUTHORIZATION: f"Bearer {api_key}",
    }


def merge_headers(
    defaults: Mapping[str, str] | httpx.Headers,
    call_headers: Mapping[str, str] | httpx.Headers,
) -> httpx.Headers:
    """Merge client defaults under the headers a call sets itself.

    Call headers always win. A default is added only when the call did not
    set a header of the same name (compared case-insensitively). Neither
    input is modified.
    """
    merged = httpx.Headers(call_headers)
    for name, value in httpx.Headers(defaults).multi_items():
        if name not in merged:
            merged[name] = value
    return merged
