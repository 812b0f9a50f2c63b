"""MIME types accepted by bucket and upload options.

MimeType is a closed enum of well-known types. CustomMimeType is the single
escape hatch for anything else (including wildcards such as "image/*").
Anything that accepts a MIME type takes either one, or a plain string.
"""

import re
from dataclasses import dataclass
from enum import Enum


class MimeType(str, Enum):
    """Well-known MIME types.

    Some names share a value (JAVASCRIPT_MODULE is JAVASCRIPT, OPUS_AUDIO is
    OGG_AUDIO); Enum treats the later name as an alias.
    """

    AAC = "audio/aac"
    ABI_WORD = "application/x-abiword"
    APNG = "image/apng"
    ARCHIVE = "application/x-freearc"
    AVIF = "image/avif"
    AVI = "video/x-msvideo"
    AMAZON_KINDLE = "application/vnd.amazon.ebook"
    BINARY_DATA = "application/octet-stream"
    BMP = "image/bmp"
    BZIP = "application/x-bzip"
    BZIP2 = "application/x-bzip2"
    CD_AUDIO = "application/x-cdf"
    C_SHELL_SCRIPT = "application/x-csh"
    CSS = "text/css"
    CSV = "text/csv"
    DOC = "application/msword"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    EOT = "application/vnd.ms-fontobject"
    EPUB = "application/epub+zip"
    GZIP = "application/gzip"
    GIF = "image/gif"
    HTML = "text/html"
    ICON = "image/vnd.microsoft.icon"
    ICALENDAR = "text/calendar"
    JAR = "application/java-archive"
    JPEG = "image/jpeg"
    JAVASCRIPT = "text/javascript"
    JSON = "application/json"
    JSONLD = "application/ld+json"
    MIDI = "audio/midi"
    JAVASCRIPT_MODULE = "text/javascript"
    MP3 = "audio/mpeg"
    MP4 = "video/mp4"
    MPEG = "video/mpeg"
    APPLE_INSTALLER = "application/vnd.apple.installer+xml"
    ODP = "application/vnd.oasis.opendocument.presentation"
    ODS = "application/vnd.oasis.opendocument.spreadsheet"
    ODT = "application/vnd.oasis.opendocument.text"
    OGG_AUDIO = "audio/ogg"
    OGG_VIDEO = "video/ogg"
    OGG = "application/ogg"
    OPUS_AUDIO = "audio/ogg"
    OTF = "font/otf"
    PNG = "image/png"
    PDF = "application/pdf"
    PHP = "application/x-httpd-php"
    PPT = "application/vnd.ms-powerpoint"
    PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    RAR = "application/vnd.rar"
    RTF = "application/rtf"
    SHELL_SCRIPT = "application/x-sh"
    SVG = "image/svg+xml"
    TAR = "application/x-tar"
    TIFF = "image/tiff"
    MPEG_TRANSPORT_STREAM = "video/mp2t"
    TTF = "font/ttf"
    PLAIN_TEXT = "text/plain"
    VISIO = "application/vnd.visio"
    WAV = "audio/wav"
    WEBM_AUDIO = "audio/webm"
    WEBM_VIDEO = "video/webm"
    WEBP = "image/webp"
    WOFF = "font/woff"
    WOFF2 = "font/woff2"
    XHTML = "application/xhtml+xml"
    XLS = "application/vnd.ms-excel"
    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    XML = "application/xml"
    XUL = "application/vnd.mozilla.xul+xml"
    ZIP = "application/zip"
    THREE_GPP = "video/3gpp"
    THREE_GPP2 = "video/3gpp2"
    SEVEN_ZIP = "application/x-7z-compressed"

    def __str__(self) -> str:
        return self.value


# type "/" subtype, where subtype may be "*", followed by any number of
# ";name=value" parameters (value is a token or a quoted string)
_TOKEN = r"[A-Za-z0-9!#$%&'*+.^_`|~-]+"
_MIME_RE = re.compile(
    rf'^{_TOKEN}/(?:{_TOKEN}|\*)(?:[ \t]*;[ \t]*{_TOKEN}=(?:{_TOKEN}|"[\t\x20\x21\x23-\x7e]*"))*$'
)


@dataclass(frozen=True)
class CustomMimeType:
    """A MIME type not covered by MimeType.

    Parameters are allowed, e.g. "text/plain; charset=utf-8".

    Attributes:
        value: The MIME string, returned unchanged by str().

    Raises:
        ValueError: If value is not of the form "type/subtype[; name=value]*".
    """

    value: str

    def __post_init__(self):
        if not _MIME_RE.fullmatch(self.value):
            raise ValueError(f"Invalid MIME type: {self.value!r}")

    def __str__(self) -> str:
        return self.value


MimeLike = MimeType | CustomMimeType | str


def mime_to_str(mime: MimeLike) -> str:
    """Convert any accepted MIME representation to its wire string.

    Plain strings are validated the same way as CustomMimeType and returned
    exactly as given.
    """
    if isinstance(mime, MimeType):
        return mime.value
    if isinstance(mime, CustomMimeType):
        return mime.value
    return CustomMimeType(mime).value
