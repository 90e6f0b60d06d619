"""
=============================================================================
MIME TYPE CLASSIFICATION AND NEGOTIATION
=============================================================================

Maps resource names to MIME types and decides whether a client's Accept
header admits a given type.

=============================================================================
WHAT IS A MIME TYPE?
=============================================================================

A MIME type tells the client how to interpret a response body. It has the
form type/subtype:

    text/html               image/png              application/pdf
    ──┬─ ──┬─               ──┬── ─┬─              ─────┬───── ─┬─
      │    └ subtype          │    └ subtype            │       └ subtype
      └ type                  └ type                    └ type

=============================================================================
CONTENT NEGOTIATION
=============================================================================

The client lists what it can handle in the Accept header:

    Accept: text/html, application/xhtml+xml;q=0.9, */*;q=0.8

We only care about the type/subtype pairs. Parameters after ';' (quality
values and friends) are dropped before comparing. A resource is acceptable
when its exact type is listed or the list contains the */* wildcard.

    resource: index.html  → text/html
    Accept:   text/html   → accepted
    Accept:   image/gif   → 406 Not Acceptable
    Accept:   */*         → accepted

Partial wildcards such as text/* are NOT expanded.

=============================================================================
"""

from pathlib import Path
from typing import NamedTuple, Iterable


class MimeType(NamedTuple):
    """
    A (type, subtype) pair.

    Being a NamedTuple makes it hashable, so accept lists can be sets and
    membership checks are O(1).

        >>> MimeType.parse("text/html; charset=utf-8")
        MimeType(type='text', subtype='html')
        >>> str(MimeType("image", "png"))
        'image/png'
    """

    type: str
    subtype: str

    @classmethod
    def parse(cls, value: str) -> "MimeType":
        """
        Parse a "type/subtype[;params]" string.

        Parameters are discarded and both halves are lowercased since
        media types are case-insensitive. A value without a slash gets an
        empty subtype, which never matches a real resource type.
        """
        essence = value.split(";", 1)[0].strip().lower()
        main, _, sub = essence.partition("/")
        return cls(main.strip(), sub.strip())

    def __str__(self) -> str:
        return f"{self.type}/{self.subtype}"


ANY = MimeType("*", "*")
HTML = MimeType("text", "html")
OCTET_STREAM = MimeType("application", "octet-stream")


# =============================================================================
# EXTENSION TABLE
# =============================================================================
#
# Extension (lowercase, with dot) → MIME type, following the mime.types
# table shipped with Apache and nginx for the formats a small site serves.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".shtml": "text/html",
    ".css": "text/css",
    ".csv": "text/csv",
    ".txt": "text/plain",
    ".text": "text/plain",
    ".log": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".xml": "application/xml",
    ".rtf": "application/rtf",
    ".vcf": "text/vcard",
    ".ics": "text/calendar",

    # -------------------------------------------------------------------------
    # SCRIPTS AND DATA
    # -------------------------------------------------------------------------
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".jsonld": "application/ld+json",
    ".webmanifest": "application/manifest+json",
    ".wasm": "application/wasm",
    ".atom": "application/atom+xml",
    ".rss": "application/rss+xml",
    ".xhtml": "application/xhtml+xml",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".jpe": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".svgz": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",

    # -------------------------------------------------------------------------
    # FONTS
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".ogv": "video/ogg",
    ".webm": "video/webm",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",

    # -------------------------------------------------------------------------
    # DOCUMENTS AND ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".odt": "application/vnd.oasis.opendocument.text",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".7z": "application/x-7z-compressed",
    ".rar": "application/vnd.rar",
}


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def classify(resource_name: str | Path) -> MimeType:
    """
    Get the MIME type for a resource based on its extension.

    Pure lookup: no file system access, same answer for the same name.

    Examples:
        >>> classify("index.html")
        MimeType(type='text', subtype='html')

        >>> str(classify("img/Logo.PNG"))
        'image/png'

        >>> str(classify("archivo.desconocido"))
        'application/octet-stream'
    """
    extension = Path(resource_name).suffix.lower()  # .PNG → .png
    mime_type = MIME_TYPES.get(extension)
    if mime_type is None:
        return OCTET_STREAM
    return MimeType.parse(mime_type)


def parse_accept_list(header_value: str) -> frozenset[MimeType]:
    """
    Convert an Accept header value into a set of MIME types.

        >>> sorted(map(str, parse_accept_list("text/html;q=0.9, image/gif")))
        ['image/gif', 'text/html']

    Empty entries (stray commas) are skipped.
    """
    return frozenset(
        MimeType.parse(entry)
        for entry in header_value.split(",")
        if entry.strip()
    )


def is_accepted(candidate: MimeType, accepted: Iterable[MimeType]) -> bool:
    """
    Check whether `candidate` is admitted by an accept set.

    True if the exact type is in the set or the set contains */*.
    Callers decide what an absent Accept header means; the resolver treats
    it as */*.
    """
    accepted = frozenset(accepted)
    return candidate in accepted or ANY in accepted


def is_html(mime_type: MimeType) -> bool:
    """Only exactly text/html counts; xhtml and friends do not."""
    return mime_type == HTML
