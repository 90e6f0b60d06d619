"""
Request handlers.

The only handler this server needs is the static file resolver: every
request is answered from the served root.
"""

from .static import (
    FileTree,
    LocalFileTree,
    ResourceResolver,
    ResourceReadError,
    StatusPageError,
    STATUS_PAGES,
)

__all__ = [
    "FileTree",
    "LocalFileTree",
    "ResourceResolver",
    "ResourceReadError",
    "StatusPageError",
    "STATUS_PAGES",
]
