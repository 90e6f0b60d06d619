"""
=============================================================================
RESOURCE RESOLVER
=============================================================================

Maps a parsed Request onto a file under the served root and decides which
of the four responses to send.

=============================================================================
RESOLUTION STATE MACHINE
=============================================================================

                          Request
                             │
               ┌─────────────┴──────────────┐
         GET / HEAD / POST                OTHER ──────────────► 501 + 501.html
               │
        "/" → index.html
        "/a/b.css" → a/b.css
               │
        file exists? ── no ─────────────────────────────────────► 404 + 404.html
               │ yes
        type in Accept? ── no ──────────────────────────────────► 406 + 406.html
               │ yes            (no Accept header means */*)
               │
        ┌──────┴──────────────┐
       HEAD               GET / POST
        │                     │
        │              read file bytes
        │              body sent and text/html? ── yes ──► render(form fields)
        │                     │
        ▼                     ▼
   200, no body         200, file bytes

Single pass, no retries. The 501 branch never touches the file system for
the requested resource.

=============================================================================
FAILURE MODES
=============================================================================

- Status page missing     → StatusPageError. This is a deployment defect;
                            check_status_pages() catches it at boot.
- Reading a valid file    → ResourceReadError. Fatal for the connection,
  fails (EACCES, EIO...)    no partial or fallback response.

=============================================================================
SECURITY
=============================================================================

Names are resolved against the root and rejected if they land outside it,
so "/../../etc/passwd" is simply "not found". Directories are not
resources either, and neither are names the OS refuses to look up
("/%00.html", a 300-character file name).

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional
from urllib.parse import unquote

from ..http.mime import MimeType, classify, parse_accept_list, is_accepted, is_html, ANY
from ..http.request import Method, Request
from ..http.response import (
    Response,
    SERVER_NAME,
    ok,
    not_found,
    not_acceptable,
    not_implemented,
)
from ..http.template import render, parse_form_urlencoded


INDEX_FILE = "index.html"

# Status pages that must exist under every served root
STATUS_PAGES = ("404.html", "406.html", "501.html")


class StatusPageError(Exception):
    """A fixed status page (404/406/501.html) is missing or unreadable."""


class ResourceReadError(Exception):
    """An existing, accepted resource could not be read."""


class FileTree(ABC):
    """
    Read-only view of the served root.

    Names are relative to the root, e.g. "index.html" or "css/site.css".
    The resolver only needs these two operations, which keeps it testable
    with an in-memory tree.
    """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """True if `name` is a readable file inside the root."""

    @abstractmethod
    def read_all(self, name: str) -> bytes:
        """Return the whole file. Raises OSError on failure."""


class LocalFileTree(FileTree):
    """FileTree backed by a directory on disk."""

    def __init__(self, root: str | Path):
        # Resolve once so the containment check below compares real paths
        self.root = Path(root).resolve()

    def _locate(self, name: str) -> Optional[Path]:
        """
        Resolve `name` under the root.

        Returns None when the resolved path escapes the root (via "..",
        an absolute name, or a symlink pointing outside) or when the OS
        rejects the name outright (embedded NUL, component too long).
        """
        try:
            full_path = (self.root / name).resolve()
            full_path.relative_to(self.root)
        except (OSError, ValueError):
            return None
        return full_path

    def exists(self, name: str) -> bool:
        path = self._locate(name)
        if path is None:
            return False
        try:
            return path.is_file()
        except (OSError, ValueError):
            return False

    def read_all(self, name: str) -> bytes:
        path = self._locate(name)
        if path is None:
            raise FileNotFoundError(name)
        return path.read_bytes()


class ResourceResolver:
    """
    Turns a Request into a Response using a FileTree.

    Usage:
        resolver = ResourceResolver(LocalFileTree("www"))
        resolver.check_status_pages()     # once, at startup
        response = resolver.resolve(request)

    Dispatch is a table keyed by Method. The constructor refuses to build a
    resolver whose table does not cover every Method member.
    """

    def __init__(
        self,
        files: FileTree,
        server_name: str = SERVER_NAME,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            files:       The served root.
            server_name: Value of the Server header on every response.
            clock:       Time source for the Date header.
            logger:      Where to log decisions; defaults to this module's.
        """
        self.files = files
        self.server_name = server_name
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

        self._dispatch: Dict[Method, Callable[[Request], Response]] = {
            Method.GET: self._serve,
            Method.POST: self._serve,
            Method.HEAD: self._head,
            Method.OTHER: self._not_implemented,
        }
        missing = set(Method) - set(self._dispatch)
        if missing:
            raise TypeError(f"No handler for methods: {sorted(m.value for m in missing)}")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def resolve(self, request: Request) -> Response:
        """
        Produce the response for `request`.

        Raises:
            StatusPageError:   A status page needed for the answer is missing.
            ResourceReadError: The target file exists but could not be read.
        """
        return self._dispatch[request.method](request)

    def check_status_pages(self) -> None:
        """
        Verify every status page exists under the root.

        Called at server startup so a broken deployment fails immediately
        instead of on the first 404.
        """
        missing = [page for page in STATUS_PAGES if not self.files.exists(page)]
        if missing:
            raise StatusPageError(f"Missing status pages: {', '.join(missing)}")

    @staticmethod
    def resource_name(resource: str) -> str:
        """
        File name for a request resource.

            "/"               → "index.html"
            "/proceso.html"   → "proceso.html"
            "/mi%20foto.png"  → "mi foto.png"
        """
        name = unquote(resource[1:] if resource.startswith("/") else resource)
        return name or INDEX_FILE

    # =========================================================================
    # METHOD HANDLERS
    # =========================================================================

    def _serve(self, request: Request) -> Response:
        """GET and POST: send the file, templating HTML when a body was posted."""
        name = self.resource_name(request.resource)
        refusal = self._refuse(request, name)
        if refusal is not None:
            return refusal

        mime_type = classify(name)
        data = self._read(name)

        if request.body and is_html(mime_type):
            fields = parse_form_urlencoded(request.body)
            self.logger.debug(f"Rendering {name} with fields {sorted(fields)}")
            data = render(data, fields)

        return ok(data, str(mime_type), self.server_name, self.clock)

    def _head(self, request: Request) -> Response:
        """HEAD: same checks as GET, no body, original Content-Type."""
        name = self.resource_name(request.resource)
        refusal = self._refuse(request, name)
        if refusal is not None:
            return refusal

        return ok(None, str(classify(name)), self.server_name, self.clock)

    def _not_implemented(self, request: Request) -> Response:
        self.logger.debug(f"Method {request.method_name} not implemented")
        return not_implemented(self._status_page("501.html"), self.server_name, self.clock)

    # =========================================================================
    # POLICY HELPERS
    # =========================================================================

    def _refuse(self, request: Request, name: str) -> Optional[Response]:
        """
        Existence and Accept checks shared by GET, HEAD and POST.

        Returns the 404/406 response to send, or None to carry on.
        """
        if not self.files.exists(name):
            self.logger.debug(f"Resource not found: {name}")
            return not_found(self._status_page("404.html"), self.server_name, self.clock)

        mime_type = classify(name)
        accepted = self._accepted_types(request)
        if not is_accepted(mime_type, accepted):
            self.logger.debug(f"{mime_type} not in Accept {sorted(map(str, accepted))}")
            return not_acceptable(self._status_page("406.html"), self.server_name, self.clock)

        return None

    @staticmethod
    def _accepted_types(request: Request) -> frozenset[MimeType]:
        """Accept set for the request. No header (or an empty one) means */*."""
        header = request.accept
        if not header or not header.strip():
            return frozenset({ANY})
        return parse_accept_list(header)

    def _read(self, name: str) -> bytes:
        try:
            return self.files.read_all(name)
        except OSError as e:
            raise ResourceReadError(f"Failed to read {name}: {e}") from e

    def _status_page(self, page: str) -> bytes:
        try:
            return self.files.read_all(page)
        except OSError as e:
            raise StatusPageError(f"Status page {page} unavailable: {e}") from e
