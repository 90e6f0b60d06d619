"""
=============================================================================
HTML TEMPLATE SUBSTITUTION
=============================================================================

A tiny CGI-style step: when a form is posted to an HTML page, the page is
treated as a template and the submitted fields are written into it.

    formulario.html                    proceso.html
    ┌────────────────────────┐         ┌──────────────────────────────┐
    │ <form method="post"    │  POST   │ <p>Tu mensaje: %%mensaje%%</p> │
    │  action="proceso.html">│ ──────► └──────────────────────────────┘
    │  <input name="mensaje">│                       │
    └────────────────────────┘                       ▼ render()
                                       ┌──────────────────────────────┐
          body: mensaje=Hola+Mundo     │ <p>Tu mensaje: Hola Mundo</p>  │
                                       └──────────────────────────────┘

=============================================================================
SUBSTITUTION POLICY
=============================================================================

- Placeholders look like %%name%%.
- Each key replaces only its FIRST placeholder. A page that repeats
  %%mensaje%% shows the value once and the raw marker afterwards.
- Keys without a placeholder are ignored; placeholders without a key
  stay in the page verbatim.
- Substitution happens on bytes, so a page that has nothing to replace
  comes back byte-for-byte identical, whatever its encoding.

=============================================================================
"""

from typing import Dict, Mapping
from urllib.parse import unquote_plus


PLACEHOLDER = "%%{}%%"


def render(document: bytes, params: Mapping[str, str]) -> bytes:
    """
    Substitute form values into an HTML document.

    Keys are applied in mapping order, one replacement per key. Keys and
    values are encoded as UTF-8.

    Args:
        document: Raw page bytes as read from disk.
        params:   Field name → value.

    Returns:
        The rendered page.

    Example:
        >>> render(b"<p>%%a%% %%a%%</p>", {"a": "x"})
        b'<p>x %%a%%</p>'
    """
    for key, value in params.items():
        marker = PLACEHOLDER.format(key).encode("utf-8")
        if marker in document:
            document = document.replace(marker, value.encode("utf-8"), 1)
    return document


def parse_form_urlencoded(body: str) -> Dict[str, str]:
    """
    Decode an application/x-www-form-urlencoded body.

    Each pair is split on its first '='; '+' becomes a space before
    percent-decoding. A pair without '=' maps to an empty value and empty
    pairs (from "a=1&&b=2" or a trailing '&') are dropped.

        >>> parse_form_urlencoded("mensaje=Hola+Mundo&x=%C3%B1")
        {'mensaje': 'Hola Mundo', 'x': 'ñ'}
    """
    fields: Dict[str, str] = {}
    for pair in body.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        fields[unquote_plus(name)] = unquote_plus(value)
    return fields
