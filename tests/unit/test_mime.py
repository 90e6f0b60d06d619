"""
Unit tests for MIME classification and Accept negotiation.
"""

import pytest

from miservidor.http.mime import (
    ANY,
    HTML,
    OCTET_STREAM,
    MimeType,
    classify,
    is_accepted,
    is_html,
    parse_accept_list,
)


class TestMimeType:
    """Tests for the MimeType pair."""

    def test_parse_drops_parameters(self):
        """Test that ;q= and charset parameters are ignored."""
        assert MimeType.parse("text/html; charset=utf-8") == MimeType("text", "html")
        assert MimeType.parse(" image/png;q=0.8 ") == MimeType("image", "png")

    def test_parse_lowercases(self):
        """Test that media types compare case-insensitively."""
        assert MimeType.parse("Text/HTML") == HTML

    def test_parse_without_slash(self):
        """Test that a bare token gets an empty subtype."""
        assert MimeType.parse("html") == MimeType("html", "")

    def test_str(self):
        """Test the wire representation."""
        assert str(MimeType("application", "json")) == "application/json"
        assert str(ANY) == "*/*"


class TestClassify:
    """Tests for extension lookup."""

    @pytest.mark.parametrize("name,expected", [
        ("index.html", "text/html"),
        ("css/site.css", "text/css"),
        ("app.js", "application/javascript"),
        ("logo.gif", "image/gif"),
        ("favicon.ico", "image/x-icon"),
        ("foto.JPG", "image/jpeg"),
        ("doc.pdf", "application/pdf"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        """Test classification of common files."""
        assert str(classify(name)) == expected

    @pytest.mark.parametrize("name", ["README", "archivo.desconocido", "", "dir/"])
    def test_unknown_falls_back_to_octet_stream(self, name: str):
        """Test the default type."""
        assert classify(name) == OCTET_STREAM

    def test_uses_last_suffix(self):
        """Test that only the final extension counts."""
        assert str(classify("backup.html.gz")) == "application/gzip"


class TestAcceptNegotiation:
    """Tests for parse_accept_list and is_accepted."""

    def test_parse_browser_header(self):
        """Test a typical browser Accept header."""
        accepted = parse_accept_list(
            "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
        )

        assert accepted == frozenset({
            HTML,
            MimeType("application", "xhtml+xml"),
            MimeType("application", "xml"),
            ANY,
        })

    def test_parse_skips_empty_entries(self):
        """Test stray commas."""
        assert parse_accept_list("text/css,, ,") == frozenset({MimeType("text", "css")})

    def test_exact_match(self):
        """Test that a listed type is accepted."""
        assert is_accepted(HTML, parse_accept_list("image/gif, text/html"))

    def test_not_listed(self):
        """Test that an unlisted type is refused."""
        assert not is_accepted(HTML, parse_accept_list("image/gif"))

    def test_wildcard_accepts_everything(self):
        """Test the */* wildcard."""
        assert is_accepted(OCTET_STREAM, parse_accept_list("*/*"))

    def test_partial_wildcard_is_not_expanded(self):
        """Test that text/* does not admit text/html."""
        assert not is_accepted(HTML, parse_accept_list("text/*"))

    def test_is_html_is_exact(self):
        """Test that only text/html is treated as a template."""
        assert is_html(classify("index.html"))
        assert not is_html(classify("page.xhtml"))
        assert not is_html(classify("style.css"))
