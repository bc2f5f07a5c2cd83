"""Tests for termsyntax.uri module."""

import pytest

from termsyntax.uri import Token, Uri, UriError, parse_tokens, parse_uris, render_tokens, render_uri

FULL_URI = '"Alice" <sip:alice:secret@example.com:5060/path;transport=tcp?subject=hi>;tag=1'


class TestParseUris:
    """Test URI parsing and rendering."""

    def test_full_uri(self):
        """Test a URI using every optional part."""
        [uri] = parse_uris(FULL_URI)
        assert uri == Uri(
            scheme="sip",
            user="alice",
            password="secret",
            domain="example.com",
            port=5060,
            path="/path",
            opts=(("transport", "tcp"),),
            headers=(("subject", "hi"),),
            ext_opts=(("tag", "1"),),
            disp='"Alice"',
        )

    def test_render_roundtrip(self):
        """Test that rendering produces text that parses to the same URI."""
        uris = parse_uris(FULL_URI)
        assert render_uri(uris[0]) == FULL_URI
        assert parse_uris(render_uri(uris)) == uris

    def test_simple_forms(self):
        """Test bare URIs, wildcards, IPv6 literals and bytes input."""
        assert parse_uris("SIP:bob@Example.com")[0].scheme == "sip"
        assert parse_uris("*") == [Uri(domain="*")]
        assert render_uri(Uri(domain="*")) == "*"

        [uri] = parse_uris(b"sip:[::1]:5070")
        assert (uri.domain, uri.port) == ("[::1]", 5070)

        [uri] = parse_uris("sip:carol@x;lr")
        assert uri.opts == (("lr", None),)
        assert render_uri(uri) == "<sip:carol@x;lr>"

    def test_multiple(self):
        """Test comma separated URIs."""
        uris = parse_uris("<sip:a@x>, <sip:b@y>")
        assert [u.domain for u in uris] == ["x", "y"]
        assert render_uri(uris) == "<sip:a@x>, <sip:b@y>"

    @pytest.mark.parametrize("text", ["nope", "sip:a@b:99999", "", "<sip:a@b", "sip:a@b:port", 5])
    def test_invalid(self, text):
        """Test malformed URI text."""
        with pytest.raises(UriError):
            parse_uris(text)


class TestTokens:
    """Test token lists."""

    def test_parse(self):
        """Test tokens with and without options."""
        assert parse_tokens("gzip;q=0.8, deflate;x") == [
            Token("gzip", (("q", "0.8"),)),
            Token("deflate", (("x", None),)),
        ]
        assert parse_tokens("") == []
        assert parse_tokens(b"  ") == []

    def test_invalid(self):
        """Test token names with spaces or missing names."""
        with pytest.raises(UriError):
            parse_tokens("a b")
        with pytest.raises(UriError):
            parse_tokens("a, ,b")

    def test_render(self):
        """Test rendering tokens back to text."""
        assert render_tokens(None) == ""
        assert render_tokens(Token("gzip")) == "gzip"
        assert render_tokens(parse_tokens("gzip;q=0.8, deflate")) == "gzip;q=0.8, deflate"
