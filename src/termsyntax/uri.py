"""URI and token grammar used by the ``uri``, ``uris``, ``tokens`` and ``words`` rules.

URIs follow the header style used by SIP-like protocols::

    "Alice" <sip:alice:secret@example.com:5060/path;transport=tcp?subject=hi>;tag=1

The display name, angle brackets, user info, port, path, options (``;k=v``),
headers (``?k=v&k2``) and external options after the closing bracket are all
optional. Several URIs can be given separated by commas.

Tokens are comma separated names with options::

    gzip;q=0.8, deflate
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Option = tuple[str, str | None]

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_TOKEN_RE = re.compile(r"^[^\s;,=\"<>]+$")


class UriError(ValueError):
    """Raised when text cannot be parsed as URIs or tokens."""


@dataclass(frozen=True, order=True)
class Uri:
    """A parsed URI.

    Options and headers are kept as ordered ``(name, value)`` tuples; a value of
    ``None`` marks a flag without ``=value``.
    """

    scheme: str = ""
    user: str = ""
    password: str = ""
    domain: str = ""
    port: int = 0
    path: str = ""
    opts: tuple[Option, ...] = field(default_factory=tuple)
    headers: tuple[Option, ...] = field(default_factory=tuple)
    ext_opts: tuple[Option, ...] = field(default_factory=tuple)
    ext_headers: tuple[Option, ...] = field(default_factory=tuple)
    disp: str = ""


@dataclass(frozen=True, order=True)
class Token:
    """A token name with its options."""

    name: str
    opts: tuple[Option, ...] = field(default_factory=tuple)


def _to_text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UriError(f"Invalid UTF-8 input: {e}") from e
    if isinstance(value, str):
        return value
    raise UriError(f"Expected text, got {type(value).__name__}")


def _split_top(text: str, sep: str) -> list[str]:
    """Split *text* on *sep* outside of quotes and angle brackets."""
    parts: list[str] = []
    current: list[str] = []
    quoted = False
    depth = 0
    for ch in text:
        if ch == '"':
            quoted = not quoted
        elif not quoted and ch == "<":
            depth += 1
        elif not quoted and ch == ">":
            depth -= 1
        if ch == sep and not quoted and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if quoted or depth != 0:
        raise UriError(f"Unbalanced quotes or brackets in: {text}")
    parts.append("".join(current))
    return parts


def _parse_options(text: str, sep: str) -> tuple[Option, ...]:
    opts: list[Option] = []
    for item in _split_top(text, sep):
        item = item.strip()
        if not item:
            continue
        name, eq, value = item.partition("=")
        name = name.strip()
        if not _TOKEN_RE.match(name):
            raise UriError(f"Invalid option name: {name!r}")
        if eq:
            value = value.strip()
            if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
                value = value[1:-1]
            opts.append((name, value))
        else:
            opts.append((name, None))
    return tuple(opts)


def _parse_params(text: str) -> tuple[tuple[Option, ...], tuple[Option, ...]]:
    """Parse ``;opts?headers`` into (opts, headers)."""
    opts_text, _, headers_text = text.partition("?")
    if opts_text and not opts_text.startswith(";"):
        raise UriError(f"Unexpected text before options: {opts_text!r}")
    return _parse_options(opts_text, ";"), _parse_options(headers_text, "&")


def _parse_host_port(text: str) -> tuple[str, int]:
    if text.startswith("["):
        end = text.find("]")
        if end < 0:
            raise UriError(f"Unterminated IPv6 literal: {text}")
        host, rest = text[: end + 1], text[end + 1 :]
    else:
        host, colon, port_text = text.partition(":")
        rest = colon + port_text
    if not host:
        raise UriError(f"Missing host in: {text!r}")
    if not rest:
        return host, 0
    if not rest.startswith(":") or not rest[1:].isdigit():
        raise UriError(f"Invalid port in: {text!r}")
    port = int(rest[1:])
    if port > 65535:
        raise UriError(f"Port out of range: {port}")
    return host, port


def _parse_inner(text: str) -> dict:
    scheme, colon, rest = text.partition(":")
    if not colon or not _SCHEME_RE.match(scheme):
        raise UriError(f"Invalid scheme in URI: {text!r}")
    if rest.startswith("//"):
        rest = rest[2:]

    # Options and headers follow the first ';' or '?'
    cut = len(rest)
    for marker in (";", "?"):
        pos = rest.find(marker)
        if pos >= 0:
            cut = min(cut, pos)
    address, params = rest[:cut], rest[cut:]
    if params.startswith("?"):
        opts, headers = (), _parse_options(params[1:], "&")
    else:
        opts, headers = _parse_params(params)

    user = password = ""
    if "@" in address:
        userinfo, _, address = address.rpartition("@")
        user, _, password = userinfo.partition(":")

    path = ""
    slash = address.find("/")
    if slash >= 0:
        address, path = address[:slash], address[slash:]

    domain, port = _parse_host_port(address)
    return {
        "scheme": scheme.lower(),
        "user": user,
        "password": password,
        "domain": domain,
        "port": port,
        "path": path,
        "opts": opts,
        "headers": headers,
    }


def _parse_one(text: str) -> Uri:
    text = text.strip()
    if not text:
        raise UriError("Empty URI")
    if text == "*":
        return Uri(domain="*")

    if "<" not in text:
        return Uri(**_parse_inner(text))

    start = text.index("<")
    end = text.find(">", start)
    if end < 0:
        raise UriError(f"Missing '>' in URI: {text!r}")
    disp = text[:start].strip()
    inner = _parse_inner(text[start + 1 : end])
    ext_opts, ext_headers = _parse_params(text[end + 1 :].strip())
    return Uri(**inner, ext_opts=ext_opts, ext_headers=ext_headers, disp=disp)


def parse_uris(text: str | bytes) -> list[Uri]:
    """Parse one or more comma separated URIs.

    Args:
        text: URI text (``str`` or UTF-8 ``bytes``)

    Returns:
        The parsed URIs in order

    Raises:
        UriError: If any URI is malformed or the text is empty
    """
    text = _to_text(text)
    uris = [_parse_one(part) for part in _split_top(text, ",")]
    logger.debug(f"Parsed {len(uris)} URI(s) from {text!r}")
    return uris


def _render_options(opts: Sequence[Option], lead: str, sep: str) -> str:
    items = [name if value is None else f"{name}={value}" for name, value in opts]
    if not items:
        return ""
    if lead == ";":
        return "".join(f";{item}" for item in items)
    return lead + sep.join(items)


def render_uri(uri: Uri | Sequence[Uri]) -> str:
    """Render a URI, or a list of URIs joined with ``", "``."""
    if not isinstance(uri, Uri):
        return ", ".join(render_uri(u) for u in uri)
    if uri.domain == "*":
        return "*"
    userinfo = ""
    if uri.user:
        userinfo = f"{uri.user}:{uri.password}@" if uri.password else f"{uri.user}@"
    port = f":{uri.port}" if uri.port else ""
    inner = (
        f"{uri.scheme}:{userinfo}{uri.domain}{port}{uri.path}"
        f"{_render_options(uri.opts, ';', ';')}"
        f"{_render_options(uri.headers, '?', '&')}"
    )
    disp = f"{uri.disp} " if uri.disp else ""
    return (
        f"{disp}<{inner}>"
        f"{_render_options(uri.ext_opts, ';', ';')}"
        f"{_render_options(uri.ext_headers, '?', '&')}"
    )


def parse_tokens(text: str | bytes) -> list[Token]:
    """Parse a comma separated list of tokens with ``;name=value`` options.

    Raises:
        UriError: If a token name is missing or malformed
    """
    text = _to_text(text)
    if not text.strip():
        return []
    tokens = []
    for part in _split_top(text, ","):
        name, semi, rest = part.strip().partition(";")
        name = name.strip()
        if not _TOKEN_RE.match(name):
            raise UriError(f"Invalid token: {part.strip()!r}")
        tokens.append(Token(name=name, opts=_parse_options(rest, ";") if semi else ()))
    return tokens


def render_tokens(tokens: Token | Sequence[Token] | None) -> str:
    """Render tokens back to their canonical comma separated text."""
    if tokens is None:
        return ""
    if isinstance(tokens, Token):
        tokens = [tokens]
    return ", ".join(f"{t.name}{_render_options(t.opts, ';', ';')}" for t in tokens)
