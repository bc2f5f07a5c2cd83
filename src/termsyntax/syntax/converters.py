"""Primitive value converters for the syntax engine."""

import base64
import binascii
import importlib
import inspect
import ipaddress
import math
import os
import posixpath
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from ..date import DateError, to_3339, to_epoch
from ..uri import UriError, parse_tokens, parse_uris
from .errors import InvalidValue, UnrecognizedRuleTag
from .symbols import Symbol, SymbolTable, symbols

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_BASE64URL_RE = re.compile(rb"^[A-Za-z0-9_-]*$")

LOG_LEVELS: dict[str, int] = {
    "debug": 8,
    "info": 7,
    "notice": 6,
    "warning": 5,
    "error": 4,
    "critical": 3,
    "alert": 2,
    "emergency": 1,
    "none": 0,
}


def _text(value: Any) -> str:
    """Text form of a str, bytes or enum value, or InvalidValue."""
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidValue(f"Invalid UTF-8 text: {value!r}") from None
    if isinstance(value, Enum):
        return _text(value.value) if isinstance(value.value, (str, bytes)) else value.name
    raise InvalidValue(f"Expected text, got {type(value).__name__}")


def to_integer(value: Any) -> int:
    """Generic integer parser: native ints, integral floats and numeric text."""
    if isinstance(value, bool):
        raise InvalidValue(f"Expected integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise InvalidValue(f"Expected integer, got {value!r}")
    if isinstance(value, (str, bytes)):
        text = _text(value)
        if _INTEGER_RE.match(text):
            return int(text)
    raise InvalidValue(f"Expected integer, got {value!r}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, bytes)):
        raise InvalidValue(f"Expected number, got {value!r}")
    try:
        number = float(value if isinstance(value, (int, float)) else _text(value))
    except (ValueError, OverflowError):
        raise InvalidValue(f"Expected number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidValue(f"Expected number, got {value!r}")
    return number


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list):
        try:
            return bytes(value).decode("utf-8")
        except (TypeError, ValueError):
            raise InvalidValue(f"Not a printable sequence: {value!r}") from None
    return _text(value)


def _to_binary(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, list):
        if not value:
            return b""
        if isinstance(value[0], int):
            try:
                return bytes(value)
            except (TypeError, ValueError):
                raise InvalidValue(f"Not a byte sequence: {value!r}") from None
        raise InvalidValue(f"Not a byte sequence: {value!r}")
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode()
    if isinstance(value, (str, Enum)):
        return _text(value).encode("utf-8")
    raise InvalidValue(f"Expected binary, got {type(value).__name__}")


def _to_urltoken(value: Any) -> str:
    chars = []
    for char in _to_string(value):
        if "0" <= char <= "9" or "a" <= char <= "z" or char == "-":
            chars.append(char)
        elif "A" <= char <= "Z":
            chars.append(char.lower())
        elif char == " ":
            chars.append("-")
    return "".join(chars)


def _to_ip(value: Any) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if isinstance(value, int):
        raise InvalidValue(f"Invalid IP address: {value!r}")
    try:
        return ipaddress.ip_address(_text(value).strip())
    except ValueError:
        raise InvalidValue(f"Invalid IP address: {value!r}") from None


def _to_host(value: Any, ipv6_brackets: bool = False) -> str:
    try:
        ip = _to_ip(value)
    except InvalidValue:
        return _to_string(value)
    if ipv6_brackets and ip.version == 6:
        return f"[{ip}]"
    return str(ip)


def _unquote(value: Any) -> str:
    text = _text(value).strip()
    if not text.startswith('"'):
        return text
    if len(text) < 2 or not text.endswith('"'):
        raise InvalidValue(f"Unterminated quoted text: {value!r}")
    return text[1:-1]


def _accepts_arity(func: Any, arity: int) -> bool:
    if not callable(func):
        return False
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    try:
        signature.bind(*([None] * arity))
    except TypeError:
        return False
    return True


def _check_map_keys(value: Any) -> bool:
    """True when every key, at any depth, is text or a symbol."""
    if isinstance(value, Mapping):
        items = list(value.items())
    elif isinstance(value, list):
        items = value
    else:
        return False
    for item in items:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        key, val = item
        if not isinstance(key, (str, bytes)):
            return False
        if isinstance(val, Mapping) and not _check_map_keys(val):
            return False
    return True


class PrimitiveConverter:
    """Converts raw values according to primitive rule tags.

    Every tag is a pure function of the value and the tag arguments, except
    ``atom`` which consults the symbol table and ``module`` which imports.
    """

    def __init__(self, table: SymbolTable = symbols):
        self.table = table

    def to_symbol(self, value: Any) -> Symbol:
        """Resolve *value* to an already interned symbol; never creates one."""
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = _text(value)
        symbol = self.table.lookup(text)
        if symbol is None:
            raise InvalidValue(f"Unknown symbol: {text!r}")
        return symbol

    def convert(self, tag: str, value: Any, *args: Any) -> Any:
        """Convert *value* according to *tag*.

        Args:
            tag: Primitive tag name
            value: Raw input value
            *args: Tag parameters, e.g. integer bounds or enum members

        Returns:
            The coerced value

        Raises:
            InvalidValue: If the tag is known but the value does not match it
            UnrecognizedRuleTag: If the tag and parameters are unknown
        """
        if args:
            return self._convert_parameterized(tag, value, args)

        if tag == "any":
            return value
        elif tag == "atom":
            return self.to_symbol(value)
        elif tag == "boolean":
            if isinstance(value, bool):
                return value
            if value == 0 or value == "0":
                return False
            if value == 1 or value == "1":
                return True
            if value in ("true", b"true"):
                return True
            if value in ("false", b"false"):
                return False
            raise InvalidValue(f"Expected boolean, got {value!r}")
        elif tag == "list":
            if isinstance(value, list):
                return value
            raise InvalidValue(f"Expected list, got {type(value).__name__}")
        elif tag == "module":
            try:
                return importlib.import_module(_text(value))
            except (ImportError, TypeError, ValueError):
                raise InvalidValue(f"Module not found: {value!r}") from None
        elif tag == "integer":
            return to_integer(value)
        elif tag == "pos_integer":
            return self._integer_range(value, 0, None)
        elif tag == "nat_integer":
            return self._integer_range(value, 1, None)
        elif tag == "float":
            return _to_float(value)
        elif tag == "string":
            return _to_string(value)
        elif tag == "binary":
            return _to_binary(value)
        elif tag == "urltoken":
            return _to_urltoken(value)
        elif tag == "base64":
            try:
                return base64.b64decode(_to_binary(value), validate=True)
            except binascii.Error:
                raise InvalidValue(f"Invalid base64 data: {value!r}") from None
        elif tag == "base64url":
            data = _to_binary(value).rstrip(b"=")
            if not _BASE64URL_RE.match(data):
                raise InvalidValue(f"Invalid base64url data: {value!r}")
            data = data.translate(bytes.maketrans(b"-_", b"+/"))
            try:
                return base64.b64decode(data + b"=" * (-len(data) % 4), validate=True)
            except binascii.Error:
                raise InvalidValue(f"Invalid base64url data: {value!r}") from None
        elif tag == "lower":
            return _to_string(value).lower()
        elif tag == "upper":
            return _to_string(value).upper()
        elif tag == "ip":
            return _to_ip(value)
        elif tag in ("ip4", "ip6"):
            ip = _to_ip(value)
            if ip.version != int(tag[-1]):
                raise InvalidValue(f"Expected IPv{tag[-1]} address, got {value!r}")
            return ip
        elif tag == "host":
            return _to_host(value)
        elif tag == "host6":
            return _to_host(value, ipv6_brackets=True)
        elif tag == "email":
            text = _to_string(value)
            if text.count("@") != 1:
                raise InvalidValue(f"Invalid email: {value!r}")
            return text
        elif tag == "unquote":
            return _unquote(value)
        elif tag == "path":
            return posixpath.normpath(_text(value))
        elif tag == "fullpath":
            return os.path.normpath(os.path.abspath(_text(value)))
        elif tag in ("uri", "uris", "tokens", "words"):
            return self._convert_grammar(tag, value)
        elif tag == "map":
            if not _check_map_keys(value):
                raise InvalidValue(f"Expected a map with text keys, got {value!r}")
            return dict(value)
        elif tag == "log_level":
            if isinstance(value, int) and not isinstance(value, bool):
                if 0 <= value <= 8:
                    return value
                raise InvalidValue(f"Log level out of range: {value}")
            try:
                return LOG_LEVELS[_text(value)]
            except KeyError:
                raise InvalidValue(f"Unknown log level: {value!r}") from None
        elif tag == "rfc3339":
            return self._convert_date(to_3339, value, "secs")
        elif tag == "epoch":
            return self._convert_date(to_epoch, value, "secs")

        raise UnrecognizedRuleTag(tag)

    def _convert_parameterized(self, tag: str, value: Any, args: tuple) -> Any:
        if tag == "atom" and len(args) == 1:
            symbol = self.to_symbol(value)
            if symbol not in args[0]:
                raise InvalidValue(f"{symbol!r} is not one of {list(args[0])}")
            return symbol
        elif tag == "integer" and len(args) == 2:
            return self._integer_range(value, args[0], args[1])
        elif tag == "integer" and len(args) == 1 and isinstance(args[0], (list, tuple, set, frozenset)):
            number = to_integer(value)
            if number not in args[0]:
                raise InvalidValue(f"{number} is not one of {sorted(args[0])}")
            return number
        elif tag == "record" and len(args) == 1 and isinstance(args[0], type):
            if isinstance(value, args[0]):
                return value
            raise InvalidValue(f"Expected {args[0].__name__}, got {type(value).__name__}")
        elif tag == "function" and len(args) == 1 and isinstance(args[0], int):
            if _accepts_arity(value, args[0]):
                return value
            raise InvalidValue(f"Expected a function of arity {args[0]}")
        elif tag == "rfc3339" and len(args) == 1:
            return self._convert_date(to_3339, value, args[0])
        elif tag == "epoch" and len(args) == 1:
            return self._convert_date(to_epoch, value, args[0])

        raise UnrecognizedRuleTag((tag, *args))

    @staticmethod
    def _integer_range(value: Any, minimum: int | None, maximum: int | None) -> int:
        number = to_integer(value)
        if minimum is not None and number < minimum:
            raise InvalidValue(f"Value must be >= {minimum}")
        if maximum is not None and number > maximum:
            raise InvalidValue(f"Value must be <= {maximum}")
        return number

    @staticmethod
    def _convert_grammar(tag: str, value: Any) -> Any:
        if not isinstance(value, (str, bytes)):
            raise InvalidValue(f"Expected text for {tag}, got {type(value).__name__}")
        try:
            if tag == "uri":
                uris = parse_uris(value)
                if len(uris) != 1:
                    raise InvalidValue(f"Expected a single URI, got {len(uris)}")
                return uris[0]
            if tag == "uris":
                return parse_uris(value)
            tokens = parse_tokens(value)
        except UriError as e:
            raise InvalidValue(str(e)) from e
        if tag == "words":
            return [token.name for token in tokens]
        return tokens

    @staticmethod
    def _convert_date(func: Any, value: Any, unit: str) -> Any:
        try:
            return func(value, unit)
        except DateError as e:
            raise InvalidValue(str(e)) from e
