"""Exceptions raised by the syntax engine.

Data errors derive from :class:`ParseError` (a ``ValueError``) and carry the
dotted path of the offending field. Schema authoring defects and callback
crashes are kept out of that hierarchy so callers that handle bad input do not
silently swallow programming errors.
"""

from typing import Any


class ParseError(ValueError):
    """Base class for validation failures of input terms.

    Attributes:
        path: Dotted path of the field that failed (e.g. ``"server.port"``)
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


class InvalidFieldError(ParseError):
    """A field value failed its rule's validation or coercion."""

    def __init__(self, path: str):
        super().__init__(f"Invalid value for field: {path}", path)


class MissingFieldError(ParseError):
    """A mandatory field is absent after defaults were applied."""

    def __init__(self, path: str):
        super().__init__(f"Missing mandatory field: {path}", path)


class CallbackError(ParseError):
    """A user callback rejected a field with its own error payload.

    Attributes:
        detail: The payload returned by the callback, unchanged
    """

    def __init__(self, detail: Any, path: str = ""):
        self.detail = detail
        super().__init__(f"Callback rejected field {path}: {detail!r}", path)


class InvalidSchemaError(TypeError):
    """A schema definition is malformed."""


class UnrecognizedRuleTag(InvalidSchemaError):
    """A schema uses a rule tag the engine does not know.

    This signals a defect in schema construction, not bad input data.
    """

    def __init__(self, tag: Any):
        self.tag = tag
        super().__init__(f"Unrecognized rule tag: {tag!r}")


class CallbackFault(RuntimeError):
    """A user callback raised an exception while validating a field."""

    def __init__(self, key: str, path: str):
        self.key = key
        self.path = path
        super().__init__(f"Error calling syntax callback for field {path}")


class InvalidValue(Exception):
    """Raised by primitive converters when a value does not match a known tag."""
