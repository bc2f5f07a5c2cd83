"""Options, results and callback context of a parse call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from termsyntax.models import SyntaxBaseModel


class ParseOptions(SyntaxBaseModel):
    """Call-scoped options of :func:`termsyntax.syntax.parse`.

    Attributes:
        path: Dotted path prefix of the level being parsed, used for error
            reporting and for qualifying flattened and unknown keys.
        warn_unknown: Log a warning listing the unknown keys found.
    """

    path: str = Field(default="", description="Dotted path prefix of the parsed level")
    warn_unknown: bool = Field(default=False, description="Log unknown keys as a warning")


@dataclass
class ParseResult:
    """Outcome of a successful parse.

    Attributes:
        values: Accepted and coerced values, in first-occurrence order
        flattened: ``(dotted_path, value)`` pairs for every accepted key,
            nested keys included
        unknown: Dotted paths of keys with no rule, in encounter order
    """

    values: dict[str, Any] = field(default_factory=dict)
    flattened: list[tuple[str, Any]] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CallbackContext:
    """Snapshot of the current level handed to context callbacks."""

    accepted: Mapping[str, Any]
    flattened: tuple[tuple[str, Any], ...]
    unknown: tuple[str, ...]
    path: str
    options: ParseOptions
