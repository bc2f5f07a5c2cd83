"""termsyntax: declarative validation and coercion of configuration terms."""

from termsyntax.syntax import (
    MissingFieldError,
    ParseError,
    ParseOptions,
    ParseResult,
    SyntaxValidator,
    add_defaults,
    add_mandatory,
    compile_schema,
    merge_schema_fragments,
    parse,
)
from termsyntax.version import PACKAGE_VERSION as __version__

__all__ = [
    "parse",
    "SyntaxValidator",
    "compile_schema",
    "merge_schema_fragments",
    "add_defaults",
    "add_mandatory",
    "ParseOptions",
    "ParseResult",
    "ParseError",
    "MissingFieldError",
    "__version__",
]
