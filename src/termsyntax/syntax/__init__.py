"""Declarative validation and coercion of configuration terms.

Example:
    >>> from termsyntax.syntax import parse
    >>> result = parse(
    ...     {"port": "5060", "transport": "tcp", "extra": 1},
    ...     {"port": ("integer", 1, 65535), "transport": ("enum", ["udp", "tcp"])},
    ... )
    >>> result.values
    {'port': 5060, 'transport': Symbol('tcp')}
    >>> result.unknown
    ['extra']
"""

from .converters import LOG_LEVELS, PrimitiveConverter
from .core import SyntaxValidator, parse, path_key
from .errors import (
    CallbackError,
    CallbackFault,
    InvalidFieldError,
    InvalidSchemaError,
    MissingFieldError,
    ParseError,
    UnrecognizedRuleTag,
)
from .loaders import compile_syntax_file, load_syntax, load_syntax_file, validate_syntax_structure
from .merge import add_defaults, add_mandatory, merge_schema_fragments
from .models import CallbackContext, ParseOptions, ParseResult
from .rules import (
    Accept,
    Callback,
    CallbackKind,
    Ignore,
    ListMode,
    ListOf,
    Nested,
    OneOf,
    Primitive,
    Reject,
    ReplaceAccepted,
    Rule,
    Schema,
    compile_rule,
    compile_schema,
)
from .symbols import Symbol, SymbolTable, symbols

__all__ = [
    # Core
    "parse",
    "SyntaxValidator",
    "path_key",
    "ParseOptions",
    "ParseResult",
    "CallbackContext",
    # Rules
    "Rule",
    "Primitive",
    "Ignore",
    "ListOf",
    "ListMode",
    "OneOf",
    "Nested",
    "Callback",
    "CallbackKind",
    "Accept",
    "Reject",
    "ReplaceAccepted",
    "Schema",
    "compile_rule",
    "compile_schema",
    # Merge
    "merge_schema_fragments",
    "add_defaults",
    "add_mandatory",
    # Loading
    "load_syntax",
    "load_syntax_file",
    "compile_syntax_file",
    "validate_syntax_structure",
    # Primitives and symbols
    "PrimitiveConverter",
    "LOG_LEVELS",
    "Symbol",
    "SymbolTable",
    "symbols",
    # Errors
    "ParseError",
    "InvalidFieldError",
    "MissingFieldError",
    "CallbackError",
    "CallbackFault",
    "InvalidSchemaError",
    "UnrecognizedRuleTag",
]
