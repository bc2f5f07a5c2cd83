"""Field rules and compiled schemas.

A schema is authored as a plain mapping (the *declarative form*, easy to write
in Python or load from YAML) and compiled once into an immutable
:class:`Schema` whose field rules are one of a closed set of variants:

- :class:`Primitive` - a built-in type tag, optionally parameterized
- :class:`Ignore` - consume the field and drop it
- :class:`ListOf` - apply a rule to every element, keeping, sorting or
  sorting and de-duplicating the result
- :class:`OneOf` - alternatives tried left to right, first success wins
- :class:`Nested` - a nested schema
- :class:`Callback` - a user function, with an explicit :class:`CallbackKind`

Declarative form::

    {
        "port": ("integer", 1, 65535),
        "hosts": ("ulist", "host"),
        "mode": [("enum", ["active", "passive"]), "binary"],
        "tls": {"cert": "path", "__mandatory": ["cert"]},
        "__defaults": {"port": 5060},
        "__mandatory": ["hosts"],
    }
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import InvalidSchemaError, UnrecognizedRuleTag
from .symbols import SymbolTable, symbols

DEFAULTS_KEY = "__defaults"
MANDATORY_KEY = "__mandatory"
RULE_TYPE_KEY = "__type"


class ListMode(Enum):
    """Output discipline of a list rule."""

    ORDERED = "list"
    SORTED = "slist"
    UNIQUE = "ulist"


class CallbackKind(Enum):
    """Arguments passed to a user callback."""

    VALUE = "value"  # fn(value)
    KEY_VALUE = "key_value"  # fn(key, value)
    KEY_VALUE_CONTEXT = "key_value_context"  # fn(key, value, CallbackContext)


@dataclass(frozen=True)
class Primitive:
    tag: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Ignore:
    pass


@dataclass(frozen=True)
class ListOf:
    rule: "Rule"
    mode: ListMode = ListMode.ORDERED


@dataclass(frozen=True)
class OneOf:
    rules: tuple["Rule", ...]


@dataclass(frozen=True)
class Nested:
    schema: "Schema"


@dataclass(frozen=True)
class Callback:
    """A user supplied validation function.

    Attributes:
        func: The function to call
        kind: Which arguments the function takes
    """

    func: Callable[..., Any]
    kind: CallbackKind = CallbackKind.VALUE


Rule = Primitive | Ignore | ListOf | OneOf | Nested | Callback

_RULE_TYPES = (Primitive, Ignore, ListOf, OneOf, Nested, Callback)


# Callback outcomes. A callback may also return None or True (accept the value
# as is) and False (reject it).


@dataclass(frozen=True)
class Accept:
    """Accept the field, replacing its value and optionally its key."""

    value: Any
    key: str | None = None


@dataclass(frozen=True)
class Reject:
    """Reject the field; a non-None *error* is reported as a CallbackError."""

    error: Any = None


@dataclass(frozen=True)
class ReplaceAccepted:
    """Replace every pair accepted so far at the current level.

    Only meaningful for ``KEY_VALUE_CONTEXT`` callbacks. The field being
    validated is not added unless it is part of *pairs*.
    """

    pairs: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class Schema:
    """A compiled, immutable schema level.

    Attributes:
        fields: Rule for every known field, keyed by canonical text
        defaults: Raw default values for this level, validated when applied
        mandatory: Fields that must be present after defaults, in check order
    """

    fields: Mapping[str, Rule] = field(default_factory=lambda: MappingProxyType({}))
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    mandatory: tuple[str, ...] = ()

    def resolve(self, key: Any) -> tuple[str, Rule] | None:
        """Find the rule for an input key given as text, symbol, bytes, enum or int.

        Returns:
            ``(canonical_key, rule)`` or ``None`` when the schema has no rule
        """
        text = key_text(key)
        if text is None:
            return None
        rule = self.fields.get(text)
        if rule is None:
            return None
        return text, rule


def key_text(key: Any) -> str | None:
    """Canonical text form of a field key, or ``None`` if it has none."""
    if isinstance(key, str):
        return str(key)
    if isinstance(key, bytes):
        try:
            return key.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(key, Enum):
        if isinstance(key.value, (str, bytes)):
            return key_text(key.value)
        return key.name
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    return None


def _require_key_text(key: Any) -> str:
    text = key_text(key)
    if text is None:
        raise InvalidSchemaError(f"Invalid schema key: {key!r}")
    return text


def _enum_rule(members: Any, table: SymbolTable) -> Primitive:
    if isinstance(members, (str, bytes)) or not isinstance(members, (list, tuple, set, frozenset)):
        raise InvalidSchemaError(f"Enum members must be a list, got {members!r}")
    return Primitive("atom", (tuple(table.intern(_require_key_text(m)) for m in members),))


def _compile_tuple(raw: tuple, table: SymbolTable) -> Rule:
    if not raw:
        raise UnrecognizedRuleTag(raw)
    tag, *args = raw
    if tag in ("list", "slist", "ulist") and len(args) == 1:
        return ListOf(compile_rule(args[0], table), ListMode(tag))
    if tag == "syntax" and len(args) == 1:
        return compile_rule(args[0], table)
    if tag in ("atom", "enum") and len(args) == 1:
        return _enum_rule(args[0], table)
    if not isinstance(tag, str):
        raise UnrecognizedRuleTag(raw)
    return Primitive(tag, tuple(args))


def _typed_rule(tag: Any, params: dict[str, Any], table: SymbolTable) -> Rule:
    if tag in ("list", "slist", "ulist"):
        return ListOf(compile_rule(params.pop("of"), table), ListMode(tag))
    if tag in ("atom", "enum") and "values" in params:
        return _enum_rule(params.pop("values"), table)
    if tag == "integer" and "in" in params:
        return Primitive("integer", (tuple(params.pop("in")),))
    if tag == "integer" and ("min" in params or "max" in params):
        return Primitive("integer", (params.pop("min", None), params.pop("max", None)))
    if tag == "function":
        return Primitive("function", (params.pop("arity"),))
    if tag in ("rfc3339", "epoch") and "unit" in params:
        return Primitive(tag, (params.pop("unit"),))
    if tag == "syntax":
        return compile_rule(params.pop("rule"), table)
    if not isinstance(tag, str):
        raise UnrecognizedRuleTag(tag)
    return Primitive(tag)


def _compile_typed(raw: Mapping[str, Any], table: SymbolTable) -> Rule:
    """Compile the ``{__type: tag, ...}`` spelling used in YAML and JSON."""
    params = dict(raw)
    tag = params.pop(RULE_TYPE_KEY)
    try:
        rule = _typed_rule(tag, params, table)
    except KeyError as e:
        raise InvalidSchemaError(f"Rule {tag!r} requires parameter {e.args[0]!r}") from None
    if params:
        raise InvalidSchemaError(f"Unexpected parameters for rule {tag!r}: {sorted(params)}")
    return rule


def compile_rule(raw: Any, table: SymbolTable = symbols) -> Rule:
    """Compile the declarative form of a single field rule.

    Args:
        raw: A tag string, tuple, list of alternatives, nested mapping,
            ``{__type: ...}`` mapping, callable, or an already compiled rule
        table: Symbol table receiving enum members

    Raises:
        InvalidSchemaError: If *raw* has no rule meaning at all
    """
    if isinstance(raw, _RULE_TYPES):
        return raw
    if isinstance(raw, Schema):
        return Nested(raw)
    if isinstance(raw, str):
        return Ignore() if raw == "ignore" else Primitive(raw)
    if isinstance(raw, tuple):
        return _compile_tuple(raw, table)
    if isinstance(raw, list):
        return OneOf(tuple(compile_rule(r, table) for r in raw))
    if isinstance(raw, Mapping):
        if RULE_TYPE_KEY in raw:
            return _compile_typed(raw, table)
        return Nested(compile_schema(raw, table))
    if callable(raw):
        return Callback(raw)
    raise UnrecognizedRuleTag(raw)


def compile_schema(raw: Mapping[Any, Any] | Schema, table: SymbolTable = symbols) -> Schema:
    """Compile a declarative schema mapping into a :class:`Schema`.

    Field names, mandatory names and enum members are interned in *table* so
    ``atom`` rules can resolve them later.

    Raises:
        InvalidSchemaError: If a reserved key or a rule is malformed
    """
    if isinstance(raw, Schema):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidSchemaError(f"Schema must be a mapping, got {type(raw).__name__}")

    fields: dict[str, Rule] = {}
    defaults: dict[str, Any] = {}
    mandatory: tuple[str, ...] = ()
    for key, value in raw.items():
        text = _require_key_text(key)
        if text == DEFAULTS_KEY:
            if not isinstance(value, Mapping):
                raise InvalidSchemaError(f"{DEFAULTS_KEY} must be a mapping, got {value!r}")
            defaults = {_require_key_text(k): v for k, v in value.items()}
        elif text == MANDATORY_KEY:
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
                raise InvalidSchemaError(f"{MANDATORY_KEY} must be a list, got {value!r}")
            mandatory = tuple(table.intern(_require_key_text(k)) for k in value)
        else:
            table.intern(text)
            fields[text] = compile_rule(value, table)

    return Schema(
        fields=MappingProxyType(fields),
        defaults=MappingProxyType(defaults),
        mandatory=tuple(str(k) for k in mandatory),
    )
