"""Recursive descent over input terms and a compiled schema.

Each schema level is processed in three phases: every input pair is resolved
and coerced in order, then the level's defaults are applied to keys still
missing, then the level's mandatory keys are checked. Nested schemas recurse
with the path extended by the field key. The first failure aborts the whole
call; no partial result is returned.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .converters import PrimitiveConverter
from .errors import (
    CallbackError,
    CallbackFault,
    InvalidFieldError,
    InvalidSchemaError,
    InvalidValue,
    MissingFieldError,
    ParseError,
    UnrecognizedRuleTag,
)
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
    compile_schema,
    key_text,
)

logger = logging.getLogger(__name__)


def path_key(path: str, key: str) -> str:
    """Dotted path of *key* under *path*."""
    return f"{path}.{key}" if path else key


@dataclass
class _Level:
    """Mutable state of one schema level during a parse."""

    path: str
    options: ParseOptions
    accepted: dict[str, Any] = field(default_factory=dict)
    flattened: list[tuple[str, Any]] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)

    def accept(self, key: str, value: Any, nested: list[tuple[str, Any]] | None = None) -> None:
        self.accepted[key] = value
        self.flattened.append((path_key(self.path, key), value))
        if nested:
            self.flattened.extend(nested)

    def snapshot(self) -> CallbackContext:
        return CallbackContext(
            accepted=MappingProxyType(dict(self.accepted)),
            flattened=tuple(self.flattened),
            unknown=tuple(self.unknown),
            path=self.path,
            options=self.options,
        )


def _iter_pairs(terms: Mapping[Any, Any] | list) -> Iterator[tuple[Any, Any]]:
    """Yield ``(key, value)`` pairs; a bare list element means ``(key, True)``."""
    if isinstance(terms, Mapping):
        yield from terms.items()
        return
    for item in terms:
        if isinstance(item, (tuple, list)) and len(item) == 2:
            yield item[0], item[1]
        else:
            yield item, True


class SyntaxValidator:
    """Validates input terms against a schema.

    The schema is compiled once; a validator can be shared between threads
    since every :meth:`parse` call keeps its state on the stack.

    Example:
        >>> validator = SyntaxValidator({"port": "integer", "__defaults": {"port": 80}})
        >>> validator.parse({"port": "8080"}).values
        {'port': 8080}
    """

    def __init__(self, schema: Mapping[Any, Any] | Schema, converter: PrimitiveConverter | None = None):
        self.converter = converter or PrimitiveConverter()
        self.schema = compile_schema(schema, self.converter.table)

    def parse(
        self,
        terms: Mapping[Any, Any] | list,
        options: ParseOptions | Mapping[str, Any] | None = None,
    ) -> ParseResult:
        """Validate and coerce *terms*.

        Args:
            terms: A mapping, or a list of ``(key, value)`` pairs and bare keys
            options: Parse options, as a model or a plain mapping

        Returns:
            The accepted values, flattened pairs and unknown keys

        Raises:
            ParseError: If a value is invalid or a mandatory field is missing
            InvalidSchemaError: If the schema uses an unknown rule tag
            CallbackFault: If a user callback raised
        """
        if options is None:
            options = ParseOptions()
        elif not isinstance(options, ParseOptions):
            options = ParseOptions.model_validate(options)

        if not isinstance(terms, (Mapping, list)):
            raise InvalidFieldError(options.path)

        result = self._parse_level(terms, self.schema, options.path, options)
        if options.warn_unknown and result.unknown:
            logger.warning(f"Unknown keys in {options.path or 'config'}: {', '.join(result.unknown)}")
        return result

    def _parse_level(
        self, terms: Mapping[Any, Any] | list, schema: Schema, path: str, options: ParseOptions
    ) -> ParseResult:
        level = _Level(path=path, options=options)
        for key, value in _iter_pairs(terms):
            self._parse_key(key, value, schema, level)

        for key, value in schema.defaults.items():
            if key not in level.accepted:
                self._parse_key(key, value, schema, level)

        for key in schema.mandatory:
            if key not in level.accepted:
                raise MissingFieldError(path_key(path, key))

        return ParseResult(values=level.accepted, flattened=level.flattened, unknown=level.unknown)

    def _parse_key(self, key: Any, value: Any, schema: Schema, level: _Level) -> None:
        resolved = schema.resolve(key)
        if resolved is None:
            text = key_text(key)
            level.unknown.append(path_key(level.path, text if text is not None else repr(key)))
            return

        name, rule = resolved
        field_path = path_key(level.path, name)
        if isinstance(rule, Ignore):
            return
        if isinstance(rule, Callback):
            self._apply_field_callback(rule, name, value, field_path, level)
        elif isinstance(rule, Nested):
            child = self._parse_nested(value, rule.schema, field_path, level.options)
            level.unknown.extend(child.unknown)
            level.accept(name, child.values, child.flattened)
        else:
            level.accept(*self._apply(rule, name, value, field_path, level))

    def _parse_nested(self, value: Any, schema: Schema, path: str, options: ParseOptions) -> ParseResult:
        if not isinstance(value, (Mapping, list)):
            raise InvalidFieldError(path)
        child_options = options.model_copy(update={"path": path, "warn_unknown": False})
        return self._parse_level(value, schema, path, child_options)

    def _apply(self, rule: Rule, name: str, value: Any, field_path: str, level: _Level) -> tuple[str, Any]:
        """Coerce *value* with *rule*.

        Returns:
            ``(key, coerced_value)``; *key* differs from *name* when a callback
            accepted the field under a new key
        """
        if isinstance(rule, Primitive):
            try:
                return name, self.converter.convert(rule.tag, value, *rule.args)
            except InvalidValue as e:
                logger.debug(f"Invalid value for {field_path}: {e}")
                raise InvalidFieldError(field_path) from e
        if isinstance(rule, ListOf):
            return self._apply_list(rule, name, value, field_path, level)
        if isinstance(rule, OneOf):
            return self._apply_alternatives(rule, name, value, field_path, level)
        if isinstance(rule, Nested):
            child = self._parse_nested(value, rule.schema, field_path, level.options)
            level.unknown.extend(child.unknown)
            return name, child.values
        if isinstance(rule, Callback):
            outcome = self._call(rule, name, value, field_path, level)
            if isinstance(outcome, ReplaceAccepted):
                raise InvalidSchemaError(f"ReplaceAccepted is only valid for a field callback: {field_path}")
            if isinstance(outcome, Accept) and outcome.key is not None:
                return outcome.key, outcome.value
            return name, self._callback_value(outcome, name, value, field_path)
        if isinstance(rule, Ignore):
            return name, value
        raise UnrecognizedRuleTag(rule)

    def _apply_list(
        self, rule: ListOf, name: str, value: Any, field_path: str, level: _Level
    ) -> tuple[str, list]:
        items = value if isinstance(value, list) else [value]
        key = name
        result = []
        for item in items:
            item_key, coerced = self._apply(rule.rule, name, item, field_path, level)
            if item_key != name:
                key = item_key
            result.append(coerced)
        if rule.mode is ListMode.ORDERED or not result:
            return key, result
        try:
            result = sorted(result)
        except TypeError as e:
            raise InvalidFieldError(field_path) from e
        if rule.mode is ListMode.UNIQUE:
            result = [item for pos, item in enumerate(result) if pos == 0 or item != result[pos - 1]]
        return key, result

    def _apply_alternatives(
        self, rule: OneOf, name: str, value: Any, field_path: str, level: _Level
    ) -> tuple[str, Any]:
        mark = len(level.unknown)
        for alternative in rule.rules:
            try:
                return self._apply(alternative, name, value, field_path, level)
            except (ParseError, UnrecognizedRuleTag):
                del level.unknown[mark:]
        raise InvalidFieldError(field_path)

    def _call(self, rule: Callback, name: str, value: Any, field_path: str, level: _Level) -> Any:
        try:
            if rule.kind is CallbackKind.VALUE:
                return rule.func(value)
            if rule.kind is CallbackKind.KEY_VALUE:
                return rule.func(name, value)
            return rule.func(name, value, level.snapshot())
        except Exception as e:
            logger.warning(f"Error calling syntax callback for field {field_path}: {e}")
            raise CallbackFault(name, field_path) from e

    def _callback_value(self, outcome: Any, name: str, value: Any, field_path: str) -> Any:
        if outcome is None or outcome is True:
            return value
        if isinstance(outcome, Accept):
            return outcome.value
        self._reject(outcome, name, field_path)

    @staticmethod
    def _reject(outcome: Any, name: str, field_path: str) -> None:
        if outcome is False:
            raise InvalidFieldError(field_path)
        if isinstance(outcome, Reject):
            if outcome.error is None:
                raise InvalidFieldError(field_path)
            raise CallbackError(outcome.error, field_path)
        raise CallbackFault(name, field_path) from TypeError(
            f"Unexpected callback result: {outcome!r}"
        )

    def _apply_field_callback(self, rule: Callback, name: str, value: Any, field_path: str, level: _Level) -> None:
        outcome = self._call(rule, name, value, field_path, level)
        if isinstance(outcome, Accept):
            key = name if outcome.key is None else outcome.key
            level.accept(key, outcome.value)
        elif isinstance(outcome, ReplaceAccepted) and rule.kind is CallbackKind.KEY_VALUE_CONTEXT:
            level.accepted = dict(outcome.pairs)
            level.flattened = [(path_key(level.path, k), v) for k, v in outcome.pairs]
        else:
            level.accept(name, self._callback_value(outcome, name, value, field_path))


def parse(
    terms: Mapping[Any, Any] | list,
    schema: Mapping[Any, Any] | Schema,
    options: ParseOptions | Mapping[str, Any] | None = None,
) -> ParseResult:
    """Validate *terms* against *schema*.

    Shortcut for ``SyntaxValidator(schema).parse(terms, options)``; a raw
    schema mapping is compiled on every call.
    """
    return SyntaxValidator(schema).parse(terms, options)
