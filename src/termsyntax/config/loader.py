"""Loading validated configuration into a ConfigStore.

Configuration flows from a source (a YAML file, environment variables or an
options mapping) through a syntax, and the accepted values are written to the
store under an owner and optional scope.
"""

import logging
import os
from collections.abc import Hashable, Mapping
from pathlib import Path
from typing import Any

import yaml

from ..syntax import ParseOptions, ParseResult, Schema, SyntaxValidator
from .store import ConfigStore, default_store

logger = logging.getLogger(__name__)


def parse_config(
    terms: Mapping[Any, Any] | list,
    syntax: Mapping[Any, Any] | Schema,
    defaults: Mapping[str, Any] | None = None,
    path: str = "",
) -> ParseResult:
    """Validate option terms, filling absent keys from *defaults* first.

    Raises:
        ParseError: If the options do not match *syntax*
    """
    merged: dict[Any, Any] = dict(defaults or {})
    if isinstance(terms, Mapping):
        merged.update(terms)
        terms = merged
    elif merged:
        present = {item[0] if isinstance(item, (tuple, list)) and len(item) == 2 else item for item in terms}
        terms = [*terms, *((k, v) for k, v in merged.items() if k not in present)]
    return SyntaxValidator(syntax).parse(terms, ParseOptions(path=path))


def env_terms(prefix: str, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect environment variables starting with *prefix*.

    ``MYAPP_LOG_LEVEL=debug`` with prefix ``MYAPP_`` becomes ``{"log_level": "debug"}``.
    """
    if not prefix:
        raise ValueError("An environment prefix is required")
    environ = os.environ if environ is None else environ
    return {
        name[len(prefix) :].lower(): value
        for name, value in environ.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }


def load_env(
    owner: Hashable,
    prefix: str,
    defaults: Mapping[str, Any] | None,
    syntax: Mapping[Any, Any] | Schema,
    store: ConfigStore = default_store,
    environ: Mapping[str, str] | None = None,
) -> ParseResult:
    """Validate prefixed environment variables and store the accepted values.

    Args:
        owner: Store owner the values are written under
        prefix: Environment variable prefix, e.g. ``"MYAPP_"``
        defaults: Values used for keys absent from the environment
        syntax: Syntax the values are validated with
        store: Target store
        environ: Environment mapping, ``os.environ`` when not given

    Returns:
        The parse result; nothing is stored when validation fails
    """
    result = parse_config(env_terms(prefix, environ), syntax, defaults)
    for key, value in result.values.items():
        store.put(owner, key, value)
    logger.debug(f"Loaded {len(result.values)} config values for {owner!r} from environment")
    return result


def load_domain(
    owner: Hashable,
    scope: Hashable,
    opts: Mapping[str, Any],
    defaults: Mapping[str, Any],
    syntax: Mapping[Any, Any] | Schema,
    store: ConfigStore = default_store,
) -> ParseResult:
    """Validate per-scope overrides and store them under *scope*.

    Only keys present in *defaults* may be overridden; other keys are logged
    and ignored. Keys not overridden take the current unscoped value from the
    store.
    """
    valid_keys = list(defaults)
    ignored = [key for key in opts if key not in defaults]
    if ignored:
        logger.warning(f"Ignoring config keys {ignored} for scope {scope!r}")

    terms = {key: store.get(owner, key) for key in valid_keys}
    terms.update({key: value for key, value in opts.items() if key in defaults})
    result = parse_config(terms, syntax)
    for key, value in result.values.items():
        store.put(owner, key, value, scope=scope)
    logger.debug(f"Loaded {len(result.values)} config values for {owner!r} scope {scope!r}")
    return result


def load_config_file(
    config_path: str | Path,
    syntax: Mapping[Any, Any] | Schema,
    section: str | None = None,
    options: ParseOptions | None = None,
) -> ParseResult:
    """Load a YAML configuration file and validate it.

    Args:
        config_path: Path to the YAML file
        syntax: Syntax the content is validated with
        section: Optional top-level key holding the configuration
        options: Parse options

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid YAML or not a mapping
        ParseError: If the content does not match *syntax*
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if raw_config is None:
        raw_config = {}
    if section is not None:
        if not isinstance(raw_config, Mapping):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        raw_config = raw_config.get(section) or {}
    if not isinstance(raw_config, (Mapping, list)):
        raise ValueError(f"Config file {config_path} must contain a mapping or a list")

    return SyntaxValidator(syntax).parse(raw_config, options)
