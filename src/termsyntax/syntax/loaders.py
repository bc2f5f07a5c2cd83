"""Loading syntax documents from YAML and JSON."""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .rules import Schema, compile_schema

logger = logging.getLogger(__name__)

SYNTAX_SCHEMA_PATH = Path(__file__).parent / "schemas" / "syntax-schema-1.json"


def load_syntax(content: str, format: str = "yaml") -> dict[str, Any]:
    """Load a syntax document from string content.

    Args:
        content: Document content as string
        format: Format of the content ('yaml' or 'json')

    Returns:
        Syntax dictionary in declarative form

    Raises:
        ValueError: If format is not supported or parsing fails
    """
    if format == "yaml":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML: {e}") from e
    elif format == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON: {e}") from e
    else:
        raise ValueError(f"Unsupported format: {format}. Use 'yaml' or 'json'")
    return {} if data is None else data


def validate_syntax_structure(syntax: Any) -> None:
    """Check a declarative syntax document against the packaged JSON Schema.

    Raises:
        ValueError: If the document structure is invalid
    """
    with open(SYNTAX_SCHEMA_PATH) as f:
        meta_schema = json.load(f)

    try:
        jsonschema.validate(instance=syntax, schema=meta_schema)
    except jsonschema.ValidationError as e:
        if e.absolute_path:
            path = ".".join(str(p) for p in e.absolute_path)
            raise ValueError(f"Syntax validation error at '{path}': {e.message}") from e
        raise ValueError(f"Syntax validation error: {e.message}") from e


def load_syntax_file(path: str | Path) -> dict[str, Any]:
    """Load and structurally validate a syntax file (.yaml, .yml or .json).

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the extension is not supported, or parsing or
            validation fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Syntax file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        format = "yaml"
    elif suffix == ".json":
        format = "json"
    else:
        raise ValueError(f"Unsupported file extension: {path.suffix}. Use .yaml, .yml, or .json")

    syntax = load_syntax(path.read_text(encoding="utf-8"), format=format)
    validate_syntax_structure(syntax)
    logger.debug(f"Loaded syntax from {path} with {len(syntax)} entries")
    return syntax


def compile_syntax_file(path: str | Path) -> Schema:
    """Load, validate and compile a syntax file."""
    return compile_schema(load_syntax_file(path))
