from pathlib import Path

import click

from termsyntax.cli.utils import configure_logging, output_error, output_result, to_jsonable
from termsyntax.config.loader import load_config_file
from termsyntax.syntax import InvalidSchemaError, ParseError, ParseOptions, ParseResult
from termsyntax.syntax.loaders import compile_syntax_file


def _format_check_result(config_file: Path, result: ParseResult) -> str:
    output = [f"{click.style('✅ Configuration is valid!', fg='green', bold=True)}"]
    output.append(f"{click.style('📄 File:', fg='cyan')} {config_file}")
    output.append(f"   Accepted {click.style(str(len(result.flattened)), fg='yellow')} values")
    for path, value in result.flattened:
        if isinstance(value, dict):
            continue
        output.append(f"  {click.style('✓', fg='green')} {path} = {to_jsonable(value)!r}")

    if result.unknown:
        output.append(f"\n{click.style('⚠️  Unknown keys:', fg='yellow', bold=True)}")
        for key in result.unknown:
            output.append(f"  {click.style('?', fg='yellow')} {key}")

    return "\n".join(output)


@click.command(name="check")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--syntax",
    "syntax_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Syntax file (.yaml, .yml or .json) to validate against",
)
@click.option("--section", help="Top-level key of the config file holding the values")
@click.option("--path", "base_path", default="", help="Dotted path prefix used in messages")
@click.option("--warn-unknown", is_flag=True, help="Log unknown keys as warnings")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def check(
    config_file: Path,
    syntax_file: Path,
    section: str | None,
    base_path: str,
    warn_unknown: bool,
    json_output: bool,
    debug: bool,
) -> None:
    """Validate a YAML configuration file against a syntax file.

    \b
    Examples:
        termsyntax check app.yml --syntax app-syntax.yml
        termsyntax check app.yml --syntax app-syntax.yml --section server
        termsyntax check app.yml --syntax app-syntax.yml --json-output
    """
    configure_logging(debug=debug)
    options = ParseOptions(path=base_path, warn_unknown=warn_unknown)
    try:
        schema = compile_syntax_file(syntax_file)
        result = load_config_file(config_file, schema, section=section, options=options)
    except (ParseError, InvalidSchemaError, ValueError) as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result(
            {
                "values": result.values,
                "flattened": [[path, value] for path, value in result.flattened],
                "unknown": result.unknown,
            },
            json_output=True,
        )
    else:
        output_result(_format_check_result(config_file, result))
