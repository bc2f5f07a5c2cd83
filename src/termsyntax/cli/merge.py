from pathlib import Path

import click
import yaml

from termsyntax.cli.utils import configure_logging, output_error, output_result
from termsyntax.syntax.loaders import load_syntax_file
from termsyntax.syntax.merge import merge_schema_fragments


@click.command(name="merge")
@click.argument(
    "syntax_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def merge(syntax_files: tuple[Path, ...], json_output: bool, debug: bool) -> None:
    """Deep merge syntax fragments; later files override earlier ones.

    \b
    Examples:
        termsyntax merge base.yml site.yml
        termsyntax merge base.yml site.yml --json-output
    """
    configure_logging(debug=debug)
    merged: dict = {}
    try:
        for syntax_file in syntax_files:
            merged = merge_schema_fragments(load_syntax_file(syntax_file), merged)
    except ValueError as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result(merged, json_output=True)
    else:
        output_result(yaml.safe_dump(merged, sort_keys=False).rstrip())
