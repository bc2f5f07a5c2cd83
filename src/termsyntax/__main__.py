import click

from termsyntax.cli.check import check
from termsyntax.cli.merge import merge
from termsyntax.version import PACKAGE_VERSION


@click.group()
@click.version_option(PACKAGE_VERSION, prog_name="termsyntax")
def cli() -> None:
    """termsyntax: validate configuration terms against declarative syntaxes"""


cli.add_command(check)
cli.add_command(merge)


if __name__ == "__main__":
    cli()
