import json
import os

import click

from app import describe, set_dpi
from setdpi import __version__


def json_env() -> bool:
    return os.environ.get("SETDPI_JSON", "0").lower() in ("1", "true")


def output_result(results, json_output: bool):
    if json_output:
        click.echo(json.dumps(results, ensure_ascii=False))
    else:
        for result in results:
            click.echo(describe(result))


@click.command()
@click.option("--json", "json_output", is_flag=True, help="Return output in JSON format")
@click.argument("dpi_x", type=float)
@click.argument("dpi_y", type=float)
@click.argument("patterns", nargs=-1, required=True)
@click.version_option(__version__)
def cli(json_output, dpi_x, dpi_y, patterns):
    """Set the DPI of PNG files matching PATTERNS."""
    results = set_dpi(dpi_x, dpi_y, list(patterns))
    output_result(results, json_output or json_env())


if __name__ == "__main__":
    cli()
