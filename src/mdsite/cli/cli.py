"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from mdsite.cli.commands import _settings, build_cmd, check_cmd, meta_cmd, render_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown blog post renderer")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
    ):
    """Configure logging before any command runs."""
    level = logging.DEBUG if verbose else _settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


app.command(name="build")(build_cmd)
app.command(name="render")(render_cmd)
app.command(name="check")(check_cmd)
app.command(name="meta")(meta_cmd)
