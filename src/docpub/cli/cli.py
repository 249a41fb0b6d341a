"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated, Optional

import typer

from docpub.cli.commands import adf_cmd, build_cmd, convert_cmd, load_settings, publish_cmd
from docpub.logs import setup_logging


app = typer.Typer(name="docpub", no_args_is_help=True, help="AsciiDoc/HTML -> Markdown -> ADF -> Confluence pipeline")


@app.callback()
def main(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level (DEBUG, INFO, ...)")] = None,
    ):
    """Configure logging before any command runs."""
    setup_logging(load_settings({"log_level": log_level}).log_level)


app.command(name="convert")(convert_cmd)
app.command(name="adf")(adf_cmd)
app.command(name="build")(build_cmd)
app.command(name="publish")(publish_cmd)
