"""CLI command implementations"""

import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer

from docpub.config import Settings, load_config
from docpub.confluence.client import ConfluenceClient
from docpub.confluence.publish import run_publish
from docpub.core.pipeline import run_adf, run_convert


def _fail(msg: str, cause: Exception = None) -> None:
    """Print the error and its traceback to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
        typer.echo("".join(traceback.format_exception(cause)), err=True)
    raise typer.Exit(1)


def load_settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail("Invalid configuration", e)


def _echo_pairs(pairs: list, label: str, target: Path) -> None:
    for src, out_file in pairs:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"{label} {len(pairs)} document(s) to {target}/")


def _convert(settings: Settings) -> None:
    markdown_dir = Path(settings.markdown_dir)
    try:
        results = run_convert(
            [Path(settings.adoc_dir), Path(settings.html_dir)], markdown_dir, settings.asciidoctor_cmd,
        )
    except Exception as e:
        _fail("Documentation conversion failed", e)
    _echo_pairs(results, "Converted", markdown_dir)


def _adf(settings: Settings) -> None:
    adf_dir = Path(settings.adf_dir)
    try:
        results = run_adf(Path(settings.markdown_dir), adf_dir, settings.parser_config)
    except Exception as e:
        _fail("Markdown to ADF conversion failed", e)
    _echo_pairs(results, "Converted", adf_dir)


def convert_cmd(
    adoc: Annotated[Optional[str], typer.Option("--adoc-dir", help="AsciiDoc source directory")] = None,
    html: Annotated[Optional[str], typer.Option("--html-dir", help="HTML source directory")] = None,
    markdown: Annotated[Optional[str], typer.Option("--markdown-dir", help="Markdown output directory")] = None,
    asciidoctor: Annotated[Optional[str], typer.Option("--asciidoctor", help="AsciiDoc processor executable")] = None,
    ):
    """Convert exported AsciiDoc/HTML documentation to Markdown."""
    _convert(load_settings(overrides={
        "adoc_dir": adoc, "html_dir": html, "markdown_dir": markdown, "asciidoctor_cmd": asciidoctor,
    }))


def adf_cmd(
    markdown: Annotated[Optional[str], typer.Option("--markdown-dir", help="Markdown input directory")] = None,
    adf: Annotated[Optional[str], typer.Option("--adf-dir", help="ADF JSON output directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Convert Markdown files to Atlassian Document Format JSON."""
    _adf(load_settings(overrides={"markdown_dir": markdown, "adf_dir": adf, "parser_config": parser}))


def build_cmd(
    adoc: Annotated[Optional[str], typer.Option("--adoc-dir", help="AsciiDoc source directory")] = None,
    html: Annotated[Optional[str], typer.Option("--html-dir", help="HTML source directory")] = None,
    markdown: Annotated[Optional[str], typer.Option("--markdown-dir", help="Intermediate Markdown directory")] = None,
    adf: Annotated[Optional[str], typer.Option("--adf-dir", help="ADF JSON output directory")] = None,
    ):
    """Run both conversion stages: source -> markdown -> ADF."""
    settings = load_settings(overrides={
        "adoc_dir": adoc, "html_dir": html, "markdown_dir": markdown, "adf_dir": adf,
    })
    _convert(settings)
    _adf(settings)


def publish_cmd(
    url: Annotated[str, typer.Argument(help="Confluence base URL")],
    username: Annotated[str, typer.Argument(help="Confluence user name")],
    api_token: Annotated[str, typer.Argument(help="Confluence API token")],
    space: Annotated[str, typer.Argument(help="Target space key")],
    branch: Annotated[str, typer.Argument(help="Branch name used in page titles")],
    repository_url: Annotated[str, typer.Argument(help="Source repository URL")],
    commit: Annotated[str, typer.Argument(help="Commit hash of the published revision")],
    adf: Annotated[Optional[str], typer.Option("--adf-dir", help="ADF JSON input directory")] = None,
    diagrams: Annotated[Optional[str], typer.Option("--diagrams-dir", help="PNG diagram directory")] = None,
    ):
    """Upload diagrams and create or update one Confluence page per ADF file."""
    settings = load_settings(overrides={"adf_dir": adf, "diagrams_dir": diagrams})
    try:
        result = run_publish(
            ConfluenceClient(url, username, api_token),
            space, branch, repository_url, commit,
            Path(settings.adf_dir), Path(settings.diagrams_dir),
        )
    except Exception as e:
        _fail("Documentation upload failed", e)

    for name, attachment_id in result.attachments.items():
        typer.echo(f"  diagram: {name} -> {attachment_id}")
    for status, title in result.changes:
        typer.echo(f"  {status}: {title}")
    typer.echo(
        f"Upload complete - "
        f"{result.counts['created']} created, "
        f"{result.counts['updated']} updated, "
        f"{result.counts['failed']} failed"
    )
