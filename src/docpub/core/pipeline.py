"""Pipeline step functions: source -> markdown and markdown -> ADF batch runs"""

import logging
from pathlib import Path
from typing import Iterable

from docpub.core.adf import tree_to_adf
from docpub.core.parse import MD_EXTENSIONS, discover_files, parse_file
from docpub.core.source import SOURCE_EXTENSIONS, source_to_markdown


log = logging.getLogger(__name__)


def convert_source(path: Path, output_dir: Path, command: str = 'asciidoctor') -> Path:
    """Convert one AsciiDoc/HTML file and write <stem>.md to output_dir."""
    markdown = source_to_markdown(path, command)
    out_file = output_dir / f"{path.stem}.md"
    out_file.write_text(markdown, encoding='utf-8')
    log.info("Converted %s -> %s (%d characters)", path.name, out_file.name, len(markdown))
    return out_file


def convert_markdown(path: Path, output_dir: Path, preset: str = 'gfm-like') -> Path:
    """Convert one markdown file and write <stem>.json ADF to output_dir."""
    document = tree_to_adf(parse_file(path, preset).tree)
    out_file = output_dir / f"{path.stem}.json"
    out_file.write_text(document.to_json(), encoding='utf-8')
    log.info("Converted %s -> %s (%d blocks)", path.name, out_file.name, len(document.content))
    return out_file


def run_convert(
    input_dirs: Iterable[Path],
    output_dir: Path,
    command: str = 'asciidoctor',
    ) -> list[tuple[Path, Path]]:
    """Convert every .adoc/.html file in input_dirs. Returns (source, markdown) pairs.

    Missing directories contribute nothing. A file that cannot be read or
    written is logged and skipped; the rest of the batch still runs.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for input_dir in input_dirs:
        if not input_dir.is_dir():
            log.info("No source directory found at: %s", input_dir)
            continue
        files = discover_files(input_dir, SOURCE_EXTENSIONS)
        if not files:
            log.info("No AsciiDoc or HTML files found in %s", input_dir)
            continue
        for p in files:
            try:
                results.append((p, convert_source(p, output_dir, command)))
            except (OSError, UnicodeDecodeError, ValueError) as e:
                log.error("Failed to convert %s: %s", p, e)
    return results


def run_adf(
    markdown_dir: Path,
    adf_dir: Path,
    preset: str = 'gfm-like',
    ) -> list[tuple[Path, Path]]:
    """Convert every .md file in markdown_dir to ADF JSON. Returns (markdown, json) pairs."""
    adf_dir.mkdir(parents=True, exist_ok=True)
    if not markdown_dir.is_dir():
        log.info("No markdown directory found at: %s", markdown_dir)
        return []
    files = discover_files(markdown_dir, MD_EXTENSIONS)
    if not files:
        log.info("No Markdown files found to convert in %s", markdown_dir)
        return []

    results = []
    for p in files:
        try:
            results.append((p, convert_markdown(p, adf_dir, preset)))
        except (OSError, UnicodeDecodeError) as e:
            log.error("Failed to convert %s to ADF: %s", p, e)
    return results
