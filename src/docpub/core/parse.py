"""File discovery and markdown-it parsing into a syntax tree"""

from pathlib import Path
from typing import Iterable

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from docpub.core.models import ParsedDoc


MD_EXTENSIONS = {'.md'}


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def discover_files(directory: Path, suffixes: Iterable[str]) -> list[Path]:
    """Return sorted files directly under directory with a matching suffix; [] if it is missing."""
    if not directory.is_dir():
        return []
    wanted = {s.lower() for s in suffixes}
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted)


def parse_markdown(text: str, preset: str = 'gfm-like') -> SyntaxTreeNode:
    """Parse markdown text into a SyntaxTreeNode rooted at the document."""
    return SyntaxTreeNode(make_parser(preset).parse(text))


def parse_file(path: Path, preset: str = 'gfm-like') -> ParsedDoc:
    """Parse a single markdown file into a ParsedDoc."""
    markdown = path.read_text(encoding='utf-8')
    return ParsedDoc(path=path, markdown=markdown, tree=parse_markdown(markdown, preset))
