"""AsciiDoc and HTML to Markdown conversion with best-effort regex fallbacks.

The primary paths delegate to real converters: ``asciidoctor`` renders
AsciiDoc to embedded HTML, and markdownify turns HTML into Markdown. When a
converter fails or yields nothing, the ``*_simple`` /
``*_direct`` functions below approximate the conversion with line and tag
substitutions. They only handle the simplest documents and may produce
malformed Markdown for anything richer.
"""

import logging
import re
import subprocess
from pathlib import Path

import markdownify
from bs4 import BeautifulSoup

from docpub.errors import ConversionError


log = logging.getLogger(__name__)

ADOC_EXTENSIONS = {'.adoc', '.asciidoc'}
HTML_EXTENSIONS = {'.html', '.htm'}
SOURCE_EXTENSIONS = ADOC_EXTENSIONS | HTML_EXTENSIONS

STRIP_ELEMENTS = ['script', 'style', 'nav', 'footer']

BLANK_RUN_RE = re.compile(r'\n{3,}')


def clean_markdown(markdown: str) -> str:
    """Collapse runs of 3+ newlines to a single blank line and trim the ends."""
    return BLANK_RUN_RE.sub('\n\n', markdown or '').strip()


# --- HTML ---

HTML_SUBSTITUTIONS: list[tuple[re.Pattern, str]] = [
    (re.compile(r'.*<body[^>]*>', re.S | re.I), ''),
    (re.compile(r'</body>.*', re.S | re.I), ''),
    *[
        (re.compile(rf'<h{n}[^>]*>(.*?)</h{n}>', re.S | re.I), '\n' + '#' * n + r' \1' + '\n')
        for n in range(1, 7)
    ],
    (re.compile(r'<p(?:\s[^>]*)?>(.*?)</p>', re.S | re.I), r'\1\n\n'),
    (re.compile(r'<(?:strong|b)(?:\s[^>]*)?>(.*?)</(?:strong|b)>', re.S | re.I), r'**\1**'),
    (re.compile(r'<(?:em|i)(?:\s[^>]*)?>(.*?)</(?:em|i)>', re.S | re.I), r'*\1*'),
    (re.compile(r'<a[^>]*href=["\'](.*?)["\'][^>]*>(.*?)</a>', re.S | re.I), r'[\2](\1)'),
    (re.compile(r'<pre[^>]*>\s*<code[^>]*>(.*?)</code>\s*</pre>', re.S | re.I), r'\n```\n\1\n```\n'),
    (re.compile(r'<code[^>]*>(.*?)</code>', re.S | re.I), r'`\1`'),
    (re.compile(r'</?[uo]l[^>]*>', re.I), ''),
    (re.compile(r'<li[^>]*>(.*?)</li>', re.S | re.I), r'- \1\n'),
    (re.compile(r'<br\s*/?>', re.I), '\n'),
    (re.compile(r'<[^>]+>'), ''),
    (re.compile(r'^[ \t]+', re.M), ''),
]


def html_to_markdown_simple(html: str) -> str:
    """Translate common HTML tags to Markdown with regexes; best effort only."""
    if not html:
        return ''
    for pattern, replacement in HTML_SUBSTITUTIONS:
        html = pattern.sub(replacement, html)
    return clean_markdown(html)


def html_to_markdown(html: str) -> str:
    """Convert HTML to Markdown with markdownify, falling back to regex substitution."""
    if not html or not html.strip():
        return ''
    try:
        soup = BeautifulSoup(html, 'html.parser')
        for element in soup(STRIP_ELEMENTS):
            element.decompose()
        root = soup.body or soup
        markdown = markdownify.markdownify(str(root), heading_style=markdownify.ATX, bullets='-')
    except Exception as e:
        log.warning("markdownify failed (%s); using simple HTML conversion", e)
        return html_to_markdown_simple(html)

    if not markdown.strip():
        log.info("markdownify produced no output; using simple HTML conversion")
        return html_to_markdown_simple(html)
    return clean_markdown(markdown)


# --- AsciiDoc ---

ADOC_HEADING_RE = re.compile(r'^(={1,6})\s+(.*)$')
ADOC_BULLET_RE = re.compile(r'^(\*+|-)\s+(.*)$')
ADOC_ORDERED_RE = re.compile(r'^(\.+)\s+(.*)$')
ADOC_BLOCK_TITLE_RE = re.compile(r'^\.(?![.\s])(.+)$')
ADOC_SOURCE_RE = re.compile(r'^\[source(?:,\s*([\w+#-]+))?[^\]]*\]$')
ADOC_ATTRIBUTE_RE = re.compile(r'^:[\w-]+!?:.*$')
ADOC_BLOCK_ATTR_RE = re.compile(r'^\[[^\]]*\]$')
ADOC_BOLD_RE = re.compile(r'(?<![\w*])\*(?!\s)([^*\n]+?)(?<!\s)\*(?![\w*])')
ADOC_ITALIC_RE = re.compile(r'(?<![\w_])_(?!\s)([^_\n]+?)(?<!\s)_(?![\w_])')
ADOC_LISTING = '----'


def _adoc_inline(text: str) -> str:
    """Rewrite AsciiDoc *bold* and _italic_ spans to Markdown."""
    text = ADOC_BOLD_RE.sub(r'**\1**', text)
    return ADOC_ITALIC_RE.sub(r'*\1*', text)


def asciidoc_to_markdown_direct(text: str) -> str:
    """Approximate AsciiDoc-to-Markdown with line substitutions; best effort only.

    Handles headings (leading '=' count becomes '#' count), '*'/'-' bullets
    (extra '*' nest), '.' ordered items, '.Title' block titles (emphasized),
    *bold*, _italic_, and '----' listing blocks with an optional preceding
    [source,lang] line.
    """
    out: list[str] = []
    in_listing = False
    language = ''

    for line in (text or '').splitlines():
        stripped = line.strip()

        if stripped == ADOC_LISTING:
            out.append(f'```{language}' if not in_listing else '```')
            in_listing = not in_listing
            language = ''
            continue
        if in_listing:
            out.append(line)
            continue

        if m := ADOC_SOURCE_RE.match(stripped):
            language = m.group(1) or ''
            continue
        if ADOC_ATTRIBUTE_RE.match(stripped) or ADOC_BLOCK_ATTR_RE.match(stripped):
            continue

        if m := ADOC_HEADING_RE.match(stripped):
            out.append(f"{'#' * len(m.group(1))} {_adoc_inline(m.group(2).strip())}")
        elif m := ADOC_BULLET_RE.match(stripped):
            depth = len(m.group(1)) - 1 if m.group(1) != '-' else 0
            out.append(f"{'  ' * depth}- {_adoc_inline(m.group(2))}")
        elif m := ADOC_ORDERED_RE.match(stripped):
            depth = len(m.group(1)) - 1
            out.append(f"{'   ' * depth}1. {_adoc_inline(m.group(2))}")
        elif m := ADOC_BLOCK_TITLE_RE.match(stripped):
            out.append(f"*{m.group(1).strip()}*")
        else:
            out.append(_adoc_inline(line))

    if in_listing:
        out.append('```')
    return clean_markdown('\n'.join(out))


def asciidoc_to_html(path: Path, command: str = 'asciidoctor') -> str:
    """Render an AsciiDoc file to embedded HTML5 with the asciidoctor CLI."""
    cmd = [command, '-b', 'html5', '-s', '-o', '-', str(path.absolute())]
    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ConversionError(f"AsciiDoc processor not found: {command}") from e
    except subprocess.CalledProcessError as e:
        raise ConversionError(f"{command} exited with {e.returncode}: {(e.stderr or '').strip()}") from e

    if result.stderr:
        log.warning("%s warnings for %s:\n%s", command, path.name, result.stderr.strip())
    return result.stdout


def asciidoc_to_markdown(path: Path, command: str = 'asciidoctor') -> str:
    """Convert an AsciiDoc file via asciidoctor + markdownify, else the direct fallback."""
    try:
        markdown = html_to_markdown(asciidoc_to_html(path, command))
    except ConversionError as e:
        log.warning("%s; using direct AsciiDoc conversion for %s", e, path.name)
        markdown = ''

    if not markdown:
        return asciidoc_to_markdown_direct(path.read_text(encoding='utf-8'))
    return markdown


def source_to_markdown(path: Path, command: str = 'asciidoctor') -> str:
    """Dispatch on file suffix to the AsciiDoc or HTML converter."""
    suffix = path.suffix.lower()
    if suffix in ADOC_EXTENSIONS:
        return asciidoc_to_markdown(path, command)
    if suffix in HTML_EXTENSIONS:
        return html_to_markdown(path.read_text(encoding='utf-8'))
    raise ValueError(f"Unsupported source file: {path.name}")
