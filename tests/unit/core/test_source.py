"""Unit tests for core/source.py"""

import subprocess

import pytest

from docpub.core import source
from docpub.core.source import (
    asciidoc_to_html,
    asciidoc_to_markdown,
    asciidoc_to_markdown_direct,
    clean_markdown,
    html_to_markdown,
    html_to_markdown_simple,
    source_to_markdown,
)
from docpub.errors import ConversionError


@pytest.fixture(name="no_asciidoctor")
def no_asciidoctor_fixture(monkeypatch):
    """Make every asciidoctor invocation fail as if the executable were missing."""
    def _missing(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])
    monkeypatch.setattr(source.subprocess, "run", _missing)


# --- clean_markdown ---

def test_clean_markdown_collapses_blank_runs():
    """Three or more newlines collapse to exactly one blank line."""
    assert clean_markdown("a\n\n\n\nb") == "a\n\nb"


def test_clean_markdown_keeps_single_blank_line():
    assert clean_markdown("a\n\nb") == "a\n\nb"


def test_clean_markdown_trims():
    """Leading and trailing whitespace is removed."""
    assert clean_markdown("\n\n  text  \n\n") == "text"


# --- AsciiDoc direct fallback ---

@pytest.mark.parametrize("level", [1, 2, 3, 4, 5])
def test_direct_heading_levels(level):
    """N leading '=' characters become N leading '#' characters."""
    out = asciidoc_to_markdown_direct("=" * level + " Section Title")
    assert out == "#" * level + " Section Title"


def test_direct_bullets_and_nesting():
    """'*' bullets become '-' items, with extra '*' nesting two spaces per level."""
    out = asciidoc_to_markdown_direct("* one\n** two\n- three")
    assert out == "- one\n  - two\n- three"


def test_direct_ordered_items():
    """'.' ordered markers become '1.' items."""
    assert asciidoc_to_markdown_direct(". first\n. second") == "1. first\n1. second"


def test_direct_bold_and_italic():
    """*bold* and _italic_ spans are rewritten to Markdown emphasis."""
    out = asciidoc_to_markdown_direct("Some *bold* and _italic_ text")
    assert out == "Some **bold** and *italic* text"


def test_direct_heading_inline_markup():
    """Bold and italic spans inside a heading are rewritten like body text."""
    assert asciidoc_to_markdown_direct("== *Bold* _head_") == "## **Bold** *head*"


def test_direct_block_title_emphasized():
    """A '.Title' block title becomes an emphasized line, not a literal dot."""
    out = asciidoc_to_markdown_direct(".Block title\n----\nx\n----")
    assert out == "*Block title*\n```\nx\n```"
    assert ".Block title" not in out


def test_direct_block_title_not_confused_with_ordered_items():
    assert asciidoc_to_markdown_direct(". item\n.. nested") == "1. item\n   1. nested"


def test_direct_leaves_snake_case_alone():
    """Underscores inside words are not treated as italic delimiters."""
    assert asciidoc_to_markdown_direct("call my_func_name now") == "call my_func_name now"


def test_direct_source_listing():
    """A [source,lang] listing becomes a fenced block with that language."""
    out = asciidoc_to_markdown_direct("[source,java]\n----\nint *x* = 1;\n----")
    assert out == "```java\nint *x* = 1;\n```"


def test_direct_drops_attribute_lines():
    """Document attribute and block attribute lines are dropped."""
    out = asciidoc_to_markdown_direct(":toc: left\n= Title\n\n[NOTE]\nBody")
    assert out == "# Title\n\nBody"


def test_direct_unterminated_listing_is_closed():
    """An unterminated listing block is closed at end of input."""
    assert asciidoc_to_markdown_direct("----\ncode").endswith("```")


# --- HTML ---

PAGE_HTML = """\
<html><head><title>Ignored</title><script>track()</script></head>
<body>
<nav>menu</nav>
<h1>Title</h1>
<p>Hello <strong>world</strong> and <a href="https://example.com">a link</a>.</p>
<ul><li>one</li><li>two</li></ul>
</body></html>
"""


def test_html_to_markdown_uses_markdownify():
    """HTML converts to ATX headings, strong emphasis, links and '-' bullets."""
    md = html_to_markdown(PAGE_HTML)
    assert "# Title" in md
    assert "Hello **world** and [a link](https://example.com)." in md
    assert "- one" in md
    assert "- two" in md


def test_html_to_markdown_strips_script_and_nav():
    """script and nav elements do not leak into the output."""
    md = html_to_markdown(PAGE_HTML)
    assert "track()" not in md
    assert "menu" not in md


def test_html_to_markdown_empty_input():
    assert html_to_markdown("") == ""
    assert html_to_markdown("   ") == ""


def test_html_to_markdown_falls_back_on_empty_output(monkeypatch):
    """An empty markdownify result triggers the regex fallback."""
    monkeypatch.setattr(source.markdownify, "markdownify", lambda *a, **k: "")
    assert html_to_markdown(PAGE_HTML) == html_to_markdown_simple(PAGE_HTML)


def test_html_to_markdown_falls_back_on_error(monkeypatch):
    """A markdownify exception triggers the regex fallback."""
    def _boom(*args, **kwargs):
        raise RuntimeError("converter exploded")
    monkeypatch.setattr(source.markdownify, "markdownify", _boom)
    assert html_to_markdown(PAGE_HTML) == html_to_markdown_simple(PAGE_HTML)


def test_html_to_markdown_simple():
    """The regex fallback handles headings, emphasis, links, list items and code."""
    md = html_to_markdown_simple(
        "<html><body><h2>Intro</h2><p>Use <em>this</em> <code>cmd</code></p>"
        "<pre><code>x = 1</code></pre><ol><li>step</li></ol></body></html>"
    )
    assert "## Intro" in md
    assert "Use *this* `cmd`" in md
    assert "```\nx = 1\n```" in md
    assert "- step" in md
    assert "<" not in md


def test_html_to_markdown_simple_drops_head():
    """Everything before <body> is discarded."""
    md = html_to_markdown_simple("<html><head><title>T</title></head><body><p>Body</p></body></html>")
    assert md == "Body"


# --- AsciiDoc processor ---

def test_asciidoc_to_html_missing_processor(tmp_path, no_asciidoctor):
    """A missing asciidoctor executable raises ConversionError."""
    f = tmp_path / "doc.adoc"
    f.write_text("= Title\n")
    with pytest.raises(ConversionError, match="not found"):
        asciidoc_to_html(f)


def test_asciidoc_to_html_nonzero_exit(tmp_path, monkeypatch):
    """A failing asciidoctor run raises ConversionError with its exit status."""
    def _fail(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, stderr="bad input")
    monkeypatch.setattr(source.subprocess, "run", _fail)
    f = tmp_path / "doc.adoc"
    f.write_text("= Title\n")
    with pytest.raises(ConversionError, match="exited with 1"):
        asciidoc_to_html(f)


def test_asciidoc_to_html_invocation(tmp_path, monkeypatch):
    """asciidoctor is asked for embedded HTML5 on stdout."""
    seen = {}

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        return subprocess.CompletedProcess(cmd, 0, stdout="<h2>Intro</h2>", stderr="")
    monkeypatch.setattr(source.subprocess, "run", _run)
    f = tmp_path / "doc.adoc"
    f.write_text("== Intro\n")
    assert asciidoc_to_html(f, "my-asciidoctor") == "<h2>Intro</h2>"
    assert seen["cmd"][:6] == ["my-asciidoctor", "-b", "html5", "-s", "-o", "-"]


def test_asciidoc_to_markdown_via_processor(tmp_path, monkeypatch):
    """Processor HTML output is converted to Markdown."""
    monkeypatch.setattr(
        source.subprocess, "run",
        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="<h2>Intro</h2><p>Body</p>", stderr=""),
    )
    f = tmp_path / "doc.adoc"
    f.write_text("== Intro\n\nBody\n")
    assert asciidoc_to_markdown(f) == "## Intro\n\nBody"


def test_asciidoc_to_markdown_falls_back(tmp_path, no_asciidoctor):
    """Without a processor the direct line conversion is used."""
    f = tmp_path / "doc.adoc"
    f.write_text("= Title\n\n== Part\n\n* item\n")
    assert asciidoc_to_markdown(f) == "# Title\n\n## Part\n\n- item"


def test_source_to_markdown_dispatches_html(tmp_path):
    f = tmp_path / "page.html"
    f.write_text("<h3>Deep</h3>")
    assert source_to_markdown(f) == "### Deep"


def test_source_to_markdown_rejects_unknown_suffix(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("x")
    with pytest.raises(ValueError, match="Unsupported"):
        source_to_markdown(f)
