"""Data models for parsed Markdown and Atlassian Document Format output"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

from markdown_it.tree import SyntaxTreeNode
from pydantic import BaseModel, ConfigDict, Field


MarkType = Literal["strong", "em", "code", "link"]     # marks the converter emits


class AdfMark(BaseModel):
    """Inline styling attached to a text node.

    Any ADF mark type is accepted when reading documents from disk; keys not
    declared here are kept and dumped back unchanged.
    """
    model_config = ConfigDict(extra="allow")

    type: str
    attrs: Optional[dict[str, Any]] = None


class AdfNode(BaseModel):
    """A block or inline ADF node; unset optional fields are omitted on dump."""
    model_config = ConfigDict(extra="allow")

    type: str
    attrs: Optional[dict[str, Any]] = None
    content: Optional[list[AdfNode]] = None
    text: Optional[str] = None
    marks: Optional[list[AdfMark]] = None


class AdfDocument(BaseModel):
    """Top-level ADF document: fixed version and type, ordered block content."""
    model_config = ConfigDict(extra="allow")

    version: int = 1
    type: Literal["doc"] = "doc"
    content: list[AdfNode] = Field(default_factory=list)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent, exclude_none=True)


@dataclass
class ParsedDoc:
    """Internal parse result carrying the markdown-it syntax tree; not persisted."""
    path:     Path
    markdown: str
    tree:     SyntaxTreeNode


def text_node(text: str, *marks: AdfMark) -> AdfNode:
    """Build an ADF text node, attaching marks only when given."""
    return AdfNode(type="text", text=text, marks=list(marks) or None)


@dataclass
class PublishResult:
    """Outcome of one publish run."""
    counts:  dict[str, int]
    changes: list[tuple[str, str]]      # (status, page title)
    attachments: dict[str, str]         # filename -> attachment id

    @classmethod
    def empty(cls) -> PublishResult:
        return cls(counts={"created": 0, "updated": 0, "failed": 0}, changes=[], attachments={})

    def record(self, status: str, title: str) -> None:
        self.counts[status] += 1
        self.changes.append((status, title))
