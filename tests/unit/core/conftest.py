"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```

> Quoted line.

---

Footer paragraph.
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="sample_tree")
def sample_tree_fixture(parser):
    return SyntaxTreeNode(parser.parse(SAMPLE_MD))
