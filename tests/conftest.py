"""Root test configuration: environment isolation and cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = ["converted"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep DOCPUB_* variables from the host environment out of every test."""
    for name in ("ADOC_DIR", "HTML_DIR", "DIAGRAMS_DIR", "MARKDOWN_DIR", "ADF_DIR",
                 "PARSER_CONFIG", "ASCIIDOCTOR_CMD", "LOG_LEVEL"):
        monkeypatch.delenv(f"DOCPUB_{name}", raising=False)


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove output directories created in the project root during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)
