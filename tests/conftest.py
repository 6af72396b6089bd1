"""Shared pytest fixtures for mdblog tests.

Fixtures are organized by category:
- Path fixtures: the sample blog shipped with the tests
- Project fixtures: a writable copy of the sample blog as the working directory
- Content fixtures: ready-made documents and configs
"""

import shutil
from pathlib import Path

import pytest

from mdblog.config import BlogConfig
from mdblog.content import Document
from tests.fixtures import SAMPLE_BLOG_PATH

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def sample_blog_dir() -> Path:
    """Return the path to the read-only sample blog."""
    return SAMPLE_BLOG_PATH


# =============================================================================
# Project Fixtures
# =============================================================================


@pytest.fixture
def blog_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Copy the sample blog into a temp dir and make it the working directory.

    The config side-channel file and relative config paths resolve against
    the working directory, so every test gets its own.
    """
    project = tmp_path / "blog"
    shutil.copytree(SAMPLE_BLOG_PATH, project)
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def blog_config() -> BlogConfig:
    """Return the default config (paths relative to the working directory)."""
    return BlogConfig()


# =============================================================================
# Content Fixtures
# =============================================================================


@pytest.fixture
def hello_document() -> Document:
    """Return the document parsed from hello-world.md."""
    return Document(
        slug="hello-world",
        title="Hello World",
        body="<h1>Hello World</h1>\n<p>This is the <strong>first</strong> post.</p>\n",
    )


@pytest.fixture
def documents(hello_document: Document) -> list[Document]:
    """Return a small document set."""
    return [
        hello_document,
        Document(slug="second-post", title="Second Post", body="<p>Second body</p>\n"),
    ]


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create an empty content directory."""
    directory = tmp_path / "content"
    directory.mkdir()
    return directory
