"""Unit tests for the content store."""

import dataclasses
from pathlib import Path

import pytest

from mdblog.content import (
    UNTITLED,
    ContentStore,
    Document,
    extract_title,
    load_documents,
    render_markdown,
)


class TestExtractTitle:
    """Tests for title extraction."""

    def test_first_line_heading(self) -> None:
        """Test a heading on the first line."""
        assert extract_title("# Hello World\n\nBody") == "Hello World"

    def test_heading_after_preamble(self) -> None:
        """Test that the heading does not need to be on the first line."""
        assert extract_title("intro text\n\n# Later Title\n") == "Later Title"

    def test_first_match_wins(self) -> None:
        """Test that only the first level-1 heading is used."""
        assert extract_title("# First\n\n# Second\n") == "First"

    def test_subheading_ignored(self) -> None:
        """Test that ## headings are not titles."""
        assert extract_title("## Sub\n\ntext") == UNTITLED

    def test_marker_needs_whitespace(self) -> None:
        """Test that #hashtag is not a heading."""
        assert extract_title("#hashtag\n") == UNTITLED

    def test_indented_heading_ignored(self) -> None:
        """Test that the marker must start the line."""
        assert extract_title("  # Indented\n") == UNTITLED

    def test_empty_text(self) -> None:
        """Test untitled fallback for empty input."""
        assert extract_title("") == "Untitled"


class TestRenderMarkdown:
    """Tests for the default markdown converter."""

    def test_renders_heading_and_emphasis(self) -> None:
        """Test basic commonmark rendering."""
        html = render_markdown("# Title\n\nSome **bold** text.\n")

        assert "<h1>Title</h1>" in html
        assert "<strong>bold</strong>" in html

    def test_raw_html_passes_through(self) -> None:
        """Test that embedded HTML is kept (content is trusted)."""
        html = render_markdown('<div class="note">hi</div>\n')

        assert '<div class="note">hi</div>' in html


class TestLoadDocuments:
    """Tests for load_documents."""

    def test_one_record_per_markdown_file(self, content_dir: Path) -> None:
        """Test that each .md file yields exactly one document."""
        (content_dir / "hello-world.md").write_text("# Hello World\n\nBody text\n")
        (content_dir / "other.md").write_text("no title\n")
        (content_dir / "image.png").write_bytes(b"\x89PNG")
        (content_dir / "draft.md.bak").write_text("# Backup\n")

        documents = load_documents(content_dir)

        assert sorted(d.slug for d in documents) == ["hello-world", "other"]

    def test_document_fields(self, content_dir: Path) -> None:
        """Test slug, title and body of a loaded document."""
        (content_dir / "hello-world.md").write_text("# Hello World\n\nBody text\n")

        [document] = load_documents(content_dir)

        assert document.slug == "hello-world"
        assert document.title == "Hello World"
        assert "<p>Body text</p>" in document.body

    def test_untitled_document(self, content_dir: Path) -> None:
        """Test the Untitled fallback."""
        (content_dir / "plain.md").write_text("just text\n")

        [document] = load_documents(content_dir)

        assert document.title == "Untitled"

    def test_custom_converter(self, content_dir: Path) -> None:
        """Test that the converter is pluggable."""
        (content_dir / "a.md").write_text("# A\n")

        [document] = load_documents(content_dir, converter=lambda raw: "<converted/>")

        assert document.body == "<converted/>"
        assert document.title == "A"

    def test_subdirectory_ignored(self, content_dir: Path) -> None:
        """Test that directories named like markdown files are skipped."""
        (content_dir / "folder.md").mkdir()
        (content_dir / "real.md").write_text("# Real\n")

        documents = load_documents(content_dir)

        assert [d.slug for d in documents] == ["real"]

    def test_invalid_utf8_keeps_every_post(self, content_dir: Path) -> None:
        """Test that a non-UTF-8 byte does not drop any posts."""
        (content_dir / "good.md").write_text("# Good\n")
        (content_dir / "latin.md").write_bytes(b"# Caf\xe9\n\nBody\n")

        documents = {d.slug: d for d in load_documents(content_dir)}

        assert set(documents) == {"good", "latin"}
        assert documents["latin"].title == "Caf\ufffd"
        assert "<p>Body</p>" in documents["latin"].body

    def test_unreadable_file_skipped(
        self, content_dir: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that one unreadable file is skipped and logged."""
        (content_dir / "good.md").write_text("# Good\n")
        (content_dir / "locked.md").write_text("# Locked\n")
        read_text = Path.read_text

        def failing_read(self: Path, *args: object, **kwargs: object) -> str:
            if self.name == "locked.md":
                raise PermissionError(13, "Permission denied", str(self))
            return read_text(self, *args, **kwargs)  # type: ignore[arg-type]

        monkeypatch.setattr(Path, "read_text", failing_read)

        documents = load_documents(content_dir)

        assert [d.slug for d in documents] == ["good"]
        assert "Skipping unreadable post" in caplog.text

    def test_missing_directory_returns_empty(self, tmp_path: Path) -> None:
        """Test that a missing directory yields an empty list."""
        assert load_documents(tmp_path / "does-not-exist") == []

    def test_missing_directory_is_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that the load failure is logged."""
        load_documents(tmp_path / "does-not-exist")

        assert "Error loading posts" in caplog.text

    def test_empty_directory(self, content_dir: Path) -> None:
        """Test that an empty directory yields no documents."""
        assert load_documents(content_dir) == []

    def test_sample_blog(self, sample_blog_dir: Path) -> None:
        """Test loading the sample blog content."""
        documents = {d.slug: d for d in load_documents(sample_blog_dir / "src" / "content")}

        assert set(documents) == {"hello-world", "second-post", "notes"}
        assert documents["second-post"].title == "Second Post"
        assert documents["notes"].title == "Untitled"


class TestDocument:
    """Tests for the Document record."""

    def test_immutable(self, hello_document: Document) -> None:
        """Test that documents cannot be modified."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            hello_document.title = "Changed"  # type: ignore[misc]


class TestContentStore:
    """Tests for ContentStore caching."""

    def test_loads_on_first_access(self, content_dir: Path) -> None:
        """Test lazy loading."""
        (content_dir / "a.md").write_text("# A\n")
        store = ContentStore(content_dir)

        assert len(store) == 1
        assert store.get("a") is not None

    def test_cache_is_not_refreshed(self, content_dir: Path) -> None:
        """Test that files added after loading stay invisible."""
        (content_dir / "a.md").write_text("# A\n")
        store = ContentStore(content_dir)
        first = store.documents

        (content_dir / "b.md").write_text("# B\n")

        assert store.documents is first
        assert store.get("b") is None

    def test_invalidate_reloads_whole_set(self, content_dir: Path) -> None:
        """Test that invalidation picks up new files."""
        (content_dir / "a.md").write_text("# A\n")
        store = ContentStore(content_dir)
        store.documents

        (content_dir / "b.md").write_text("# B\n")
        store.invalidate()

        assert {d.slug for d in store.documents} == {"a", "b"}

    def test_reload(self, content_dir: Path) -> None:
        """Test explicit reload."""
        store = ContentStore(content_dir)
        assert store.documents == ()

        (content_dir / "a.md").write_text("# A\n")

        assert [d.slug for d in store.reload()] == ["a"]

    def test_get_missing(self, content_dir: Path) -> None:
        """Test lookup of an unknown slug."""
        assert ContentStore(content_dir).get("missing") is None

    def test_documents_are_snapshot(self, content_dir: Path) -> None:
        """Test that consumers receive a tuple."""
        (content_dir / "a.md").write_text("# A\n")

        assert isinstance(ContentStore(content_dir).documents, tuple)
