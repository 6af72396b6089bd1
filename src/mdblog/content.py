"""Content store for markdown documents.

Reads a content directory, converts every markdown file to HTML and extracts
a display title. Documents are trusted, author-controlled content: raw HTML
inside markdown passes through the converter and is never sanitized. If the
content source ever becomes untrusted, sanitize `Document.body` before it
reaches a template.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = ".md"
UNTITLED = "Untitled"

# First line starting with a single "#" followed by whitespace
_TITLE_RE = re.compile(r"^#\s+(.+)", re.MULTILINE)

_md = MarkdownIt("commonmark", {"html": True})

Converter = Callable[[str], str]


def render_markdown(text: str) -> str:
    """Convert markdown text to HTML."""
    return _md.render(text)


def extract_title(raw: str) -> str:
    """Return the first level-1 heading in raw markdown, or "Untitled".

    Examples:
        >>> extract_title("intro\\n# Hello World\\n")
        'Hello World'
        >>> extract_title("## Not a title")
        'Untitled'
    """
    match = _TITLE_RE.search(raw)
    if match is None:
        return UNTITLED
    return match.group(1).strip() or UNTITLED


@dataclass(frozen=True)
class Document:
    """One parsed content unit.

    Attributes:
        slug: Filename without the markdown extension
        title: First level-1 heading, or "Untitled"
        body: Rendered HTML
    """

    slug: str
    title: str
    body: str


def load_documents(
    directory: Path | str,
    converter: Converter = render_markdown,
) -> list[Document]:
    """Load every markdown document in a directory.

    Result order follows directory enumeration order, which is not sorted.
    A directory that cannot be listed yields an empty list; a single file
    that cannot be read is skipped. Bytes that are not valid UTF-8 are
    decoded as U+FFFD.

    Args:
        directory: Content directory
        converter: Markdown to HTML converter

    Returns:
        One Document per readable markdown file
    """
    directory = Path(directory)

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        logger.error("Error loading posts from %s: %s", directory, e)
        return []

    documents: list[Document] = []
    for entry in entries:
        if not entry.name.endswith(MARKDOWN_EXTENSION) or not entry.is_file():
            continue

        try:
            raw = entry.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Skipping unreadable post %s: %s", entry, e)
            continue

        documents.append(
            Document(
                slug=entry.name[: -len(MARKDOWN_EXTENSION)],
                title=extract_title(raw),
                body=converter(raw),
            )
        )

    logger.debug("Loaded %d documents from %s", len(documents), directory)
    return documents


class ContentStore:
    """In-memory cache of the documents in one content directory.

    The set is loaded on first access and kept until `invalidate()` or
    `reload()`; documents added to the directory afterwards stay invisible
    until then.

    Usage:
        store = ContentStore("src/content")
        for document in store.documents:
            ...
    """

    def __init__(
        self,
        directory: Path | str,
        converter: Converter = render_markdown,
    ) -> None:
        self.directory = Path(directory)
        self._converter = converter
        self._documents: tuple[Document, ...] | None = None
        self._by_slug: dict[str, Document] = {}

    def load(self, directory: Path | str | None = None) -> list[Document]:
        """Read documents from disk without touching the cache."""
        return load_documents(directory or self.directory, self._converter)

    def reload(self) -> tuple[Document, ...]:
        """Replace the cached set with a fresh load."""
        documents = tuple(self.load())
        self._documents = documents
        self._by_slug = {document.slug: document for document in documents}
        return documents

    def invalidate(self) -> None:
        """Drop the cached set; the next access reloads it."""
        self._documents = None
        self._by_slug = {}

    @property
    def documents(self) -> tuple[Document, ...]:
        """Cached documents, loaded on first access."""
        if self._documents is None:
            return self.reload()
        return self._documents

    def get(self, slug: str) -> Document | None:
        """Look up a cached document by slug."""
        if self._documents is None:
            self.reload()
        return self._by_slug.get(slug)

    def __len__(self) -> int:
        return len(self.documents)
