"""Route classification for page requests.

Every request path maps to exactly one of: the list page, a detail page for a
slug, or unmatched. Unmatched paths are not ours to answer.
"""

from dataclasses import dataclass
from enum import Enum

DETAIL_PREFIX = "/post/"
LIST_PATHS = frozenset({"/", "/index.html", "index.html"})
PAGE_EXTENSION = ".html"


class RouteKind(Enum):
    """Kind of page a path resolves to."""

    LIST = "list"
    DETAIL = "detail"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class Route:
    """Classified request path.

    Attributes:
        kind: Page kind
        slug: Document slug (detail routes only)
    """

    kind: RouteKind
    slug: str | None = None

    @property
    def is_page(self) -> bool:
        """Return True if this route is rendered by mdblog."""
        return self.kind is not RouteKind.UNMATCHED


UNMATCHED = Route(RouteKind.UNMATCHED)


def classify_route(path: str) -> Route:
    """Classify a request path.

    Examples:
        >>> classify_route("/").kind
        <RouteKind.LIST: 'list'>
        >>> classify_route("/post/hello-world.html").slug
        'hello-world'
        >>> classify_route("/assets/app.css").kind
        <RouteKind.UNMATCHED: 'unmatched'>
    """
    if path in LIST_PATHS:
        return Route(RouteKind.LIST)

    if path.startswith(DETAIL_PREFIX):
        slug = path[len(DETAIL_PREFIX) :]
        if slug.endswith(PAGE_EXTENSION) and len(slug) > len(PAGE_EXTENSION):
            slug = slug[: -len(PAGE_EXTENSION)]
        return Route(RouteKind.DETAIL, slug)

    return UNMATCHED


def detail_path(slug: str) -> str:
    """Return the URL path of a document's detail page."""
    return f"{DETAIL_PREFIX}{slug}"
