"""Jinja2 filters for page templates."""

from mdblog.routes import detail_path


def post_url(slug: str) -> str:
    """Return the detail page URL for a slug.

    Examples:
        >>> post_url("hello-world")
        '/post/hello-world'
    """
    return detail_path(slug)
