"""mdblog page templates and render contract.

This package holds the default Jinja2 page templates (page.html.j2 for the
list page, slug.html.j2 for a single post) and the resolvers that turn a
template reference into a render function.
"""

from mdblog.templates.renderer import (
    NOT_FOUND_FRAGMENT,
    DetailPage,
    JinjaTemplateResolver,
    ListPage,
    ModuleTemplateResolver,
    PageShape,
    RenderFn,
    StaticTemplateResolver,
    TemplateResolver,
    create_jinja_environment,
    render_page,
)

__all__ = [
    "NOT_FOUND_FRAGMENT",
    "DetailPage",
    "JinjaTemplateResolver",
    "ListPage",
    "ModuleTemplateResolver",
    "PageShape",
    "RenderFn",
    "StaticTemplateResolver",
    "TemplateResolver",
    "create_jinja_environment",
    "render_page",
]
