"""Page render contract and template resolvers.

A page shape (ListPage or DetailPage) is turned into an HTML fragment by a
render function. Render functions are obtained lazily from a template
reference through a TemplateResolver, so a page template is only loaded when
a page actually needs it.

Resolvers:
- JinjaTemplateResolver: reference is a Jinja2 template name
- ModuleTemplateResolver: reference is "package.module:callable"
- StaticTemplateResolver: explicit registration, for injection and tests
"""

import importlib
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from mdblog.content import Document
from mdblog.errors import TemplateRenderError, TemplateResolutionError
from mdblog.templates.filters import post_url

logger = logging.getLogger(__name__)

NOT_FOUND_FRAGMENT = "<h1>Post not found</h1>"


# =============================================================================
# Page Shapes
# =============================================================================


@dataclass(frozen=True)
class ListPage:
    """List page input: every loaded document."""

    documents: Sequence[Document] = field(default_factory=tuple)

    def context(self) -> dict[str, Any]:
        """Template context for the list page."""
        return {"posts": list(self.documents)}


@dataclass(frozen=True)
class DetailPage:
    """Detail page input: exactly one document."""

    document: Document

    def context(self) -> dict[str, Any]:
        """Template context for the detail page."""
        return {"post": self.document}


PageShape = ListPage | DetailPage
RenderFn = Callable[[PageShape], str]


class TemplateResolver(Protocol):
    """Resolves a template reference into a render function."""

    def resolve(self, reference: str) -> RenderFn:
        """Return the render function for a reference.

        Raises:
            TemplateResolutionError: If the reference cannot be resolved
        """
        ...


def render_page(resolver: TemplateResolver, reference: str, page: PageShape) -> str:
    """Resolve a template and render a page shape with it.

    Args:
        resolver: Resolver that owns the template lookup
        reference: Template reference from the configuration
        page: Page shape to render

    Returns:
        HTML fragment

    Raises:
        TemplateResolutionError: If the reference cannot be resolved
        TemplateRenderError: If the render function fails
    """
    render = resolver.resolve(reference)

    try:
        fragment = render(page)
    except Exception as e:
        logger.error("Template rendering failed for %s: %s", reference, e)
        raise TemplateRenderError(reference, str(e)) from e

    if not isinstance(fragment, str):
        raise TemplateRenderError(
            reference, f"render function returned {type(fragment).__name__}, expected str"
        )
    return fragment


# =============================================================================
# Jinja2 Resolver
# =============================================================================


def create_jinja_environment(search_paths: Iterable[Path | str] = ()) -> Environment:
    """Create the Jinja2 environment used for page templates.

    Project template directories are searched first, then the templates
    packaged with mdblog.

    Args:
        search_paths: Project template directories

    Returns:
        Configured Jinja2 environment
    """
    loaders = [FileSystemLoader([str(p) for p in search_paths])] if search_paths else []
    loaders.append(PackageLoader("mdblog", "templates"))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml", "html.j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
        auto_reload=True,
    )
    env.filters["post_url"] = post_url
    return env


class JinjaTemplateResolver:
    """Resolves template names through a Jinja2 environment.

    Templates are looked up on every resolve; Jinja2 reloads a template when
    its source file changes, so edits apply without a restart.
    """

    def __init__(self, env: Environment) -> None:
        self._env = env

    def resolve(self, reference: str) -> RenderFn:
        try:
            template = self._env.get_template(reference)
        except TemplateNotFound as e:
            logger.error("Failed to load template %s: %s", reference, e)
            raise TemplateResolutionError(reference) from e
        except TemplateError as e:
            logger.error("Failed to load template %s: %s", reference, e)
            raise TemplateResolutionError(reference, f"Invalid template {reference}: {e}") from e

        def render(page: PageShape) -> str:
            return template.render(**page.context())

        return render


# =============================================================================
# Module Resolver
# =============================================================================


class ModuleTemplateResolver:
    """Resolves "package.module:callable" references by importing them.

    The callable receives the page shape and returns an HTML string. Imports
    happen at resolve time, not at construction.
    """

    def resolve(self, reference: str) -> RenderFn:
        module_name, sep, attr = reference.partition(":")
        if not sep or not module_name or not attr:
            raise TemplateResolutionError(
                reference, f"Invalid module reference: {reference} (expected 'module:callable')"
            )

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error("Failed to import %s: %s", module_name, e)
            raise TemplateResolutionError(reference, f"Cannot import {module_name}: {e}") from e

        target: Any = module
        for part in attr.split("."):
            target = getattr(target, part, None)
            if target is None:
                raise TemplateResolutionError(reference, f"{module_name} has no attribute {attr}")

        if not callable(target):
            raise TemplateResolutionError(reference, f"{reference} is not callable")

        return target


def is_module_reference(reference: str) -> bool:
    """Return True for "module:callable" references."""
    return ":" in reference


# =============================================================================
# Static Resolver
# =============================================================================


class StaticTemplateResolver:
    """Resolver backed by explicitly registered render functions."""

    def __init__(self, templates: dict[str, RenderFn] | None = None) -> None:
        self._templates: dict[str, RenderFn] = dict(templates or {})

    def register(self, reference: str, render: RenderFn) -> None:
        """Register a render function under a reference."""
        self._templates[reference] = render

    def resolve(self, reference: str) -> RenderFn:
        try:
            return self._templates[reference]
        except KeyError:
            raise TemplateResolutionError(reference) from None
