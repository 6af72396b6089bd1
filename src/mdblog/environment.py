"""Rendering environment: an isolated context that resolves template references.

The dev server keeps one environment for its whole lifetime. Batch
generation creates a fresh one and must release it when done, whether or not
generation succeeded; use `open_environment` for that.

Usage:
    with open_environment(config) as env:
        render = env.resolve(config.page_template)
        html = render(ListPage(documents))
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mdblog.config import BlogConfig
from mdblog.errors import EnvironmentClosedError
from mdblog.templates.renderer import (
    JinjaTemplateResolver,
    ModuleTemplateResolver,
    RenderFn,
    TemplateResolver,
    create_jinja_environment,
    is_module_reference,
)

logger = logging.getLogger(__name__)


class RenderEnvironment:
    """Resolves template references for one rendering session.

    Plain names go to a Jinja2 environment rooted at the project template
    directory (falling back to the packaged templates); "module:callable"
    references are imported. An explicit resolver replaces both.

    Attributes:
        name: Label used in log messages
    """

    def __init__(
        self,
        config: BlogConfig | None = None,
        resolver: TemplateResolver | None = None,
        name: str = "render",
    ) -> None:
        """Create the environment.

        Args:
            config: Configuration providing templates_dir
            resolver: Resolver to use instead of the Jinja2/module pair
            name: Label used in log messages
        """
        self.config = config or BlogConfig()
        self.name = name
        self._closed = False

        if resolver is not None:
            self._resolver: TemplateResolver | None = resolver
            self._jinja = None
        else:
            self._resolver = None
            templates_dir = Path(self.config.templates_dir)
            search_paths = [templates_dir] if templates_dir.is_dir() else []
            self._jinja = create_jinja_environment(search_paths)
            self._jinja_resolver = JinjaTemplateResolver(self._jinja)
            self._module_resolver = ModuleTemplateResolver()

        logger.debug("Created %s environment", self.name)

    @property
    def closed(self) -> bool:
        """Return True once the environment has been released."""
        return self._closed

    def resolve(self, reference: str) -> RenderFn:
        """Resolve a template reference to a render function.

        Args:
            reference: Template name or "module:callable"

        Returns:
            Render function for the reference

        Raises:
            EnvironmentClosedError: If the environment was closed
            TemplateResolutionError: If the reference cannot be resolved
        """
        if self._closed:
            raise EnvironmentClosedError(f"{self.name} environment is closed")

        if self._resolver is not None:
            return self._resolver.resolve(reference)
        if is_module_reference(reference):
            return self._module_resolver.resolve(reference)
        return self._jinja_resolver.resolve(reference)

    def close(self) -> None:
        """Release the environment. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        if self._jinja is not None and self._jinja.cache is not None:
            self._jinja.cache.clear()
        logger.debug("Closed %s environment", self.name)

    def __enter__(self) -> "RenderEnvironment":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@contextmanager
def open_environment(
    config: BlogConfig | None = None,
    resolver: TemplateResolver | None = None,
    name: str = "render",
) -> Iterator[RenderEnvironment]:
    """Create a rendering environment and close it on exit.

    Args:
        config: Configuration providing templates_dir
        resolver: Resolver to use instead of the Jinja2/module pair
        name: Label used in log messages

    Yields:
        Open RenderEnvironment
    """
    env = RenderEnvironment(config, resolver=resolver, name=name)
    try:
        yield env
    finally:
        env.close()
