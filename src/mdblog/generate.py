"""Static site generation (batch mode).

Renders the list page once and every detail page once, splices each into the
page shell and writes them to deterministic paths:

    {out_dir}/index.html
    {out_dir}/post/{slug}.html

A fresh rendering environment is created for the run and always released.
Any failure aborts the run; files already written are left in place and
are overwritten by the next run.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path

from mdblog.config import BlogConfig
from mdblog.content import Converter, Document, load_documents, render_markdown
from mdblog.environment import RenderEnvironment, open_environment
from mdblog.errors import GenerationError
from mdblog.routes import detail_path
from mdblog.shell import load_output_shell, splice
from mdblog.templates.renderer import DetailPage, ListPage, render_page

logger = logging.getLogger(__name__)

EnvironmentFactory = Callable[[BlogConfig], AbstractContextManager[RenderEnvironment]]


def _default_environment(config: BlogConfig) -> AbstractContextManager[RenderEnvironment]:
    return open_environment(config, name="build")


@dataclass
class GenerationResult:
    """Outcome of a generation run.

    Attributes:
        out_dir: Output directory
        pages: Written files, in write order
        documents: Number of documents rendered
    """

    out_dir: Path
    pages: list[Path] = field(default_factory=list)
    documents: int = 0

    @property
    def index_path(self) -> Path:
        """Path of the generated list page."""
        return self.out_dir / "index.html"


def output_path(out_dir: Path | str, slug: str | None = None) -> Path:
    """Return the output file for the list page (no slug) or a detail page."""
    out_dir = Path(out_dir)
    if slug is None:
        return out_dir / "index.html"
    return out_dir / "post" / f"{slug}.html"


class StaticSiteGenerator:
    """Runs one static generation job.

    Usage:
        generator = StaticSiteGenerator(config)
        result = generator.run()
    """

    def __init__(
        self,
        config: BlogConfig | None = None,
        converter: Converter = render_markdown,
        environment_factory: EnvironmentFactory = _default_environment,
    ) -> None:
        """Initialize the generator.

        Args:
            config: Resolved configuration (defaults when None)
            converter: Markdown to HTML converter
            environment_factory: Creates the scoped rendering environment
        """
        self.config = config or BlogConfig()
        self._converter = converter
        self._environment_factory = environment_factory

    def run(self) -> GenerationResult:
        """Generate every page.

        Returns:
            GenerationResult listing the written files

        Raises:
            GenerationError: If any step fails
        """
        config = self.config
        out_dir = Path(config.out_dir)
        result = GenerationResult(out_dir=out_dir)
        step = "load content"

        logger.info("Generating static pages...")

        try:
            documents = load_documents(config.content_dir, self._converter)
            result.documents = len(documents)
            logger.info("Found %d posts to generate", len(documents))

            step = "create environment"
            with self._environment_factory(config) as env:
                step = "read shell"
                shell = load_output_shell(out_dir)

                step = "create output directories"
                (out_dir / "post").mkdir(parents=True, exist_ok=True)

                step = "render list page"
                index_html = render_page(env, config.page_template, ListPage(tuple(documents)))
                result.pages.append(self._write(output_path(out_dir), splice(shell, index_html)))
                logger.info("Generated /")

                for document in documents:
                    step = f"render {detail_path(document.slug)}"
                    result.pages.append(self._render_detail(env, shell, document))
                    logger.info("Generated %s", detail_path(document.slug))

        except Exception as e:
            logger.error("Build error during %s: %s", step, e)
            raise GenerationError(str(e), step=step) from e

        logger.info("Static site generation complete (%d pages)", len(result.pages))
        return result

    def _render_detail(self, env: RenderEnvironment, shell: str, document: Document) -> Path:
        fragment = render_page(env, self.config.slug_template, DetailPage(document))
        return self._write(output_path(self.config.out_dir, document.slug), splice(shell, fragment))

    @staticmethod
    def _write(path: Path, html: str) -> Path:
        path.write_text(html, encoding="utf-8")
        return path


def generate_static_site(
    config: BlogConfig | None = None,
    converter: Converter = render_markdown,
    environment_factory: EnvironmentFactory = _default_environment,
) -> GenerationResult:
    """Generate the static site for a configuration.

    Args:
        config: Resolved configuration (defaults when None)
        converter: Markdown to HTML converter
        environment_factory: Creates the scoped rendering environment

    Returns:
        GenerationResult listing the written files

    Raises:
        GenerationError: If any step fails
    """
    return StaticSiteGenerator(config, converter, environment_factory).run()
