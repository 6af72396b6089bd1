"""Dev server: renders pages per request.

Each request runs through: classify the route, then either decline it (hand
it to the next handler unmodified) or render the list/detail fragment, read
the page shell fresh, splice the fragment in and respond with HTML.

The document set is loaded once when the app is created and shared
read-only across requests. Documents added afterwards need a restart.
"""

import inspect
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from mdblog.config import BlogConfig
from mdblog.content import ContentStore, Document
from mdblog.environment import RenderEnvironment
from mdblog.errors import RenderError
from mdblog.routes import Route, RouteKind, classify_route
from mdblog.shell import ShellTransform, identity_transform, read_shell, splice
from mdblog.templates.renderer import (
    NOT_FOUND_FRAGMENT,
    DetailPage,
    ListPage,
    TemplateResolver,
    render_page,
)

logger = logging.getLogger(__name__)

RENDERED_METHODS = frozenset({"GET", "HEAD"})


@dataclass
class DevSite:
    """State owned by one dev server, shared by all of its requests.

    Attributes:
        config: Resolved configuration
        documents: Document set loaded at startup (never mutated)
        environment: Long-lived rendering environment
        shell_transform: Post-processing hook applied to the shell
    """

    config: BlogConfig
    documents: tuple[Document, ...]
    environment: RenderEnvironment
    shell_transform: ShellTransform = identity_transform
    _by_slug: dict[str, Document] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_slug = {document.slug: document for document in self.documents}

    @property
    def shell_path(self) -> Path:
        """Source page shell, read on every request."""
        return Path(self.config.shell)

    def find(self, slug: str) -> Document | None:
        """Look up a document by slug."""
        return self._by_slug.get(slug)


class DevRenderMiddleware(BaseHTTPMiddleware):
    """Renders list and detail pages; passes every other request through.

    Unexpected failures are logged and re-raised as RenderError so the ASGI
    error handling answers with a 500 while the server keeps running.
    """

    def __init__(self, app: ASGIApp, site: DevSite) -> None:
        super().__init__(app)
        self.site = site

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        route = classify_route(path)

        if not route.is_page or request.method not in RENDERED_METHODS:
            return await call_next(request)

        url = path + (f"?{request.url.query}" if request.url.query else "")
        try:
            return await self.render(route, url)
        except Exception as e:
            logger.exception("Error rendering %s", url)
            if isinstance(e, RenderError):
                raise
            raise RenderError(f"Failed to render {url}: {e}") from e

    async def render(self, route: Route, url: str) -> HTMLResponse:
        """Render a page route into a full HTML response."""
        site = self.site
        status_code = 200

        if route.kind is RouteKind.LIST:
            fragment = await run_in_threadpool(
                render_page,
                site.environment,
                site.config.page_template,
                ListPage(site.documents),
            )
        else:
            document = site.find(route.slug or "")
            if document is None:
                logger.info("Post not found: %s", route.slug)
                status_code = 404
                fragment = NOT_FOUND_FRAGMENT
            else:
                fragment = await run_in_threadpool(
                    render_page,
                    site.environment,
                    site.config.slug_template,
                    DetailPage(document),
                )

        shell = await run_in_threadpool(read_shell, site.shell_path)
        shell = site.shell_transform(url, shell)
        if inspect.isawaitable(shell):
            shell = await shell

        return HTMLResponse(splice(shell, fragment), status_code=status_code)


def create_dev_app(
    config: BlogConfig | None = None,
    documents: list[Document] | tuple[Document, ...] | None = None,
    resolver: TemplateResolver | None = None,
    shell_transform: ShellTransform | None = None,
) -> FastAPI:
    """Create the dev server application.

    Args:
        config: Resolved configuration (defaults when None)
        documents: Preloaded documents (loaded from content_dir when None)
        resolver: Template resolver overriding the Jinja2/module lookup
        shell_transform: Hook applied to the shell before splicing

    Returns:
        FastAPI app; requests it does not render fall through to static_dir
    """
    config = config or BlogConfig()

    if documents is None:
        documents = ContentStore(config.content_dir).documents
    logger.info("Loaded %d posts", len(documents))

    environment = RenderEnvironment(config, resolver=resolver, name="dev")
    site = DevSite(
        config=config,
        documents=tuple(documents),
        environment=environment,
        shell_transform=shell_transform or identity_transform,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            environment.close()

    app = FastAPI(
        title="mdblog dev server",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.site = site
    app.add_middleware(DevRenderMiddleware, site=site)

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir), name="static")

    return app


def create_preview_app(out_dir: Path | str) -> FastAPI:
    """Create an app that serves a generated site.

    `/post/{slug}` is served from `post/{slug}.html`, mirroring the dev
    server's routes.
    """
    out_dir = Path(out_dir)

    app = FastAPI(
        title="mdblog preview",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/post/{name}")
    async def post_page(name: str) -> FileResponse:
        route = classify_route(f"/post/{name}")
        page = out_dir / "post" / f"{route.slug}.html"
        if not page.is_file():
            raise HTTPException(status_code=404, detail="Post not found")
        return FileResponse(page, media_type="text/html")

    app.mount("/", StaticFiles(directory=out_dir, html=True, check_dir=False), name="site")
    return app
