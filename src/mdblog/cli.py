"""mdblog CLI interface.

Commands:
- dev: Start the development server
- build: Prepare the output directory, then run static generation
- generate: Static generation from the persisted build configuration
- preview: Serve the generated site
- init: Scaffold a new blog

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import subprocess
import sys
from pathlib import Path
from typing import Annotated

import typer

from mdblog import __version__
from mdblog.config import BlogConfig, create_default_config, load_config, resolve_config
from mdblog.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="mdblog",
    help="Markdown blog renderer with a dev server and static generation",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: BlogConfig | None = None
_log_flags: list[str] = []
_logger = get_logger()

DEFAULT_SHELL = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>My Blog</title>
  </head>
  <body>
    <div id="app"></div>
  </body>
</html>
"""

DEFAULT_POST = """# Hello World

Welcome to your new blog. Edit `src/content/hello-world.md` or add more
markdown files next to it; each file becomes a page at `/post/<filename>`.
"""


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mdblog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """mdblog - render a directory of markdown posts.

    Serve it with a live-rendering dev server, or build it into static files.
    """
    global _config, _log_flags

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)
    _log_flags = [
        flag for flag, enabled in (("--verbose", verbose), ("--quiet", quiet), ("--ci", ci)) if enabled
    ]

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _resolve(**overrides: object) -> BlogConfig:
    """Apply CLI overrides to the loaded config."""
    try:
        return resolve_config(overrides, _config)
    except ValueError as e:
        _logger.error(f"Invalid option: {e}")
        raise typer.Exit(1)


# =============================================================================
# dev command
# =============================================================================


@app.command()
def dev(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Interface to bind (overrides config)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on (overrides config)"),
    ] = None,
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", help="Markdown content directory (overrides config)"),
    ] = None,
) -> None:
    """Start the development server.

    Pages are rendered on every request; the page shell and templates are
    re-read so edits show up on reload. New posts need a restart.
    """
    import uvicorn

    from mdblog.server import create_dev_app

    config = _resolve(host=host, port=port, content_dir=content_dir)
    _logger.info("Starting development server...")

    dev_app = create_dev_app(config)
    _logger.info(f"Serving on http://{config.server.host}:{config.server.port}")
    uvicorn.run(dev_app, host=config.server.host, port=config.server.port, log_level="warning")


# =============================================================================
# build / generate commands
# =============================================================================


def _run_generation_process(log_flags: list[str]) -> int:
    """Run `mdblog generate` in a separate Python process."""
    command = [sys.executable, "-m", "mdblog", *log_flags, "generate"]
    return subprocess.call(command)


@app.command()
def build(
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", "-o", help="Output directory (overrides config)"),
    ] = None,
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", help="Markdown content directory (overrides config)"),
    ] = None,
) -> None:
    """Build the static site.

    Stages the page shell and static assets in the output directory, saves
    the resolved config, then runs generation in a separate process.

    Exit codes:
        0: Site generated
        1: Preparation or generation failed
    """
    from mdblog.build import prepare_build

    config = _resolve(out_dir=out_dir, content_dir=content_dir)
    _logger.info("Building for production...")

    try:
        prepare_build(config)
    except Exception as e:
        _logger.error(f"Build failed: {e}")
        raise typer.Exit(1)

    _logger.info("Running static site generation...")
    code = _run_generation_process(_log_flags)
    if code != 0:
        _logger.error(f"Static site generation failed (exit code {code})")
    raise typer.Exit(code)


@app.command()
def generate(
    channel_file: Annotated[
        Path | None,
        typer.Option("--channel-file", help="Side-channel config written by the build"),
    ] = None,
) -> None:
    """Generate static pages using the config saved by the last build.

    Falls back to the default config when none was saved.
    """
    from mdblog.channel import restore_config
    from mdblog.errors import GenerationError
    from mdblog.generate import generate_static_site

    config = restore_config(channel_file)
    _logger.debug(f"Loaded config: {config.to_dict()}")

    try:
        result = generate_static_site(config)
    except GenerationError as e:
        _logger.error(f"Failed to generate static site: {e}")
        raise typer.Exit(1)

    typer.echo(f"Generated {len(result.pages)} pages in {result.out_dir}")
    raise typer.Exit(0)


# =============================================================================
# preview command
# =============================================================================


@app.command()
def preview(
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on (overrides config)"),
    ] = None,
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", "-o", help="Generated site directory (overrides config)"),
    ] = None,
) -> None:
    """Serve the generated site."""
    import uvicorn

    from mdblog.server import create_preview_app

    config = _resolve(port=port, out_dir=out_dir)
    site_dir = Path(config.out_dir)
    if not site_dir.is_dir():
        _logger.error(f"Nothing to preview: {site_dir} does not exist (run build first)")
        raise typer.Exit(1)

    _logger.info(f"Previewing {site_dir} on http://{config.server.host}:{config.server.port}")
    uvicorn.run(
        create_preview_app(site_dir),
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
    )


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing files",
        ),
    ] = False,
) -> None:
    """Initialize a blog in the current directory.

    Creates mdblog.yaml, the index.html page shell and a first post.
    """
    config = BlogConfig()
    config_file = Path("mdblog.yaml")

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    shell_file = Path(config.shell)
    if force or not shell_file.exists():
        shell_file.write_text(DEFAULT_SHELL, encoding="utf-8")
        _logger.info(f"Created page shell: {shell_file}")

    content_dir = Path(config.content_dir)
    content_dir.mkdir(parents=True, exist_ok=True)
    first_post = content_dir / "hello-world.md"
    if not first_post.exists():
        first_post.write_text(DEFAULT_POST, encoding="utf-8")
        _logger.info(f"Created example post: {first_post}")

    typer.echo("\nmdblog initialized")
    typer.echo(f"   Config: {config_file}")
    typer.echo(f"   Content: {content_dir}/")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
