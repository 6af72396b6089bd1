"""Page shell handling.

The shell is the outer HTML document. It contains one insertion point,
`<div id="app"></div>`, which receives the rendered page fragment.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from mdblog.errors import ShellError

logger = logging.getLogger(__name__)

APP_MARKER = '<div id="app"></div>'
SHELL_SNAPSHOT = ".mdblog-shell.html"

# (url, shell html) -> shell html
ShellTransform = Callable[[str, str], str]


def identity_transform(url: str, html: str) -> str:
    """Shell transform that leaves the shell unchanged."""
    return html


def splice(shell: str, fragment: str) -> str:
    """Insert a rendered fragment at the shell's insertion point.

    Only the first marker is filled.

    Raises:
        ShellError: If the shell has no insertion point
    """
    if APP_MARKER not in shell:
        raise ShellError(f"Page shell has no insertion point: {APP_MARKER}")
    return shell.replace(APP_MARKER, f'<div id="app">{fragment}</div>', 1)


def read_shell(path: Path | str) -> str:
    """Read a page shell file.

    Raises:
        ShellError: If the file cannot be read
    """
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ShellError(f"Cannot read page shell {path}: {e}") from e


def snapshot_path(path: Path | str | None = None) -> Path:
    """Return the shell snapshot location (cwd-relative by default).

    The snapshot lives beside the side-channel file, never in the output
    directory, so it is not published with the site.
    """
    return Path(path) if path is not None else Path(SHELL_SNAPSHOT)


def load_output_shell(out_dir: Path | str, snapshot: Path | str | None = None) -> str:
    """Load the shell used for static generation from the output directory.

    The build writes the project shell to `{out_dir}/index.html`, which
    generation then overwrites with the rendered list page. The pristine
    shell is kept as a snapshot outside the output directory so that
    generation can run again against the same output.

    Args:
        out_dir: Output directory
        snapshot: Override for the snapshot location

    Returns:
        Shell HTML containing the insertion point

    Raises:
        ShellError: If no usable shell exists
    """
    index_path = Path(out_dir) / "index.html"
    snapshot = snapshot_path(snapshot)

    if index_path.exists():
        shell = read_shell(index_path)
        if APP_MARKER in shell:
            snapshot.write_text(shell, encoding="utf-8")
            return shell

    if snapshot.exists():
        logger.debug("Using shell snapshot %s", snapshot)
        return read_shell(snapshot)

    if not index_path.exists():
        raise ShellError(f"Page shell not found: {index_path} (run the build first)")
    raise ShellError(f"Page shell has no insertion point: {index_path}")
