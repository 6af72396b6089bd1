"""Build preparation phase.

Runs before static generation, usually in a different process. It hands the
resolved configuration to the generation phase through the side-channel
file and stages the page shell and static assets in the output directory.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from mdblog.channel import persist_config
from mdblog.config import BlogConfig
from mdblog.shell import APP_MARKER, read_shell, snapshot_path

logger = logging.getLogger(__name__)


@dataclass
class PreparedBuild:
    """Files written by the preparation phase.

    Attributes:
        channel_file: Side-channel config file
        shell_path: Shell staged in the output directory
        static_copied: Whether static assets were copied
    """

    channel_file: Path
    shell_path: Path
    static_copied: bool = False


def _clear_output(out_dir: Path) -> None:
    """Remove the previous build so deleted posts do not linger."""
    if not out_dir.exists():
        return
    project = Path.cwd().resolve()
    target = out_dir.resolve()
    if target == project or project not in target.parents:
        logger.warning("Output directory %s is not inside %s, not emptying it", out_dir, project)
        return
    shutil.rmtree(target)
    logger.debug("Removed previous output %s", out_dir)


def prepare_build(
    config: BlogConfig,
    channel_file: Path | str | None = None,
) -> PreparedBuild:
    """Persist the configuration and stage the output directory.

    The side-channel file is written first and unconditionally, so the
    generation phase sees this run's configuration even if staging fails.
    Config paths are relative to the working directory, which the
    generation phase shares.

    Args:
        config: Resolved configuration
        channel_file: Override for the side-channel location

    Returns:
        PreparedBuild describing the written files

    Raises:
        ShellError: If the project shell cannot be read
        OSError: If the output directory cannot be written
    """
    written_channel = persist_config(config, channel_file)

    shell = read_shell(config.shell)
    if APP_MARKER not in shell:
        logger.warning("Page shell %s has no %s insertion point", config.shell, APP_MARKER)

    out_dir = Path(config.out_dir)
    _clear_output(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    snapshot_path().unlink(missing_ok=True)

    static_dir = Path(config.static_dir)
    static_copied = False
    if static_dir.is_dir():
        shutil.copytree(static_dir, out_dir, dirs_exist_ok=True)
        static_copied = True
        logger.debug("Copied static assets from %s", static_dir)

    shell_path = out_dir / "index.html"
    shell_path.write_text(shell, encoding="utf-8")
    logger.info("Prepared %s", out_dir)

    return PreparedBuild(
        channel_file=written_channel,
        shell_path=shell_path,
        static_copied=static_copied,
    )
