"""Side-channel for handing the resolved configuration between build phases.

The build preparation phase and the generation phase run as separate
processes. The preparation phase writes the resolved configuration to a
fixed-name JSON file in the working directory; the generation phase reads it
back. The file is the only state shared between the two phases.
"""

import json
import logging
from pathlib import Path

from mdblog.config import BlogConfig, load_config_from_dict

logger = logging.getLogger(__name__)

CHANNEL_FILE = ".mdblog.config.json"


def channel_path(path: Path | str | None = None) -> Path:
    """Return the side-channel file location (cwd-relative by default)."""
    return Path(path) if path is not None else Path(CHANNEL_FILE)


def persist_config(config: BlogConfig, path: Path | str | None = None) -> Path:
    """Write the resolved configuration to the side-channel file.

    Always overwrites an existing file.

    Args:
        config: Resolved configuration
        path: Override for the side-channel location

    Returns:
        Path of the written file
    """
    target = channel_path(path)
    target.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Persisted config to %s", target)
    return target


def restore_config(path: Path | str | None = None) -> BlogConfig:
    """Read the configuration written by the preparation phase.

    A missing or unusable file is not fatal: a warning is logged and the
    default configuration is returned.

    Args:
        path: Override for the side-channel location

    Returns:
        Restored configuration, or defaults
    """
    source = channel_path(path)

    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("No config found at %s, using defaults", source)
        return BlogConfig()
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Unreadable config at %s (%s), using defaults", source, e)
        return BlogConfig()

    if not isinstance(data, dict):
        logger.warning("Config at %s is not an object, using defaults", source)
        return BlogConfig()

    try:
        config = load_config_from_dict(data, substitute_env=False)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid config at %s (%s), using defaults", source, e)
        return BlogConfig()

    logger.debug("Loaded config from %s", source)
    return config
