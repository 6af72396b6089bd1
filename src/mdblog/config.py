"""mdblog configuration system.

Configuration is YAML-based with per-run overrides from the caller (CLI flags
or keyword options). Supports environment variable substitution (${VAR}) in
config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.mdblog/config.yaml
3. ./mdblog.yaml
"""

import os
import re
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ServerConfig:
    """Dev and preview server configuration.

    Attributes:
        host: Interface to bind
        port: Port to listen on
    """

    host: str = "127.0.0.1"
    port: int = 5173

    def __post_init__(self) -> None:
        """Validate server configuration."""
        if not 0 < int(self.port) < 65536:
            raise ValueError(f"Invalid server port: {self.port}")
        self.port = int(self.port)


@dataclass
class BlogConfig:
    """Top-level mdblog configuration.

    Template references are resolved lazily by a rendering environment. A
    plain name ("page.html.j2") is a Jinja2 template looked up in
    `templates_dir` and then in the packaged defaults; a "module:callable"
    reference is imported at resolve time.

    Attributes:
        content_dir: Directory containing markdown documents
        page_template: Template reference for the list page
        slug_template: Template reference for the detail page
        out_dir: Output directory for generated static files
        shell: Source page shell, copied into out_dir on build
        templates_dir: Project template directory searched before the defaults
        static_dir: Static assets served in dev mode and copied on build
        server: Dev and preview server settings
    """

    content_dir: str = "src/content"
    page_template: str = "page.html.j2"
    slug_template: str = "slug.html.j2"
    out_dir: str = "dist"
    shell: str = "index.html"
    templates_dir: str = "templates"
    static_dir: str = "public"
    server: ServerConfig = field(default_factory=ServerConfig)

    # Set when loaded from a file; not part of the configuration value
    _config_path: Path | None = field(default=None, repr=False, compare=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary (without the source path)."""
        data = asdict(self)
        data.pop("_config_path", None)
        return data


_PATH_FIELDS = [
    f.name for f in fields(BlogConfig) if not f.name.startswith("_") and f.name != "server"
]


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def _env_value(match: re.Match[str]) -> str:
    name = match.group(1)
    if name not in os.environ:
        raise ValueError(f"Environment variable not set: {name}")
    return os.environ[name]


def substitute_env_vars(value: Any) -> Any:
    """Expand `${NAME}` references in strings, recursing into dicts and lists.

    Raises:
        ValueError: If a referenced variable is unset
    """
    if isinstance(value, str):
        return _ENV_REF.sub(_env_value, value)
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


# =============================================================================
# Config File Discovery
# =============================================================================


# Searched in order, relative to the project directory
CONFIG_LOCATIONS = (Path(".mdblog") / "config.yaml", Path("mdblog.yaml"))


def find_config_file(project_dir: Path | None = None) -> Path | None:
    """Return the first of CONFIG_LOCATIONS present in the project directory."""
    base = (project_dir or Path.cwd()).resolve()
    return next((base / loc for loc in CONFIG_LOCATIONS if (base / loc).exists()), None)


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(
    data: dict[str, Any],
    substitute_env: bool = True,
) -> BlogConfig:
    """Load configuration from a dictionary.

    Keys that are absent take their defaults; unknown keys are ignored.

    Args:
        data: Configuration dictionary
        substitute_env: Whether to expand ${VAR} references

    Returns:
        BlogConfig instance

    Raises:
        ValueError: If a section has the wrong shape or a value is invalid
    """
    if substitute_env:
        data = substitute_env_vars(data)

    config = BlogConfig()

    for name in _PATH_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str | Path):
            raise ValueError(f"Config value for {name} must be a string (got {value!r})")
        setattr(config, name, str(value))

    if "server" in data:
        server_data = data["server"] or {}
        if not isinstance(server_data, dict):
            raise ValueError("Config section 'server' must be a mapping")
        config.server = ServerConfig(
            host=server_data.get("host", config.server.host),
            port=server_data.get("port", config.server.port),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> BlogConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        BlogConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {found_path}")
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = BlogConfig()

    return config


def resolve_config(
    overrides: dict[str, Any] | None = None,
    base: BlogConfig | None = None,
) -> BlogConfig:
    """Apply caller-supplied options on top of a base configuration.

    Options set to None are treated as not supplied. "host" and "port" are
    applied to the server section.

    Args:
        overrides: Per-run options (e.g. from CLI flags)
        base: Configuration to start from (defaults when None)

    Returns:
        New BlogConfig; the base is not modified
    """
    config = base or BlogConfig()
    options = {k: v for k, v in (overrides or {}).items() if v is not None}
    if not options:
        return config

    server_options = {k: options.pop(k) for k in ("host", "port") if k in options}
    unknown = set(options) - set(_PATH_FIELDS)
    if unknown:
        raise ValueError(f"Unknown config options: {sorted(unknown)}")

    resolved = replace(config, **{k: str(v) for k, v in options.items()})
    if server_options:
        resolved.server = replace(config.server, **server_options)
    resolved._config_path = config.config_path
    return resolved


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# mdblog configuration

# Markdown documents, one file per post (filename = slug)
content_dir: "src/content"

# Template references: a Jinja2 template name looked up in templates_dir
# (then the built-in defaults), or "package.module:callable"
page_template: "page.html.j2"
slug_template: "slug.html.j2"
templates_dir: "templates"

# Page shell with a <div id="app"></div> insertion point
shell: "index.html"

# Static assets and build output
static_dir: "public"
out_dir: "dist"

server:
  host: "127.0.0.1"
  port: 5173
'''
