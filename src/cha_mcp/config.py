"""Server configuration loader.

Loads server settings from a YAML file. Every setting has a default, so the
server also runs without a configuration file.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from cha_mcp.protocol.lifecycle import MCP_PROTOCOL_VERSION


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if var_name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)

    return pattern.sub(replacer, value)


def _setting(
    section: dict[str, Any], section_name: str, key: str, kind: type, default: Any
) -> Any:
    value = section.get(key, default)
    # bool is a subclass of int, so only exact types are accepted
    if type(value) is not kind:
        raise ConfigLoadError(
            f"'{section_name}.{key}' must be a {kind.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration.

    Immutable once loaded; passed to the server at startup.
    """

    server_name: str = "茶"
    server_version: str = "0.1.0"
    protocol_version: str = MCP_PROTOCOL_VERSION
    strict_lifecycle: bool = False
    catalog_path: Path | None = None
    audit_log_file: Path | None = None

    @property
    def server_info(self) -> dict[str, str]:
        return {"name": self.server_name, "version": self.server_version}

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig with defaults for anything not given.

        Raises:
            ConfigLoadError: If a section or setting has the wrong type.
        """
        server = config.get("server") or {}
        catalog = config.get("catalog") or {}
        audit = config.get("audit") or {}
        for section, value in (("server", server), ("catalog", catalog), ("audit", audit)):
            if not isinstance(value, dict):
                raise ConfigLoadError(f"'{section}' section must be a mapping")

        catalog_path = expand_env_vars(str(catalog.get("path") or ""))
        log_file = expand_env_vars(str(audit.get("log_file") or ""))

        return cls(
            server_name=_setting(server, "server", "name", str, cls.server_name),
            server_version=_setting(server, "server", "version", str, cls.server_version),
            protocol_version=_setting(
                server, "server", "protocol_version", str, cls.protocol_version
            ),
            strict_lifecycle=_setting(server, "server", "strict_lifecycle", bool, False),
            catalog_path=Path(catalog_path) if catalog_path else None,
            audit_log_file=Path(log_file) if log_file else None,
        )


def load_config(path: Path) -> ServerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the configuration file.

    Returns:
        Loaded ServerConfig.

    Raises:
        ConfigLoadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError("Config file must contain a mapping")

    return ServerConfig.from_dict(data)
