# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Configuration for genro-static.

RouteConfig is the immutable value every component is built from. It can be
created directly, from a plain dict, or from a TOML file:

    [static]
    root = "./public"
    index = "index.html"
    fallback = "application/octet-stream"
    errors = true          # error_rendering
    diagnostics = true
    mime = "table"         # or "mimetypes"
    accesslog = false

Key constraints:
- TOML keys CANNOT contain underscore (_): use single words.
- String values support ${VAR} and ${VAR:-default} environment expansion.
- A relative ``root`` in a TOML file is relative to the file's directory.

Config file discovery (find_config_file):
    1. GENRO_STATIC_CONFIG environment variable
    2. ./genro-static.toml
    3. ./config.toml
"""

from __future__ import annotations

import os
import re
import sys
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from .mime import DEFAULT_FALLBACK_MIME, MIME_SOURCES

__all__ = [
    "ConfigError",
    "RouteConfig",
    "find_config_file",
    "load_config",
    "load_route_config",
    "validate_keys",
]

# TOML key -> RouteConfig field
TOML_KEYS: dict[str, str] = {
    "root": "root",
    "index": "index_filename",
    "fallback": "fallback_mime",
    "errors": "error_rendering",
    "diagnostics": "diagnostics",
    "mime": "mime_source",
    "accesslog": "access_log",
}

_TRUE = ("on", "true", "yes", "1", "enabled")
_FALSE = ("off", "false", "no", "0", "disabled")


class ConfigError(Exception):
    """Configuration error."""


@dataclass(frozen=True)
class RouteConfig:
    """Immutable configuration of a static route.

    Attributes:
        root: Directory served. Required.
        index_filename: File substituted for directory requests.
        fallback_mime: Content-type used for unknown extensions.
        error_rendering: Put human-readable status text in error bodies.
        diagnostics: Log fallback content-types and I/O errors.
        mime_source: "table" (built-in table) or "mimetypes".
        access_log: Wrap the app in the access-logging middleware.
    """

    root: Path
    index_filename: str = "index.html"
    fallback_mime: str = DEFAULT_FALLBACK_MIME
    error_rendering: bool = False
    diagnostics: bool = False
    mime_source: str = "table"
    access_log: bool = False

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "root", Path(self.root).resolve())
        if not self.index_filename or "/" in self.index_filename or self.index_filename in (".", ".."):
            raise ConfigError(f"Invalid index filename: {self.index_filename!r}")
        if not self.fallback_mime or "/" not in self.fallback_mime:
            raise ConfigError(f"Invalid fallback MIME type: {self.fallback_mime!r}")
        if self.mime_source not in MIME_SOURCES:
            known = ", ".join(sorted(MIME_SOURCES))
            raise ConfigError(f"Unknown MIME source {self.mime_source!r} (known: {known})")

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: str | Path | None = None) -> RouteConfig:
        """Build a RouteConfig from a dict keyed by field names.

        Boolean fields accept on/off, true/false, yes/no, 1/0, enabled/disabled.

        Args:
            data: Field values. ``root`` is required; unknown keys are errors.
            base_dir: Directory a relative ``root`` is resolved against.
                Defaults to the current working directory.

        Raises:
            ConfigError: if ``root`` is missing, a key is unknown or a value
                is invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown static option(s): {', '.join(unknown)}")
        if not data.get("root"):
            raise ConfigError("Missing required option 'root'")

        values = dict(data)
        root = Path(values["root"])
        if not root.is_absolute() and base_dir is not None:
            root = Path(base_dir) / root
        values["root"] = root
        for name in ("error_rendering", "diagnostics", "access_log"):
            if name in values:
                values[name] = _parse_enabled(values[name], name)
        return cls(**values)


def _parse_enabled(value: Any, name: str) -> bool:
    """Parse on/off style values to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ConfigError(f"Option '{name}' expects on/off, got {value!r}")


def validate_keys(data: Any, path: str = "") -> None:
    """
    Validate that no keys contain underscore.

    Args:
        data: Configuration data (dict, list, or value).
        path: Current path for error messages.

    Raises:
        ConfigError: If a key contains underscore.
    """
    if isinstance(data, dict):
        for key, value in data.items():
            full_path = f"{path}.{key}" if path else key
            if "_" in key:
                raise ConfigError(
                    f"Invalid key '{full_path}': underscore (_) is not allowed in keys. "
                    f"Use single words instead."
                )
            validate_keys(value, full_path)
    elif isinstance(data, list):
        for i, item in enumerate(data):
            validate_keys(item, f"{path}[{i}]")


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load configuration from TOML file.

    Args:
        path: Path to TOML configuration file.

    Returns:
        Parsed configuration dict, environment variables expanded.

    Raises:
        ConfigError: If file not found, invalid TOML, or keys contain underscore.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML: {e}") from e

    validate_keys(config)
    return dict(_expand_env_vars(config))


def load_route_config(path: str | Path, section: str = "static", **overrides: Any) -> RouteConfig:
    """Load a RouteConfig from the ``[static]`` table of a TOML file.

    Args:
        path: TOML file.
        section: Table holding the static options.
        **overrides: RouteConfig fields that win over the file (e.g. CLI flags).
            None values are ignored.

    Raises:
        ConfigError: if the section is missing or holds unknown keys.
    """
    path = Path(path)
    config = load_config(path)
    table = config.get(section)
    if not isinstance(table, dict):
        raise ConfigError(f"Missing [{section}] table in {path}")

    data: dict[str, Any] = {}
    for key, value in table.items():
        if key not in TOML_KEYS:
            raise ConfigError(f"Unknown key '{section}.{key}' in {path}")
        data[TOML_KEYS[key]] = value
    data.update({k: v for k, v in overrides.items() if v is not None})
    return RouteConfig.from_dict(data, base_dir=path.parent)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return _expand_string(obj)
    return obj


def _expand_string(s: str) -> str:
    """
    Expand environment variables in a string.

    Raises:
        ConfigError: If required variable is not set.
    """
    pattern = r"\$\{([^}]+)\}"

    def replace(match: re.Match[str]) -> str:
        expr = match.group(1)
        if ":-" in expr:
            var_name, default = expr.split(":-", 1)
            return os.environ.get(var_name, default)
        value = os.environ.get(expr)
        if value is None:
            raise ConfigError(f"Required environment variable not set: {expr}")
        return value

    return re.sub(pattern, replace, s)


def find_config_file() -> Path | None:
    """
    Find configuration file in standard locations.

    Returns:
        Path to config file or None if not found.
    """
    env_config = os.environ.get("GENRO_STATIC_CONFIG")
    if env_config:
        path = Path(env_config)
        if path.exists():
            return path

    for path in (Path.cwd() / "genro-static.toml", Path.cwd() / "config.toml"):
        if path.exists():
            return path

    return None


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Load and validate a genro-static config")
    parser.add_argument("config", nargs="?", help="Config file path")
    args = parser.parse_args()

    config_path = Path(args.config) if args.config else find_config_file()
    if config_path is None:
        print("No configuration file found")
        sys.exit(1)

    try:
        route = load_route_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(route)
