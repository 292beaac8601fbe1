"""Environment variable handling for bridge configuration.

Config values may reference ${VAR_NAME} or $VAR_NAME. Port paths and
``base_dir`` must resolve completely: a path such as
``${FEEDS}/cust.csv`` with FEEDS unset would otherwise be read as a
literal relative path and surface later as a misleading missing input.
Other values keep unset references as written.

.env files are loaded with python-dotenv before the config is read.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from portbridge.lib.errors import ConfigurationError

__all__ = ["expand_env_vars", "expand_config", "load_env_file"]

# Pattern for ${VAR_NAME} or $VAR_NAME
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

# Sections whose values are port name -> file path
PATH_SECTIONS = ("inputs", "outputs")


def load_env_file(
    path: Optional[Union[str, Path]] = None,
    *,
    override: bool = False,
) -> bool:
    """Load environment variables from a .env file.

    Returns True if a file was found and loaded.
    """
    return load_dotenv(dotenv_path=path, override=override)


def expand_env_vars(value: str, *, strict: bool = False) -> str:
    """Expand environment variables in a string.

    Example:
        >>> os.environ["BRIDGE_DATA"] = "/srv/feeds"
        >>> expand_env_vars("${BRIDGE_DATA}/cust.csv")
        '/srv/feeds/cust.csv'

    Raises:
        KeyError: In strict mode, naming the first unset variable.
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1) or match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if strict:
                raise KeyError(var_name)
            return str(match.group(0))
        return env_value

    return ENV_VAR_PATTERN.sub(replacer, value)


def _expand_path(value: Any, field: str) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return expand_env_vars(value, strict=True)
    except KeyError as e:
        raise ConfigurationError(
            f"Environment variable {e.args[0]} is not set",
            field=field,
            value=value,
            suggestion=f"Export {e.args[0]} or define it in a .env file",
        ) from e


def expand_config(data: Dict[str, Any]) -> Dict[str, Any]:
    """Expand environment variables in a parsed bridge config.

    Raises:
        ConfigurationError: If a port path or base_dir references an unset
            variable.
    """
    result: Dict[str, Any] = {}

    for key, value in data.items():
        if key in PATH_SECTIONS and isinstance(value, dict):
            result[key] = {
                port: _expand_path(path, f"{key}.{port}")
                for port, path in value.items()
            }
        elif key == "base_dir":
            result[key] = _expand_path(value, key)
        elif isinstance(value, str):
            result[key] = expand_env_vars(value)
        else:
            result[key] = value

    return result
