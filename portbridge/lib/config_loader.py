"""YAML configuration loader for the host bridge.

Every key is optional; a missing file section falls back to the default
wiring, which reads the three CSV feeds from ``data/`` and writes the four
outputs to the working directory.

Example YAML (bridge.yaml):
    unit: portbridge.examples.ledger:LedgerUnit
    base_dir: ./run
    inputs:
      cust_data: data/cust.csv
      acc_data: data/acc.csv
      txn_data: data/txn.csv
    outputs:
      user_file: users.json
      account_file: accounts.json
      tx_file: batch.json
      user_ids_file: cins.txt

Usage:
    from portbridge.lib.config_loader import load_bridge_config
    config = load_bridge_config("./bridge.yaml")
"""

from __future__ import annotations

import codecs
import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from portbridge.lib.env import expand_config
from portbridge.lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "BridgeConfig",
    "DEFAULT_INPUTS",
    "DEFAULT_OUTPUTS",
    "DEFAULT_UNIT",
    "config_from_dict",
    "load_bridge_config",
    "validate_config_file",
]

DEFAULT_UNIT = "portbridge.examples.ledger:LedgerUnit"

DEFAULT_INPUTS = {
    "cust_data": "data/cust.csv",
    "acc_data": "data/acc.csv",
    "txn_data": "data/txn.csv",
}

DEFAULT_OUTPUTS = {
    "user_file": "users.json",
    "account_file": "accounts.json",
    "tx_file": "batch.json",
    "user_ids_file": "cins.txt",
}

KNOWN_KEYS = {"unit", "base_dir", "inputs", "outputs", "log_payloads", "encoding"}


@dataclass
class BridgeConfig:
    """Resolved bridge wiring.

    ``inputs`` maps input port names to the files read at startup and
    ``outputs`` maps output port names to the files each payload
    overwrites. Relative paths resolve against ``base_dir``.
    """

    unit: str = DEFAULT_UNIT
    base_dir: str = "."
    inputs: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_INPUTS))
    outputs: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_OUTPUTS))
    log_payloads: bool = True
    encoding: str = "utf-8"
    source: Optional[str] = None

    def __post_init__(self) -> None:
        _check_encoding(self.encoding)

    def with_overrides(
        self,
        *,
        unit: Optional[str] = None,
        base_dir: Optional[str] = None,
    ) -> "BridgeConfig":
        """Return a copy with CLI overrides applied."""
        changes: Dict[str, Any] = {}
        if unit:
            changes["unit"] = unit
        if base_dir:
            changes["base_dir"] = base_dir
        return dataclasses.replace(self, **changes)

    def explain(self) -> str:
        """Return a human-readable description of the wiring."""
        lines = [
            f"Unit:     {self.unit}",
            f"Base dir: {self.base_dir}",
            f"Config:   {self.source or '(defaults)'}",
            "",
            "INPUTS (file -> port):",
        ]
        for port, path in self.inputs.items():
            lines.append(f"  {path:<28} -> {port}")
        lines.append("")
        lines.append("OUTPUTS (port -> file):")
        for port, path in self.outputs.items():
            lines.append(f"  {port:<28} -> {path}")
        return "\n".join(lines)


def _check_mapping(value: Any, section: str) -> Dict[str, str]:
    if not isinstance(value, dict) or not value:
        raise ConfigurationError(
            f"'{section}' must be a non-empty mapping of port name to path",
            field=section,
            value=value,
        )

    result: Dict[str, str] = {}
    for port, path in value.items():
        if not isinstance(port, str) or not port:
            raise ConfigurationError(
                f"Invalid port name in '{section}'", field=section, value=port
            )
        if not isinstance(path, str) or not path.strip():
            raise ConfigurationError(
                f"Path for port '{port}' must be a non-empty string",
                field=f"{section}.{port}",
                value=path,
            )
        result[port] = path
    return result


def _check_encoding(encoding: Any) -> str:
    """Reject codec names Python does not know."""
    try:
        codecs.lookup(str(encoding))
    except LookupError as e:
        raise ConfigurationError(
            f"Unknown text encoding: {encoding}",
            field="encoding",
            value=encoding,
            suggestion="Use a Python codec name such as utf-8 or latin-1",
        ) from e
    return str(encoding)


def _resolve_base_dir(base_dir: str, config_dir: Optional[Path]) -> str:
    """Resolve a relative base_dir against the config file's directory."""
    if config_dir is None or os.path.isabs(base_dir):
        return base_dir
    return str(config_dir / base_dir)


def config_from_dict(
    data: Dict[str, Any],
    config_dir: Optional[Path] = None,
) -> BridgeConfig:
    """Build a BridgeConfig from parsed YAML.

    Args:
        data: Parsed configuration mapping
        config_dir: Directory of the YAML file, used to resolve ``base_dir``

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping", value=data)

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            suggestion=f"Valid keys: {', '.join(sorted(KNOWN_KEYS))}",
        )

    data = expand_config(data)
    config = BridgeConfig()

    if "unit" in data:
        if not isinstance(data["unit"], str) or ":" not in data["unit"]:
            raise ConfigurationError(
                "'unit' must look like 'package.module:Name'",
                field="unit",
                value=data["unit"],
            )
        config.unit = data["unit"]

    if "base_dir" in data:
        if not isinstance(data["base_dir"], str) or not data["base_dir"]:
            raise ConfigurationError(
                "'base_dir' must be a path", field="base_dir", value=data["base_dir"]
            )
        config.base_dir = _resolve_base_dir(data["base_dir"], config_dir)

    if "inputs" in data:
        config.inputs = _check_mapping(data["inputs"], "inputs")
    if "outputs" in data:
        config.outputs = _check_mapping(data["outputs"], "outputs")

    if "log_payloads" in data:
        if not isinstance(data["log_payloads"], bool):
            raise ConfigurationError(
                "'log_payloads' must be true or false",
                field="log_payloads",
                value=data["log_payloads"],
            )
        config.log_payloads = data["log_payloads"]

    if "encoding" in data:
        config.encoding = _check_encoding(data["encoding"])

    return config


def load_bridge_config(
    config_path: Optional[Union[str, Path]] = None,
) -> BridgeConfig:
    """Load bridge configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None for the default wiring

    Returns:
        BridgeConfig instance

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    if config_path is None:
        return BridgeConfig()

    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            field="config",
        )

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        data = {}

    config = config_from_dict(data, config_path.parent.resolve())
    config.source = str(config_path)
    logger.debug("Loaded bridge config from %s", config_path)
    return config


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Validate a YAML configuration file.

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[str] = []

    try:
        load_bridge_config(config_path)
    except ConfigurationError as e:
        errors.append(str(e))

    return errors
