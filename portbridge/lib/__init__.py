"""Bridge library modules.

This package contains the port, unit, I/O and host abstractions used to
run a computation unit against files on disk.
"""

from portbridge.lib.config_loader import (
    DEFAULT_INPUTS,
    DEFAULT_OUTPUTS,
    DEFAULT_UNIT,
    BridgeConfig,
    config_from_dict,
    load_bridge_config,
)
from portbridge.lib.errors import (
    BridgeError,
    ConfigurationError,
    OutputWriteError,
    PortClosedError,
    PortError,
    UnitLoadError,
)
from portbridge.lib.host import HostBridge, run_bridge
from portbridge.lib.io import InputStatus, OutputWriter, ReadResult, read_input
from portbridge.lib.observability import BridgeMetrics, setup_logging
from portbridge.lib.ports import InputPort, OutputPort, PortSet
from portbridge.lib.unit import ComputationUnit, init_unit, load_unit_factory

__all__ = [
    # Config
    "BridgeConfig",
    "DEFAULT_INPUTS",
    "DEFAULT_OUTPUTS",
    "DEFAULT_UNIT",
    "config_from_dict",
    "load_bridge_config",
    # Errors
    "BridgeError",
    "ConfigurationError",
    "OutputWriteError",
    "PortClosedError",
    "PortError",
    "UnitLoadError",
    # Host
    "HostBridge",
    "run_bridge",
    # I/O
    "InputStatus",
    "OutputWriter",
    "ReadResult",
    "read_input",
    # Observability
    "BridgeMetrics",
    "setup_logging",
    # Ports
    "InputPort",
    "OutputPort",
    "PortSet",
    # Units
    "ComputationUnit",
    "init_unit",
    "load_unit_factory",
]
