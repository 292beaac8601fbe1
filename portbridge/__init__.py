"""Host bridge for port-based computation units.

Loads a computation unit, streams input files into its ports, and writes
whatever it emits on its output ports back to disk.

Usage:
    python -m portbridge
    python -m portbridge --config bridge.yaml
    python -m portbridge --unit myapp.units:Top --workdir ./run
"""

from portbridge.lib.config_loader import BridgeConfig, load_bridge_config
from portbridge.lib.host import HostBridge, run_bridge
from portbridge.lib.unit import ComputationUnit

__all__ = [
    "BridgeConfig",
    "ComputationUnit",
    "HostBridge",
    "load_bridge_config",
    "run_bridge",
]

__version__ = "1.0.0"
