"""CLI entry point for running the host bridge.

Usage:
    python -m portbridge
    python -m portbridge --config bridge.yaml
    python -m portbridge --unit myapp.units:Top --workdir ./run
    python -m portbridge --explain
    python -m portbridge --check

With no options the default wiring is used: data/cust.csv, data/acc.csv and
data/txn.csv feed the unit, and its outputs land in users.json,
accounts.json, batch.json and cins.txt.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from portbridge.lib.config_loader import BridgeConfig, load_bridge_config
from portbridge.lib.env import load_env_file
from portbridge.lib.errors import BridgeError
from portbridge.lib.host import run_bridge
from portbridge.lib.observability import setup_logging
from portbridge.lib.storage import get_storage
from portbridge.lib.unit import init_unit, load_unit_factory

logger = logging.getLogger(__name__)


def build_config(
    config_path: Optional[str],
    unit: Optional[str] = None,
    workdir: Optional[str] = None,
) -> BridgeConfig:
    """Load the config file (if any) and apply CLI overrides."""
    config = load_bridge_config(config_path)
    return config.with_overrides(unit=unit, base_dir=workdir)


def explain_bridge(config: BridgeConfig) -> None:
    """Show the wiring without running anything."""
    print()
    print("=" * 60)
    print("BRIDGE WIRING")
    print("=" * 60)
    print(config.explain())
    print()
    print("EXECUTION FLOW:")
    print("-" * 40)
    print("  1. Construct the unit (factory called with no arguments)")
    print("  2. Subscribe to every wired output port")
    print("  3. Read each input file and send its text on the matching port")
    print("  4. Write each output payload to its file, overwriting")
    print("  5. Stop when the unit's run() returns and outputs are flushed")
    print()
    print("=" * 60)


def check_bridge(config: BridgeConfig) -> bool:
    """Pre-flight checks: unit loads, ports match, files are reachable.

    Missing inputs are reported but do not fail the check, since the bridge
    runs without them.
    """
    print()
    print("=" * 60)
    print("BRIDGE VALIDATION")
    print("=" * 60)

    has_errors = False
    storage = get_storage(config.base_dir)

    print(f"\nUnit: {config.unit}")
    print("-" * 40)
    unit = None
    try:
        unit = init_unit(load_unit_factory(config.unit))
        print("  Load: OK")
    except BridgeError as e:
        print(f"  Load: FAILED - {e}")
        has_errors = True

    print("\nInputs:")
    print("-" * 40)
    for port, path in config.inputs.items():
        status = "OK" if storage.exists(path) else "MISSING (port will get no message)"
        if unit is not None and port not in unit.ports.inputs:
            status = "UNKNOWN PORT"
            has_errors = True
        print(f"  {port:<16} {storage.get_full_path(path)}: {status}")

    print("\nOutputs:")
    print("-" * 40)
    for port, path in config.outputs.items():
        parent = Path(storage.get_full_path(path)).resolve().parent
        existing = parent
        while not existing.exists() and existing != existing.parent:
            existing = existing.parent
        if os.access(existing, os.W_OK):
            status = "OK"
        else:
            status = f"NOT WRITABLE ({existing})"
            has_errors = True
        if unit is not None and port not in unit.ports.outputs:
            status = "UNKNOWN PORT"
            has_errors = True
        print(f"  {port:<16} {storage.get_full_path(path)}: {status}")

    print()
    print("=" * 60)
    if has_errors:
        print("RESULT: FAILED - Fix errors above before running")
    else:
        print("RESULT: PASSED - Bridge is ready to run")
    return not has_errors


def print_result(summary: Dict[str, Any]) -> None:
    """Print a bridge run summary in a readable format."""
    print()
    print("=" * 60)
    print(f"Unit: {summary['unit']}")
    print("=" * 60)

    print(f"Inputs delivered: {summary['inputs_delivered']}")
    for port, status in summary["inputs"].items():
        if status != "ok":
            print(f"  {port}: {status}")

    print(f"Outputs written:  {summary['outputs_written']}")
    for port, count in summary["outputs"].items():
        print(f"  {port}: {count}")

    print(f"Bytes written:    {summary['bytes_written']}")
    print(f"Elapsed: {summary['timing']['total_seconds']:.2f}s")
    print("=" * 60)


def main(argv: Optional[list] = None) -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Run a computation unit against input and output files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with the default wiring in the current directory
    python -m portbridge

    # Run with a config file
    python -m portbridge --config bridge.yaml

    # Host a different unit in another directory
    python -m portbridge --unit ./top.py:Top --workdir ./run

    # Show the wiring, or check it without running
    python -m portbridge --explain
    python -m portbridge --check
        """,
    )

    parser.add_argument(
        "--config",
        "-c",
        help="YAML bridge configuration file",
    )
    parser.add_argument(
        "--unit",
        help="Unit factory as 'package.module:Name' or 'path/to/file.py:Name'",
    )
    parser.add_argument(
        "--workdir",
        help="Directory that relative input and output paths resolve against",
    )
    parser.add_argument(
        "--env-file",
        help="Load environment variables from this file (default: ./.env if present)",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show the port wiring without running",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the unit and file paths without running",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to a file in addition to console",
    )

    args = parser.parse_args(argv)

    setup_logging(
        verbose=args.verbose,
        json_format=args.json_log,
        log_file=args.log_file,
    )

    env_file = args.env_file or (".env" if Path(".env").exists() else None)
    if env_file:
        load_env_file(env_file)

    try:
        config = build_config(args.config, unit=args.unit, workdir=args.workdir)

        if args.explain:
            explain_bridge(config)
            return

        if args.check:
            if not check_bridge(config):
                sys.exit(1)
            return

        logger.info("Starting bridge: unit=%s base_dir=%s", config.unit, config.base_dir)
        metrics = run_bridge(config)
        print_result(metrics.summary())

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)

    except Exception as e:
        logger.exception("Bridge failed: %s", e)
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
