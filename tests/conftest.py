"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from portbridge.lib.config_loader import BridgeConfig  # noqa: E402


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Working directory with an empty data/ folder for input feeds."""
    (tmp_path / "data").mkdir()
    return tmp_path


@pytest.fixture
def write_inputs(workdir: Path):
    """Write input feeds into workdir/data by file name."""

    def _write(**files: str) -> Path:
        for name, text in files.items():
            (workdir / "data" / f"{name}.csv").write_bytes(text.encode("utf-8"))
        return workdir

    return _write


@pytest.fixture
def echo_config(workdir: Path) -> BridgeConfig:
    """Default wiring hosting the echo test unit in workdir."""
    return BridgeConfig(unit="tests.units:EchoUnit", base_dir=str(workdir))
