"""Tests for computation unit loading and construction."""

from pathlib import Path

import pytest

from portbridge.lib.errors import UnitLoadError
from portbridge.lib.ports import PortSet
from portbridge.lib.unit import ComputationUnit, init_unit, load_unit_factory
from tests.units import EchoUnit


class TestLoadUnitFactory:
    """Tests for load_unit_factory()."""

    def test_module_reference(self):
        factory = load_unit_factory("tests.units:EchoUnit")
        assert factory is EchoUnit

    def test_reference_without_colon(self):
        with pytest.raises(UnitLoadError, match="module:Name"):
            load_unit_factory("tests.units.EchoUnit")

    def test_empty_parts(self):
        with pytest.raises(UnitLoadError):
            load_unit_factory(":EchoUnit")
        with pytest.raises(UnitLoadError):
            load_unit_factory("tests.units:")

    def test_missing_module(self):
        with pytest.raises(UnitLoadError) as exc_info:
            load_unit_factory("no_such_module_xyz:Top")
        assert exc_info.value.details["reference"] == "no_such_module_xyz:Top"
        assert exc_info.value.details["cause_type"] == "ModuleNotFoundError"

    def test_missing_attribute(self):
        with pytest.raises(UnitLoadError, match="not found"):
            load_unit_factory("tests.units:NoSuchUnit")

    def test_not_callable(self):
        with pytest.raises(UnitLoadError, match="not callable"):
            load_unit_factory("tests.units:ECHO_ROUTES")

    def test_file_reference(self, tmp_path: Path):
        unit_file = tmp_path / "top.py"
        unit_file.write_text(
            "from portbridge.lib.unit import ComputationUnit\n"
            "\n"
            "class Top(ComputationUnit):\n"
            "    INPUT_PORTS = ('cust_data',)\n"
            "    OUTPUT_PORTS = ('user_file',)\n"
            "\n"
            "    async def run(self):\n"
            "        pass\n"
        )

        factory = load_unit_factory(f"{unit_file}:Top")
        unit = init_unit(factory)

        assert list(unit.ports.inputs) == ["cust_data"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(UnitLoadError, match="file not found"):
            load_unit_factory(f"{tmp_path / 'absent.py'}:Top")

    def test_file_with_import_error(self, tmp_path: Path):
        unit_file = tmp_path / "broken.py"
        unit_file.write_text("raise ImportError('nope')\n")

        with pytest.raises(UnitLoadError, match="failed to import"):
            load_unit_factory(f"{unit_file}:Top")


class TestInitUnit:
    """Tests for init_unit()."""

    def test_constructs_with_no_arguments(self):
        unit = init_unit(EchoUnit)
        assert isinstance(unit, EchoUnit)
        assert isinstance(unit.ports, PortSet)

    def test_each_call_builds_a_new_unit(self):
        assert init_unit(EchoUnit) is not init_unit(EchoUnit)

    def test_factory_error_wrapped(self):
        factory = load_unit_factory("tests.units:BrokenInitUnit")
        with pytest.raises(UnitLoadError) as exc_info:
            init_unit(factory)
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_requires_port_set(self):
        factory = load_unit_factory("tests.units:NoPortsObject")
        with pytest.raises(UnitLoadError, match="PortSet"):
            init_unit(factory)

    def test_requires_async_run(self):
        class SyncRun:
            def __init__(self):
                self.ports = PortSet([], [])

            def run(self):
                return None

        with pytest.raises(UnitLoadError, match="async def run"):
            init_unit(SyncRun)

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            ComputationUnit()  # type: ignore[abstract]
