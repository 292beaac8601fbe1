"""Computation unit contract and loader.

A computation unit is the opaque application the bridge hosts. It is
built once, with no arguments, and talks to the bridge only through the
ports it declares.

Example:
    class Echo(ComputationUnit):
        INPUT_PORTS = ("cust_data",)
        OUTPUT_PORTS = ("user_file",)

        async def run(self) -> None:
            text = await self.ports.input("cust_data").receive()
            self.ports.output("user_file").emit(text)

    factory = load_unit_factory("myapp.units:Echo")
    unit = init_unit(factory)
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, ClassVar, Tuple

from portbridge.lib.errors import UnitLoadError
from portbridge.lib.ports import PortSet

logger = logging.getLogger(__name__)

__all__ = ["ComputationUnit", "load_unit_factory", "init_unit"]


class ComputationUnit(ABC):
    """Base class for units hosted by the bridge.

    Subclasses declare their port names as class attributes and implement
    ``run``. The bridge ends the run once ``run`` returns and every
    pending output has been written.
    """

    INPUT_PORTS: ClassVar[Tuple[str, ...]] = ()
    OUTPUT_PORTS: ClassVar[Tuple[str, ...]] = ()

    def __init__(self) -> None:
        self.ports = PortSet(self.INPUT_PORTS, self.OUTPUT_PORTS)

    @abstractmethod
    async def run(self) -> None:
        """Process input messages and emit outputs."""


def _import_module(module_ref: str, reference: str) -> Any:
    """Import a dotted module name or a .py file path."""
    if module_ref.endswith(".py") or "/" in module_ref or "\\" in module_ref:
        path = Path(module_ref).resolve()
        if not path.exists():
            raise UnitLoadError("Unit module file not found", reference=reference)

        module_name = f"portbridge_unit_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise UnitLoadError("Cannot load unit module file", reference=reference)

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise UnitLoadError(
                "Unit module failed to import", reference=reference, cause=e
            ) from e
        return module

    try:
        return importlib.import_module(module_ref)
    except ImportError as e:
        raise UnitLoadError(
            "Unit module not found", reference=reference, cause=e
        ) from e


def load_unit_factory(reference: str) -> Callable[[], Any]:
    """Resolve a unit reference to its factory.

    Args:
        reference: ``package.module:Name`` or ``path/to/file.py:Name``.
            ``Name`` may be dotted to reach a nested attribute.

    Returns:
        The callable that builds the unit.

    Raises:
        UnitLoadError: If the reference is malformed or cannot be resolved.
    """
    if not reference or ":" not in reference:
        raise UnitLoadError(
            "Unit reference must have the form 'module:Name'",
            reference=reference,
        )

    module_ref, attr_path = reference.rsplit(":", 1)
    if not module_ref or not attr_path:
        raise UnitLoadError(
            "Unit reference must have the form 'module:Name'",
            reference=reference,
        )

    target = _import_module(module_ref, reference)
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise UnitLoadError(
                f"Unit factory '{attr_path}' not found in '{module_ref}'",
                reference=reference,
                cause=e,
            ) from e

    if not callable(target):
        raise UnitLoadError("Unit factory is not callable", reference=reference)

    logger.debug("Resolved unit factory %s", reference)
    return target


def init_unit(factory: Callable[[], Any]) -> Any:
    """Construct the unit by calling its factory with no arguments.

    Raises:
        UnitLoadError: If construction fails or the result does not expose
            a PortSet and an async ``run`` method.
    """
    name = getattr(factory, "__qualname__", repr(factory))
    try:
        unit = factory()
    except Exception as e:
        raise UnitLoadError(
            f"Unit factory '{name}' raised during initialization", cause=e
        ) from e

    if not isinstance(getattr(unit, "ports", None), PortSet):
        raise UnitLoadError(f"Unit '{name}' does not expose a PortSet as 'ports'")

    run = getattr(unit, "run", None)
    if run is None or not inspect.iscoroutinefunction(run):
        raise UnitLoadError(f"Unit '{name}' must define 'async def run(self)'")

    logger.info(
        "Initialized unit %s (inputs=%s, outputs=%s)",
        name,
        ", ".join(unit.ports.inputs) or "-",
        ", ".join(unit.ports.outputs) or "-",
    )
    return unit
