"""Host bridge between a computation unit and the filesystem.

The bridge builds the unit once, feeds each configured input file into its
input port, and persists every payload the unit emits on an output port to
the file wired to that port.

Failure policy:
    - A missing or unreadable input is logged as a warning, recorded as a
      ReadResult, and its port is closed without a message. The run goes on.
    - A failed output write raises OutputWriteError and ends the run.

Example:
    config = load_bridge_config("bridge.yaml")
    bridge = HostBridge.from_config(config)
    metrics = asyncio.run(bridge.run())
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from portbridge.lib.config_loader import BridgeConfig
from portbridge.lib.errors import PortError
from portbridge.lib.io import OutputWriter, ReadResult, read_input
from portbridge.lib.observability import BridgeMetrics
from portbridge.lib.storage import StorageBackend, get_storage
from portbridge.lib.unit import init_unit, load_unit_factory

logger = logging.getLogger(__name__)

__all__ = ["HostBridge", "run_bridge"]


class HostBridge:
    """Wire a unit's ports to input and output files."""

    def __init__(
        self,
        unit: Any,
        config: BridgeConfig,
        *,
        storage: Optional[StorageBackend] = None,
        metrics: Optional[BridgeMetrics] = None,
    ) -> None:
        self.unit = unit
        self.config = config
        self.storage = storage or get_storage(config.base_dir)
        self.writer = OutputWriter(self.storage, encoding=config.encoding)
        self.metrics = metrics or BridgeMetrics(unit=config.unit)
        self.read_results: Dict[str, ReadResult] = {}

        self.validate_wiring()

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "HostBridge":
        """Resolve and construct the configured unit, then wrap it."""
        metrics = BridgeMetrics(unit=config.unit)
        with metrics.time_phase("startup"):
            unit = init_unit(load_unit_factory(config.unit))
        return cls(unit, config, metrics=metrics)

    def validate_wiring(self) -> None:
        """Check that every wired port is declared by the unit.

        Raises:
            PortError: If the wiring names a port the unit does not have.
        """
        ports = self.unit.ports
        unknown = [p for p in self.config.inputs if p not in ports.inputs]
        unknown += [p for p in self.config.outputs if p not in ports.outputs]

        if unknown:
            raise PortError(
                f"Wiring names ports the unit does not declare: {', '.join(unknown)}",
                known_ports=ports.names,
                suggestion="Match the config's inputs/outputs to the unit's port names.",
            )

        for name in self.unwired_inputs:
            logger.warning(
                "Input port %s is not wired to a file; it will be closed without a message",
                name,
            )
        for name in self.unwired_outputs:
            logger.warning(
                "Output port %s is not wired to a file; its payloads are discarded",
                name,
            )

    @property
    def unwired_inputs(self) -> List[str]:
        return [p for p in self.unit.ports.inputs if p not in self.config.inputs]

    @property
    def unwired_outputs(self) -> List[str]:
        return [p for p in self.unit.ports.outputs if p not in self.config.outputs]

    async def feed_input(self, port: str, path: str) -> ReadResult:
        """Read one input file and send its text on ``port``."""
        result = await read_input(self.storage, port, path, self.config.encoding)
        self.read_results[port] = result
        self.metrics.record_input(port, result.status.value)

        input_port = self.unit.ports.input(port)
        if result.ok:
            input_port.send(result.text)
            logger.info("Sent %s (%d chars) on %s", path, len(result.text), port)
        else:
            logger.warning(
                "Input %s for port %s is %s (%s); no message will be sent",
                result.path,
                port,
                result.status.value,
                result.error,
            )
            input_port.close()

        return result

    async def persist_output(self, port: str, path: str) -> None:
        """Write every payload emitted on ``port`` to ``path``."""
        async for payload in self.unit.ports.output(port).subscribe():
            if self.config.log_payloads:
                logger.info("%s -> %s: %s", port, path, payload)
            result = await self.writer.write(port, path, payload)
            self.metrics.record_output(port, result.bytes_written)

    async def discard_output(self, port: str) -> int:
        """Consume payloads on an unwired output port without writing them."""
        discarded = 0
        async for _ in self.unit.ports.output(port).subscribe():
            discarded += 1
        if discarded:
            logger.debug("Discarded %d payload(s) from unwired port %s", discarded, port)
        return discarded

    async def _run_unit(self) -> None:
        try:
            await self.unit.run()
        finally:
            # Lets the output subscribers drain and finish
            self.unit.ports.close_outputs()

    async def run(self) -> BridgeMetrics:
        """Run the unit until it finishes and all outputs are written.

        Raises:
            OutputWriteError: If any output write fails.
            Exception: Whatever the unit's ``run`` raises.
        """
        tasks: List[asyncio.Task] = []

        for port, path in self.config.outputs.items():
            tasks.append(
                asyncio.create_task(self.persist_output(port, path), name=f"output:{port}")
            )
        for port in self.unwired_outputs:
            tasks.append(
                asyncio.create_task(self.discard_output(port), name=f"discard:{port}")
            )
        # Nothing will ever be sent on these
        for port in self.unwired_inputs:
            self.unit.ports.input(port).close()
        tasks.append(asyncio.create_task(self._run_unit(), name="unit"))
        for port, path in self.config.inputs.items():
            tasks.append(
                asyncio.create_task(self.feed_input(port, path), name=f"input:{port}")
            )

        try:
            with self.metrics.time_phase("run"):
                await self._supervise(tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self.metrics.finish()

        logger.info(
            "Bridge finished: %d input(s) delivered, %d missing, %d output(s) written",
            self.metrics.inputs_delivered,
            self.metrics.inputs_missing,
            self.metrics.outputs_written,
            extra=self.metrics.to_log_dict(),
        )
        return self.metrics

    @staticmethod
    async def _supervise(tasks: List[asyncio.Task]) -> None:
        """Wait for all tasks, re-raising the first failure."""
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_EXCEPTION
            )
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    logger.error("Task %s failed", task.get_name())
                    raise task.exception()  # type: ignore[misc]


def run_bridge(config: BridgeConfig) -> BridgeMetrics:
    """Build the bridge from ``config`` and run it to completion."""

    async def _main() -> BridgeMetrics:
        bridge = HostBridge.from_config(config)
        return await bridge.run()

    return asyncio.run(_main())
