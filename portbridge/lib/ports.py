"""Named asynchronous ports between the bridge and a computation unit.

Each port is a one-directional text channel backed by an asyncio queue.
The bridge is the producer for input ports and the single consumer for
output ports; the unit is the other side of both.

Example:
    ports = PortSet(inputs=["cust_data"], outputs=["user_file"])
    ports.input("cust_data").send("id,name\\n1,Alice")
    text = await ports.input("cust_data").receive()

    ports.output("user_file").emit('{"ok": true}')
    async for payload in ports.output("user_file").subscribe():
        ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Dict, Iterable, List

from portbridge.lib.errors import PortClosedError, PortError

logger = logging.getLogger(__name__)

__all__ = ["InputPort", "OutputPort", "PortSet"]

# Queue marker that ends delivery on a closed port
_CLOSED = object()


class _Port:
    """Shared queue handling for input and output ports."""

    direction = "port"

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self.messages_sent = 0

    @property
    def closed(self) -> bool:
        """Whether the port refuses new payloads."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of payloads queued but not yet received."""
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size

    def close(self) -> None:
        """Close the port. Queued payloads are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        logger.debug("Closed %s port %s", self.direction, self.name)

    def _put(self, payload: str) -> None:
        if self._closed:
            raise PortError(
                f"Cannot send on closed {self.direction} port",
                port=self.name,
            )
        if not isinstance(payload, str):
            raise PortError(
                f"Port payloads must be text, got {type(payload).__name__}",
                port=self.name,
            )
        self._queue.put_nowait(payload)
        self.messages_sent += 1

    async def _get(self) -> str:
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place so later receivers also see the close
            self._queue.put_nowait(_CLOSED)
            raise PortClosedError(
                f"{self.direction.capitalize()} port is closed",
                port=self.name,
            )
        return item

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"{type(self).__name__}({self.name!r}, {state})"


class InputPort(_Port):
    """Port carrying text from the bridge into the unit."""

    direction = "input"

    def send(self, payload: str) -> None:
        """Enqueue a payload without waiting for the unit to receive it."""
        self._put(payload)

    async def receive(self) -> str:
        """Wait for the next payload.

        Raises:
            PortClosedError: If the port was closed and nothing is queued.
        """
        return await self._get()


class OutputPort(_Port):
    """Port carrying text from the unit out to the bridge."""

    direction = "output"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._subscribed = False

    def emit(self, payload: str) -> None:
        """Enqueue a payload for the subscriber."""
        self._put(payload)

    def subscribe(self) -> AsyncIterator[str]:
        """Return the iterator over emitted payloads.

        Output ports have a single consumer; iteration ends once the port
        is closed and every queued payload has been yielded.
        """
        if self._subscribed:
            raise PortError("Output port already has a subscriber", port=self.name)
        self._subscribed = True
        return self._drain()

    async def _drain(self) -> AsyncIterator[str]:
        while True:
            try:
                payload = await self._get()
            except PortClosedError:
                return
            yield payload


class PortSet:
    """The fixed set of named ports a unit exposes."""

    def __init__(self, inputs: Iterable[str], outputs: Iterable[str]) -> None:
        self.inputs: Dict[str, InputPort] = {}
        self.outputs: Dict[str, OutputPort] = {}

        for name in inputs:
            self._check_new(name)
            self.inputs[name] = InputPort(name)
        for name in outputs:
            self._check_new(name)
            self.outputs[name] = OutputPort(name)

    def _check_new(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise PortError(f"Invalid port name: {name!r}")
        if name in self.inputs or name in self.outputs:
            raise PortError("Duplicate port name", port=name)

    @property
    def names(self) -> List[str]:
        return list(self.inputs) + list(self.outputs)

    def input(self, name: str) -> InputPort:
        """Look up an input port by name."""
        try:
            return self.inputs[name]
        except KeyError:
            raise PortError(
                "Unknown input port",
                port=name,
                known_ports=list(self.inputs),
            ) from None

    def output(self, name: str) -> OutputPort:
        """Look up an output port by name."""
        try:
            return self.outputs[name]
        except KeyError:
            raise PortError(
                "Unknown output port",
                port=name,
                known_ports=list(self.outputs),
            ) from None

    def close_outputs(self) -> None:
        for port in self.outputs.values():
            port.close()

    def __contains__(self, name: object) -> bool:
        return name in self.inputs or name in self.outputs
