"""Computation units used by the test suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List

from portbridge.lib.errors import PortClosedError
from portbridge.lib.unit import ComputationUnit

# Input port -> output port the echo unit copies it to
ECHO_ROUTES = {
    "cust_data": "user_file",
    "acc_data": "account_file",
    "txn_data": "tx_file",
}


class EchoUnit(ComputationUnit):
    """Copies each input verbatim to its output and records what arrived."""

    INPUT_PORTS = ("cust_data", "acc_data", "txn_data")
    OUTPUT_PORTS = ("user_file", "account_file", "tx_file", "user_ids_file")

    def __init__(self) -> None:
        super().__init__()
        self.received: Dict[str, List[str]] = {name: [] for name in self.INPUT_PORTS}
        self.closed: List[str] = []

    async def run(self) -> None:
        await asyncio.gather(*(self._echo(src, dst) for src, dst in ECHO_ROUTES.items()))

    async def _echo(self, src: str, dst: str) -> None:
        try:
            text = await self.ports.input(src).receive()
        except PortClosedError:
            self.closed.append(src)
            return
        self.received[src].append(text)
        self.ports.output(dst).emit(text)


class BurstUnit(ComputationUnit):
    """Emits several payloads on one port back to back."""

    INPUT_PORTS = ("cust_data", "acc_data", "txn_data")
    OUTPUT_PORTS = ("user_file", "account_file", "tx_file", "user_ids_file")

    PAYLOADS = ("first", "second", "third")

    async def run(self) -> None:
        for payload in self.PAYLOADS:
            self.ports.output("user_file").emit(payload)


class StaticUnit(ComputationUnit):
    """Emits a fixed payload on user_file without reading inputs."""

    INPUT_PORTS = ("cust_data", "acc_data", "txn_data")
    OUTPUT_PORTS = ("user_file", "account_file", "tx_file", "user_ids_file")

    async def run(self) -> None:
        self.ports.output("user_file").emit('{"ok":true}')


class SmallUnit(ComputationUnit):
    """Declares a single port pair."""

    INPUT_PORTS = ("cust_data",)
    OUTPUT_PORTS = ("user_file",)

    async def run(self) -> None:
        return None


class BrokenInitUnit(ComputationUnit):
    INPUT_PORTS = ("cust_data",)
    OUTPUT_PORTS = ("user_file",)

    def __init__(self) -> None:
        raise RuntimeError("boom")

    async def run(self) -> None:
        return None


class NoPortsObject:
    async def run(self) -> None:
        return None


class FailingRunUnit(ComputationUnit):
    INPUT_PORTS = ("cust_data", "acc_data", "txn_data")
    OUTPUT_PORTS = ("user_file", "account_file", "tx_file", "user_ids_file")

    async def run(self) -> None:
        raise ValueError("unit crashed")
