"""Tests for portbridge/lib/ports.py - asynchronous port channels."""

import asyncio

import pytest

from portbridge.lib.errors import PortClosedError, PortError
from portbridge.lib.ports import InputPort, OutputPort, PortSet


class TestInputPort:
    """Tests for InputPort."""

    def test_send_then_receive(self):
        async def _run():
            port = InputPort("cust_data")
            port.send("id,name\n1,Alice")
            return await port.receive()

        assert asyncio.run(_run()) == "id,name\n1,Alice"

    def test_receive_waits_for_send(self):
        async def _run():
            port = InputPort("acc_data")
            waiter = asyncio.create_task(port.receive())
            await asyncio.sleep(0)
            assert not waiter.done()
            port.send("late")
            return await waiter

        assert asyncio.run(_run()) == "late"

    def test_preserves_order(self):
        async def _run():
            port = InputPort("txn_data")
            for text in ("a", "b", "c"):
                port.send(text)
            return [await port.receive() for _ in range(3)]

        assert asyncio.run(_run()) == ["a", "b", "c"]

    def test_rejects_non_text(self):
        port = InputPort("cust_data")
        with pytest.raises(PortError, match="must be text"):
            port.send(b"bytes")  # type: ignore[arg-type]

    def test_closed_port_raises_on_receive(self):
        async def _run():
            port = InputPort("cust_data")
            port.close()
            with pytest.raises(PortClosedError):
                await port.receive()
            # Stays closed for later receivers
            with pytest.raises(PortClosedError):
                await port.receive()

        asyncio.run(_run())

    def test_close_delivers_queued_payloads_first(self):
        async def _run():
            port = InputPort("cust_data")
            port.send("queued")
            port.close()
            first = await port.receive()
            with pytest.raises(PortClosedError):
                await port.receive()
            return first

        assert asyncio.run(_run()) == "queued"

    def test_send_after_close_raises(self):
        port = InputPort("cust_data")
        port.close()
        with pytest.raises(PortError, match="closed"):
            port.send("text")

    def test_close_is_idempotent(self):
        port = InputPort("cust_data")
        port.close()
        port.close()
        assert port.closed
        assert port.pending == 0

    def test_counts_sent_messages(self):
        port = InputPort("cust_data")
        port.send("one")
        assert port.messages_sent == 1
        assert port.pending == 1


class TestOutputPort:
    """Tests for OutputPort."""

    def test_subscribe_yields_until_closed(self):
        async def _run():
            port = OutputPort("user_file")
            port.emit("a")
            port.emit("b")
            port.close()
            return [payload async for payload in port.subscribe()]

        assert asyncio.run(_run()) == ["a", "b"]

    def test_single_subscriber(self):
        port = OutputPort("user_file")
        port.subscribe()
        with pytest.raises(PortError, match="already has a subscriber"):
            port.subscribe()

    def test_emit_after_close_raises(self):
        port = OutputPort("user_file")
        port.close()
        with pytest.raises(PortError):
            port.emit("x")

    def test_rejects_non_text(self):
        port = OutputPort("user_file")
        with pytest.raises(PortError):
            port.emit({"ok": True})  # type: ignore[arg-type]


class TestPortSet:
    """Tests for PortSet."""

    def test_lookup(self):
        ports = PortSet(inputs=["cust_data"], outputs=["user_file"])
        assert isinstance(ports.input("cust_data"), InputPort)
        assert isinstance(ports.output("user_file"), OutputPort)
        assert "cust_data" in ports
        assert ports.names == ["cust_data", "user_file"]

    def test_unknown_port_lists_known(self):
        ports = PortSet(inputs=["cust_data"], outputs=["user_file"])
        with pytest.raises(PortError) as exc_info:
            ports.input("missing")
        assert "cust_data" in str(exc_info.value)

    def test_input_name_is_not_an_output(self):
        ports = PortSet(inputs=["cust_data"], outputs=["user_file"])
        with pytest.raises(PortError):
            ports.output("cust_data")

    def test_duplicate_names_rejected(self):
        with pytest.raises(PortError, match="Duplicate"):
            PortSet(inputs=["data"], outputs=["data"])

    def test_empty_name_rejected(self):
        with pytest.raises(PortError):
            PortSet(inputs=[""], outputs=[])

    def test_close_outputs(self):
        ports = PortSet(inputs=["cust_data"], outputs=["user_file", "tx_file"])
        ports.close_outputs()
        assert all(port.closed for port in ports.outputs.values())
        assert not ports.input("cust_data").closed
