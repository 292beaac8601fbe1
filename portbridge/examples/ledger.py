"""
Example Unit: Ledger
====================
Turns the three CSV feeds into the four bridge outputs.

Inputs:
- cust_data: customer CSV (first column is the customer identifier)
- acc_data: account CSV
- txn_data: transaction CSV

Outputs:
- user_file: customers as a JSON array of records
- account_file: accounts as a JSON array of records
- tx_file: {"count": n, "transactions": [...]}
- user_ids_file: customer identifiers, one per line

All CSV values are kept as strings. An output whose input never arrives
is not emitted.

To run:
    python -m portbridge --unit portbridge.examples.ledger:LedgerUnit
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from portbridge.lib.errors import PortClosedError
from portbridge.lib.unit import ComputationUnit

logger = logging.getLogger(__name__)


def parse_csv(text: str) -> pd.DataFrame:
    """Parse CSV text with every column as a string."""
    try:
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()


def to_records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    return frame.to_dict(orient="records")


class LedgerUnit(ComputationUnit):
    """Reference unit for the default bridge wiring."""

    INPUT_PORTS = ("cust_data", "acc_data", "txn_data")
    OUTPUT_PORTS = ("user_file", "account_file", "tx_file", "user_ids_file")

    async def run(self) -> None:
        # Inputs may arrive in any order, so each feed is handled on its own
        await asyncio.gather(
            self._customers(),
            self._accounts(),
            self._transactions(),
        )

    async def _receive(self, port: str) -> Optional[pd.DataFrame]:
        try:
            text = await self.ports.input(port).receive()
        except PortClosedError:
            logger.info("No data on %s; skipping its outputs", port)
            return None
        return parse_csv(text)

    async def _customers(self) -> None:
        frame = await self._receive("cust_data")
        if frame is None:
            return

        self.ports.output("user_file").emit(json.dumps(to_records(frame), indent=2))

        ids = frame.iloc[:, 0].tolist() if len(frame.columns) else []
        self.ports.output("user_ids_file").emit("\n".join(ids))

    async def _accounts(self) -> None:
        frame = await self._receive("acc_data")
        if frame is None:
            return

        self.ports.output("account_file").emit(json.dumps(to_records(frame), indent=2))

    async def _transactions(self) -> None:
        frame = await self._receive("txn_data")
        if frame is None:
            return

        batch = {"count": len(frame), "transactions": to_records(frame)}
        self.ports.output("tx_file").emit(json.dumps(batch, indent=2))
