"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest

from src.parsers.event_log import EventLog
from src.parsers.helius.client import HeliusClient
from src.parsers.helius.models import ParsedTransaction
from src.parsers.ledger import Ledger, RunningTotals

WALLET = "Bqx5ycNhbEbYtVrpA4UKuQiFZuyBEenTZJSdFz1Mb1bs"
MINT = "pumpCmXqMfrsAkQ5r49WcJnRayYRqmXz6ae8H7H9Dfn"


@pytest.fixture
def event_log(tmp_path) -> EventLog:
    return EventLog(tmp_path / "logs.json", max_entries=50)


@pytest.fixture
def ledger() -> Ledger:
    return Ledger(RunningTotals(total_tokens_credited=1000.0), value_multiplier=0.004)


@pytest.fixture
def helius() -> AsyncMock:
    """HeliusClient stand-in; every RPC method is an AsyncMock."""
    return AsyncMock(spec=HeliusClient)


@pytest.fixture
def make_tx():
    """Build a jsonParsed transaction from (account_index, mint, owner, ui_amount) tuples."""

    def _make(post=(), pre=(), meta: bool = True) -> ParsedTransaction:
        def _balances(rows):
            return [
                {
                    "accountIndex": idx,
                    "mint": mint,
                    "owner": owner,
                    "uiTokenAmount": {"uiAmount": amount, "amount": "0", "decimals": 6},
                }
                for idx, mint, owner, amount in rows
            ]

        if not meta:
            return ParsedTransaction.model_validate({"slot": 1, "meta": None})
        return ParsedTransaction.model_validate({
            "slot": 1,
            "meta": {
                "err": None,
                "preTokenBalances": _balances(pre),
                "postTokenBalances": _balances(post),
            },
        })

    return _make
