"""Holder leaderboard for the dashboard token.

Pages through every token account of the mint, normalizes raw amounts by
the mint's decimals, sums accounts per owner and ranks owners above the
eligibility threshold. Computed fresh per request; nothing is shared
between requests except the cached decimal count.

Ties keep the provider's listing order (first owner seen ranks higher).
"""

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from src.parsers.helius.client import MAX_DECIMALS, HeliusApiError, HeliusClient


@dataclass
class HolderRecord:
    rank: int
    wallet: str
    amount: float


@dataclass
class HolderSnapshot:
    holders: list[HolderRecord] = field(default_factory=list)
    lookup: HolderRecord | None = None  # requested wallet, ranked against ALL owners


# --- amount extraction -------------------------------------------------------
# Listing payloads differ between providers. Strategies are tried in order;
# the first one that finds its field decides the amount.

AmountStrategy = Callable[[dict[str, Any], float], float | None]


def _as_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _raw_amount(account: dict[str, Any], denom: float) -> float | None:
    if account.get("amount") is None:
        return None
    return _as_float(account["amount"]) / denom


def _nested_raw_amount(account: dict[str, Any], denom: float) -> float | None:
    token_amount = account.get("tokenAmount")
    if not isinstance(token_amount, dict) or not token_amount.get("amount"):
        return None
    return _as_float(token_amount["amount"]) / denom


def _ui_amount(account: dict[str, Any], denom: float) -> float | None:
    if "uiAmount" not in account:
        return None
    return _as_float(account["uiAmount"])


def _nested_ui_amount(account: dict[str, Any], denom: float) -> float | None:
    token_amount = account.get("tokenAmount")
    if not isinstance(token_amount, dict) or "uiAmount" not in token_amount:
        return None
    return _as_float(token_amount["uiAmount"])


AMOUNT_STRATEGIES: tuple[AmountStrategy, ...] = (
    _raw_amount,
    _nested_raw_amount,
    _ui_amount,
    _nested_ui_amount,
)


def extract_amount(account: dict[str, Any], decimals: int) -> float:
    """Human-readable amount of one token account (0 when no field matches)."""
    denom = 10.0 ** decimals
    for strategy in AMOUNT_STRATEGIES:
        amount = strategy(account, denom)
        if amount is not None:
            return amount
    return 0.0


def extract_owner(account: dict[str, Any]) -> str:
    return str(account.get("owner") or account.get("ownerAddress") or "")


def aggregate_by_owner(accounts: list[dict[str, Any]], decimals: int) -> dict[str, float]:
    """Sum normalized balances per owner, preserving first-seen owner order."""
    balances: dict[str, float] = {}
    for account in accounts:
        owner = extract_owner(account)
        if not owner:
            continue
        balances[owner] = balances.get(owner, 0.0) + extract_amount(account, decimals)
    return balances


def rank_holders(
    balances: dict[str, float],
    *,
    min_amount: float,
    max_amount: float | None = None,
    wallet: str | None = None,
) -> HolderSnapshot:
    """Rank owners by amount (desc, stable) and filter to the eligibility window.

    Eligible: ``amount > min_amount`` and, when ``max_amount`` is given,
    ``amount <= max_amount``. The optional ``wallet`` lookup is ranked
    against the unfiltered list and matched case-insensitively.
    """
    ordered = sorted(balances.items(), key=lambda item: item[1], reverse=True)

    eligible = [
        (owner, amount)
        for owner, amount in ordered
        if amount > min_amount and (max_amount is None or amount <= max_amount)
    ]
    snapshot = HolderSnapshot(
        holders=[
            HolderRecord(rank=i + 1, wallet=owner, amount=amount)
            for i, (owner, amount) in enumerate(eligible)
        ]
    )

    query = (wallet or "").strip().lower()
    if query:
        for i, (owner, amount) in enumerate(ordered):
            if owner.lower() == query:
                snapshot.lookup = HolderRecord(rank=i + 1, wallet=owner, amount=amount)
                break

    return snapshot


class HolderAggregator:
    """Builds the holder leaderboard from the Helius token-account listing."""

    def __init__(
        self,
        helius: HeliusClient,
        *,
        mint: str,
        page_size: int = 1000,
        max_pages: int = 5,
        min_amount: float = 200_000,
        max_amount: float = 50_000_000,
        enforce_max: bool = False,
    ) -> None:
        self._helius = helius
        self._mint = mint
        self._page_size = page_size
        self._max_pages = max_pages
        self._min_amount = min_amount
        self._max_amount = max_amount
        self._enforce_max = enforce_max
        self._decimals: int | None = None

    async def get_decimals(self) -> int:
        """Mint decimals, cached after the first successful lookup."""
        if self._decimals is not None:
            return self._decimals
        try:
            decimals = await self._helius.get_token_decimals(self._mint)
        except HeliusApiError as e:
            logger.warning(f"[HOLDERS] getTokenSupply failed, assuming 0 decimals: {e}")
            return 0
        self._decimals = min(max(decimals, 0), MAX_DECIMALS)
        return self._decimals

    async def fetch_accounts(self) -> list[dict[str, Any]]:
        """All token accounts of the mint, capped at ``max_pages`` pages."""
        accounts: list[dict[str, Any]] = []
        cursor: str | None = None
        for _ in range(self._max_pages):
            result = await self._helius.get_token_accounts(
                self._mint, limit=self._page_size, cursor=cursor
            )
            accounts.extend(result.accounts)
            cursor = result.cursor
            if not cursor:
                break
        else:
            if cursor:
                logger.debug(
                    f"[HOLDERS] Stopped after {self._max_pages} pages, "
                    f"{len(accounts)} accounts (listing truncated)"
                )
        return accounts

    async def compute_holders(self, filter_wallet: str | None = None) -> HolderSnapshot:
        """Ranked eligible holders, plus ``filter_wallet``'s overall rank if it holds any."""
        decimals = await self.get_decimals()
        accounts = await self.fetch_accounts()
        balances = aggregate_by_owner(accounts, decimals)
        return rank_holders(
            balances,
            min_amount=self._min_amount,
            max_amount=self._max_amount if self._enforce_max else None,
            wallet=filter_wallet,
        )
