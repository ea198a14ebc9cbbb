"""Pydantic models for Solana JSON-RPC responses served by Helius."""

from typing import Any

from pydantic import BaseModel, Field


class HeliusSignature(BaseModel):
    """One entry of getSignaturesForAddress."""

    signature: str
    slot: int = 0
    timestamp: int = 0  # blockTime, unix
    err: dict | str | None = None  # non-None means failed


class UiTokenAmount(BaseModel):
    amount: str = "0"  # raw integer as string
    decimals: int = 0
    uiAmount: float | None = None

    model_config = {"extra": "ignore"}


class TokenBalance(BaseModel):
    """Pre/post token balance entry of a parsed transaction."""

    accountIndex: int
    mint: str = ""
    owner: str = ""
    uiTokenAmount: UiTokenAmount = Field(default_factory=UiTokenAmount)

    model_config = {"extra": "ignore"}

    @property
    def ui_amount(self) -> float:
        return self.uiTokenAmount.uiAmount or 0.0


class TransactionMeta(BaseModel):
    err: dict | str | None = None
    preTokenBalances: list[TokenBalance] = []
    postTokenBalances: list[TokenBalance] = []

    model_config = {"extra": "ignore"}


class ParsedTransaction(BaseModel):
    """getTransaction result with ``encoding=jsonParsed``.

    Only the token-balance view is modelled; instructions are ignored.
    """

    slot: int = 0
    blockTime: int | None = None
    meta: TransactionMeta | None = None

    model_config = {"extra": "ignore"}


class TokenAccountsPage(BaseModel):
    """One page of the DAS getTokenAccounts listing.

    Account payloads vary between providers, so they are kept as raw dicts.
    """

    accounts: list[dict[str, Any]] = []
    cursor: str | None = None
