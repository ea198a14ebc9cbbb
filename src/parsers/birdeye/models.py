"""Pydantic models for Birdeye Data Services API responses."""

from pydantic import BaseModel


class BirdeyeTokenOverview(BaseModel):
    """Response from /defi/token_overview.

    Birdeye has shipped both camelCase and snake_case spellings of the
    headline fields, so both are accepted.
    """

    address: str = ""
    symbol: str | None = None
    price: float | None = None

    marketCap: float | None = None
    market_cap: float | None = None

    v24hUSD: float | None = None
    volume24hUSD: float | None = None

    model_config = {"extra": "ignore"}

    @property
    def market_cap_usd(self) -> float:
        return self.marketCap or self.market_cap or 0.0

    @property
    def volume_24h_usd(self) -> float:
        return self.v24hUSD or self.volume24hUSD or 0.0
