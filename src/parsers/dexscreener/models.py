from pydantic import BaseModel


class DexScreenerToken(BaseModel):
    address: str
    name: str | None = None
    symbol: str | None = None

    model_config = {"extra": "ignore"}


class DexScreenerVolume(BaseModel):
    m5: float | None = None
    h1: float | None = None
    h6: float | None = None
    h24: float | None = None

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    chainId: str = ""
    dexId: str = ""
    pairAddress: str = ""
    baseToken: DexScreenerToken | None = None
    priceUsd: str | None = None
    volume: DexScreenerVolume | None = None
    volume24h: float | None = None  # legacy flat field
    marketCap: float | None = None

    model_config = {"extra": "ignore"}

    @property
    def volume_24h_usd(self) -> float:
        if self.volume and self.volume.h24:
            return self.volume.h24
        return self.volume24h or 0.0
