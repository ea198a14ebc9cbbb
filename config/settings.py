from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius (Solana RPC)
    helius_api_key: str = ""
    helius_rpc_url: str = ""  # derived from helius_api_key when empty
    helius_max_rps: float = 10.0

    # Birdeye Data Services API
    birdeye_api_key: str = ""
    birdeye_max_rps: float = 1.0

    # DexScreener (fallback 24h volume)
    dexscreener_max_rps: float = 1.0

    # Tracked addresses
    dev_wallet: str = "Bqx5ycNhbEbYtVrpA4UKuQiFZuyBEenTZJSdFz1Mb1bs"
    token_ca: str = "8rsZxFLwy8oxV5Tea2zbekNeZR4iitoNR44mV4nDKHx1"
    pump_mint: str = "pumpCmXqMfrsAkQ5r49WcJnRayYRqmXz6ae8H7H9Dfn"

    # Ledger
    value_multiplier: float = 0.004
    initial_airdrop: float = 6469833  # baseline credited before tracking started
    signature_batch_size: int = 50
    tx_commitment: str = "confirmed"
    seen_signatures_max: int = 1000

    # Snapshot + event log files
    cache_file: str = "./pumpdrop_cache.json"
    log_file: str = "./pumpdrop_logs.json"
    log_buffer_size: int = 400

    # Update loop
    update_interval_sec: int = 10
    http_timeout_sec: float = 15.0

    # Holder leaderboard
    holders_page_size: int = 1000
    holders_max_pages: int = 5
    holders_min_amount: float = 200_000
    holders_max_amount: float = 50_000_000  # whale cap, only applied when enforced
    holders_enforce_max: bool = False

    # Dashboard
    dashboard_port: int = 4000
    cors_origins: str = "*"  # comma-separated
    holders_rate_limit: str = "30/minute"
    ingest_rate_limit: str = "120/minute"

    @property
    def rpc_url(self) -> str:
        if self.helius_rpc_url:
            return self.helius_rpc_url
        return f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
