"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Ledger ────────────────────────────────────────────────────────────────
    # Context every ciphertext must be bound to (the contract address)
    LEDGER_ADDRESS: str = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    # Seconds to wait for the store lock before reporting the ledger unavailable
    LOCK_TIMEOUT_SECONDS: float = 5.0
    EVENT_HISTORY_SIZE: int = 100

    # ── FHE simulation ───────────────────────────────────────────────────────
    FHE_SECRET: str = "local-fhe-dev-secret-change-me"

    # ── Orders ────────────────────────────────────────────────────────────────
    DEFAULT_CREATOR: str = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
    DEFAULT_ASSET_TYPE: str = "Carbon Credit Order"

    # ── Web server ────────────────────────────────────────────────────────────
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    SEED_SAMPLE_DATA: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "SEALED_ORDERS_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
