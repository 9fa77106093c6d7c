"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = "sqlite:///./short_vault.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Pricing
    price_feed: str = "chainlink"  # "chainlink" or "static"
    rpc_url: str = "http://localhost:8545"
    base_asset: str = "ETH"
    base_feed_id: str = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"  # Chainlink ETH/USD mainnet
    static_prices: dict[str, list[int]] = {}  # feed_id -> [raw_price, decimals]

    # Positions
    min_deposit: int = 10**15  # wei; deposits must be strictly greater

    model_config = {"env_prefix": "SV_", "env_file": ".env"}


settings = Settings()
