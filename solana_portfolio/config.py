"""Configuration management for the portfolio tracker."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file from project root
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
_config_path = _project_root / "config.json"

load_dotenv(_env_path)

# Defaults (used when config.json is missing or incomplete)
_DEFAULTS = {
    "cache_ttl_seconds": 30.0,      # trending + price cache freshness window
    "price_batch_size": 50,         # Jupiter's per-call id ceiling
    "native_symbol": "SOL",
    "use_coingecko_fallback": True,
    "request_timeout": 30.0,
}


def _load_config_json(path: Path = _config_path) -> dict:
    """Load config.json from project root. Returns empty dict if missing."""
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not parse %s: %s -- using defaults", path.name, e)
        return {}


@dataclass
class Config:
    """Application configuration."""
    # Endpoints
    jupiter_base_url: str = "https://lite-api.jup.ag"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"

    # API Keys (optional, the free tiers work without one)
    coingecko_api_key: str | None = None

    # Caching and batching
    cache_ttl_seconds: float = _DEFAULTS["cache_ttl_seconds"]
    price_batch_size: int = _DEFAULTS["price_batch_size"]

    # Portfolio settings
    native_symbol: str = _DEFAULTS["native_symbol"]
    use_coingecko_fallback: bool = _DEFAULTS["use_coingecko_fallback"]
    request_timeout: float = _DEFAULTS["request_timeout"]

    def __post_init__(self):
        if not 1 <= self.price_batch_size <= 50:
            raise ValueError(
                f"price_batch_size must be between 1 and 50, got {self.price_batch_size}"
            )
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive")

    @classmethod
    def from_env(cls, config_path: Path = _config_path) -> "Config":
        """Load configuration from .env + config.json."""
        user_cfg = _load_config_json(config_path)

        return cls(
            jupiter_base_url=os.getenv("JUPITER_API_URL", cls.jupiter_base_url),
            coingecko_base_url=os.getenv("COINGECKO_API_URL", cls.coingecko_base_url),
            coingecko_api_key=os.getenv("COINGECKO_API_KEY") or None,
            cache_ttl_seconds=float(user_cfg.get(
                "cache_ttl_seconds", _DEFAULTS["cache_ttl_seconds"]
            )),
            price_batch_size=int(user_cfg.get(
                "price_batch_size", _DEFAULTS["price_batch_size"]
            )),
            native_symbol=str(user_cfg.get(
                "native_symbol", _DEFAULTS["native_symbol"]
            )),
            use_coingecko_fallback=bool(user_cfg.get(
                "use_coingecko_fallback", _DEFAULTS["use_coingecko_fallback"]
            )),
            request_timeout=float(user_cfg.get(
                "request_timeout", _DEFAULTS["request_timeout"]
            )),
        )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, logging what went wrong on failure."""
        try:
            return cls.from_env()
        except ValueError as e:
            logger.error("Configuration error: %s", e)
            raise


def get_config() -> Config:
    """Get the application configuration (singleton pattern)."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


_config: Config | None = None
