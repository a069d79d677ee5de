"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "MarketDash Analytics"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # SQLite (options ratio history)
    sqlite_path: Optional[str] = None  # Defaults to ./data/marketdash.db

    # Redis (optional shared TTL cache)
    redis_url: str = "redis://localhost:6379"
    use_redis_cache: bool = False

    # CORS (Frontend URL)
    allowed_origins: list[str] = ["http://localhost:5173"]

    # FRED (macro series)
    fred_api_key: Optional[str] = None
    fred_base_url: str = "https://api.stlouisfed.org/fred"

    # Polygon (options chain snapshots)
    polygon_api_key: Optional[str] = None
    polygon_base_url: str = "https://api.polygon.io/v3/snapshot/options"

    # multpl (S&P 500 real earnings table)
    multpl_earnings_url: str = "https://www.multpl.com/s-p-500-earnings/table/by-month"

    http_timeout_seconds: float = 15.0

    # Options chain pagination
    options_page_limit: int = 250  # Polygon rejects larger pages
    options_max_pages: int = 50
    options_timeout_seconds: float = 60.0
    options_batch_pause_seconds: float = 0.2
    options_strike_window: int = 5

    # Cache TTLs
    macro_cache_ttl_seconds: int = 3600  # 1 hour
    cape_cache_ttl_seconds: int = 86400  # 24 hours

    # Analytics
    beta_tolerance_days: int = 5
    cape_lookback_years: int = 10
    cape_min_span_years: float = 0.7
    cape_quarterly_spacing_days: int = 100

    # Feature Flags
    enable_mock_fallback: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
