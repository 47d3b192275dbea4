"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from storeadmin.catalog.validation import SkuScope


class Settings(BaseSettings):
    """Settings loaded from ``STOREADMIN_*`` environment variables."""

    # Catalog Service
    catalog_api_url: str = "http://localhost:5000"
    catalog_api_token: str | None = None
    request_timeout: float = 30.0

    # Catalog rules
    sku_uniqueness_scope: SkuScope = SkuScope.NONE
    include_disabled_by_default: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="STOREADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
