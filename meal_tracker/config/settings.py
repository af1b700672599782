"""
Configuration Management for Meal Claims Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. Every variable is read with the
MEAL_ prefix, e.g. MEAL_BASE_DIR=/srv/meals or MEAL_DAILY_CAP=60.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for emitted log records"
    )

    # HTTP server
    host: str = Field(
        default="127.0.0.1",
        description="Interface the API server binds to"
    )
    port: int = Field(
        default=4000,
        ge=1,
        le=65535,
        description="Port the API server listens on"
    )

    # Storage layout
    base_dir: Path = Field(
        default=Path("."),
        description="Root directory for data documents and receipts"
    )
    data_dir: str = Field(
        default="data",
        description="Directory (relative to base_dir) holding the JSON documents"
    )
    receipts_dir: str = Field(
        default="receipts",
        description="Directory (relative to base_dir) holding receipt images"
    )

    # Claim rules
    currency_label: str = Field(
        default="RM",
        description="Currency label used in filenames and the spreadsheet"
    )
    daily_cap: Decimal = Field(
        default=Decimal("50.00"),
        gt=0,
        description="Maximum claimable amount per calendar day"
    )
    transaction_cap: Decimal = Field(
        default=Decimal("50.00"),
        gt=0,
        description="Maximum amount stored for a single expense"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp,gif",
        description="Comma-separated list of supported receipt image formats"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept level names in any case."""
        return v.strip().upper()

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def expenses_file(self) -> Path:
        return self.base_dir / self.data_dir / "expenses.json"

    @property
    def holidays_file(self) -> Path:
        return self.base_dir / self.data_dir / "holidays.json"

    @property
    def receipts_path(self) -> Path:
        return self.base_dir / self.receipts_dir


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()
