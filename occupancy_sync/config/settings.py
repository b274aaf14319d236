"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class HostawaySettings(BaseSettings):
    """Hostaway API configuration (catalog, reservations, calendar)."""

    base_url: str = "https://api.hostaway.com/v1"
    auth_token: str = ""
    request_timeout: int = 30
    max_retries: int = 3
    retry_backoff_base: float = 2.0

    # Pagination
    listings_page_size: int = 1000
    reservations_page_size: int = 100
    max_pages: int = 50

    # Reservation window around "today"
    reservation_lookback_days: int = 90
    reservation_lookahead_days: int = 90

    # Per-unit calendar fetch pool size
    calendar_concurrency: int = 8

    model_config = SettingsConfigDict(env_prefix="HOSTAWAY_")


class TeableSettings(BaseSettings):
    """Teable (tabular store) configuration."""

    base_url: str = "https://app.teable.io/api"
    bearer_token: str = ""
    units_table_id: str = ""  # Per-unit status rows, keyed by apartment name
    categories_table_id: str = ""  # Per-category rollup rows, keyed by category
    summary_table_id: str = ""  # Hourly portfolio summary rows (optional)
    summary_time_field: str = "Date and Time"  # Field name or id ordering the hour-bucket check
    summary_check_take: int = 5  # Latest summary rows read by the hour-bucket check
    request_timeout: int = 30
    max_retries: int = 3
    retry_backoff_base: float = 2.0
    page_size: int = 100
    max_pages: int = 100

    model_config = SettingsConfigDict(env_prefix="TEABLE_")


class RedisSettings(BaseSettings):
    """Redis configuration for the cleaning override store."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    overrides_key: str = "occupancy:cleaning_overrides"

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class RegionSettings(BaseSettings):
    """Region filter applied to the unit catalog. Empty lists admit every unit."""

    country_codes: list[str] = ["AE"]
    countries: list[str] = ["uae", "united arab emirates", "emirates"]
    cities: list[str] = ["dubai"]
    name_tokens: list[str] = []

    model_config = SettingsConfigDict(env_prefix="REGION_")


class ClassifierSettings(BaseSettings):
    """Category classifier configuration."""

    premium_unit_ids: list[str] = ["288688", "305055", "309909", "323227"]

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_")


class StayFilterSettings(BaseSettings):
    """Test-booking detection word lists."""

    guest_name_tokens: list[str] = [
        "test",
        "testing",
        "new guest",
        "guest",
        "guests",
        "test guest",
    ]
    note_tokens: list[str] = ["test", "testing", "new guest"]

    model_config = SettingsConfigDict(env_prefix="STAY_FILTER_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Local timezone used for "today" and hour buckets
    timezone: str = "Asia/Dubai"

    # Sub-settings
    hostaway: HostawaySettings = HostawaySettings()
    teable: TeableSettings = TeableSettings()
    redis: RedisSettings = RedisSettings()
    region: RegionSettings = RegionSettings()
    classifier: ClassifierSettings = ClassifierSettings()
    stay_filter: StayFilterSettings = StayFilterSettings()
    logging: LoggingSettings = LoggingSettings()

    # Feature flags
    dry_run: bool = False  # Reconcile but skip every store write

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_credentials(self) -> list[str]:
        """Validate required credentials. Returns list of missing var names."""
        missing = []
        if not self.hostaway.auth_token.strip():
            missing.append("HOSTAWAY_AUTH_TOKEN")
        if not self.dry_run:
            if not self.teable.bearer_token.strip():
                missing.append("TEABLE_BEARER_TOKEN")
            if not self.teable.units_table_id.strip():
                missing.append("TEABLE_UNITS_TABLE_ID")
            if not self.teable.categories_table_id.strip():
                missing.append("TEABLE_CATEGORIES_TABLE_ID")
        return missing


# Global settings instance
settings = Settings()
