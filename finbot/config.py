"""Configuration management"""
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict


STORAGE_BACKENDS = ("json", "sql", "memory")


class Settings(BaseSettings):
    """Application settings"""

    # Persistence
    storage_backend: str = "json"
    data_dir: Path = Path("./data")
    database_url: str = "sqlite:///./finbot.db"

    # Receipt images
    receipts_dir: Path = Path("./comprovantes")

    # Calendar-aligned periods (week, month, year) are computed in this zone
    timezone: str = "America/Sao_Paulo"

    # Keep-alive HTTP server
    http_host: str = "0.0.0.0"
    http_port: int = 3000

    # When true, a failed collection write adds a visible warning to the reply
    warn_on_save_failure: bool = False

    insight_min_entries: int = 5
    budget_warning_percent: int = 90

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    def validate_settings(self) -> None:
        """Validate settings that cannot be checked per field. Call during startup."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {self.storage_backend!r}"
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown TIMEZONE {self.timezone!r}") from e
        if not 0 < self.budget_warning_percent < 100:
            raise ValueError("BUDGET_WARNING_PERCENT must be between 1 and 99")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


settings = Settings()
