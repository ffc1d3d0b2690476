"""Configuration management for duo-ledger."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DUO_LEDGER_",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger settings
    currency: str = "ARS"
    last_entries_default: int = 5

    # Access control: comma-separated member ids, empty allows everyone
    allowed_user_ids: str = ""

    # Chat sessions
    session_ttl_seconds: int = 300

    # Database path
    database_path: Path = Path.home() / ".duo_ledger" / "duo_ledger.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def allowed_user_id_list(self) -> list[str]:
        """Parsed whitelist of member ids."""
        return [
            user_id.strip()
            for user_id in self.allowed_user_ids.split(",")
            if user_id.strip()
        ]


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check your environment and .env file "
            f"(variables use the DUO_LEDGER_ prefix).\n"
            f"Error: {e}"
        ) from e
