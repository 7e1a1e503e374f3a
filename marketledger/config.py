"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and MARKETLEDGER_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketConfig(BaseSettings):
    """Marketplace configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export MARKETLEDGER_MARKETPLACE_ID=market-eu-1
        export MARKETLEDGER_LOG_LEVEL=DEBUG
        export MARKETLEDGER_JOURNAL_PATH=/data/journal.db
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MARKETLEDGER_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Identity the asset authority must approve as transfer agent
    marketplace_id: str = Field(default="marketledger", min_length=1)

    # Event journal
    journal_enabled: bool = True
    journal_path: Path = Path(".marketledger/journal.db")

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from marketledger.config import config`
config = MarketConfig()
