import logging
from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    PROJECT_NAME: str = "Settlr Ledger Engine"
    PROJECT_VERSION: str = "0.1.0"

    # Money
    SETTLEMENT_EPSILON: Decimal = Decimal("0.01")
    CURRENCY_QUANTUM: Decimal = Decimal("0.01")

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a basic handler for hosts that do not configure logging themselves."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
