# medintake/core/config.py
import logging
from typing import Optional, Literal
from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings, read from the environment or a .env file"""
    APP_NAME: str = "MedIntake"
    DEBUG: bool = False
    DEFAULT_LOCALE: str = "en"

    # Simulated backend latency between submit and result
    PROCESSING_DELAY_SECONDS: float = Field(default=2.0, ge=0)

    # Dispatch assignment
    ETA_MIN_MINUTES: int = Field(default=5, ge=0)
    ETA_MAX_MINUTES: int = Field(default=20, ge=0)
    ETA_TICK_SECONDS: float = Field(default=60.0, gt=0)
    POSITION_JITTER_DEGREES: float = Field(default=0.01, ge=0)

    # Triage scoring: "random" keeps the 80-100 placeholder, "keyword" is deterministic
    TRIAGE_CONFIDENCE_MODE: Literal["random", "keyword"] = "random"

    # Seed for the shared random source; None means unseeded
    RANDOM_SEED: Optional[int] = None

    NOTIFICATION_HISTORY_SIZE: int = Field(default=100, ge=1)

    # Logging: root level and directory of the rotating medintake.log
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_DIR: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


settings = Settings()


def validate_settings(config: Optional[Settings] = None) -> bool:
    """Check settings that cannot be expressed as single-field constraints"""
    config = config or settings
    problems = []

    if config.ETA_MIN_MINUTES > config.ETA_MAX_MINUTES:
        problems.append(
            f"ETA_MIN_MINUTES ({config.ETA_MIN_MINUTES}) > ETA_MAX_MINUTES ({config.ETA_MAX_MINUTES})"
        )

    if config.DEFAULT_LOCALE not in ("en", "de"):
        problems.append(f"DEFAULT_LOCALE '{config.DEFAULT_LOCALE}' has no catalog")

    if problems:
        logger.warning(f"Invalid settings: {'; '.join(problems)}")
        return False

    return True
