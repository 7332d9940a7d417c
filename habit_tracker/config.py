"""Settings read from the environment (and a local ``.env`` file)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class Settings:
    db_path: str = "habits.db"
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings(
        db_path=os.getenv("HABIT_DB_PATH", "habits.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
