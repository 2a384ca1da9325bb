"""
MODULE OVERVIEW:
Application-wide configuration using Pydantic Settings.

WHAT IS HAPPENING HERE:
Every timing the session handler depends on lives here instead of being hardcoded
deep inside the heartbeat loop. The defaults reproduce the fixed contract clients
expect (a status frame every 2 seconds, connection closed after 60 seconds), but an
env var or a `.env` file can shorten them for demos and load tests.
"""
import sys

from loguru import logger
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # WebSocket session
    WS_PATH: str = "/ws"
    HEARTBEAT_INTERVAL_S: float = 2.0
    HEARTBEAT_TIMEOUT_S: float = 60.0

    class Config:
        env_file = ".env"
        # Tolerate missing env vars to allow easy out-of-the-box execution
        env_file_encoding = 'utf-8'
        extra = 'ignore'


def configure_logging(level: str | None = None) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or settings.LOG_LEVEL).upper())


settings = Settings()
