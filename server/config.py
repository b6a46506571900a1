# server/config.py

import os
import sys
import logging
from dataclasses import dataclass
from dotenv import load_dotenv


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret_key: str
    port: int
    log_level: str = "INFO"


def setup_logging(level: str = "INFO"):
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


def _fatal(message: str):
    logger.critical(message)
    sys.exit(1)


def load_settings() -> Settings:
    """
    Reads configuration from the environment (and a local .env file).
    Any missing required value terminates the process.
    """
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        _fatal("DATABASE_URL is not defined")

    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        _fatal("JWT_SECRET_KEY is not defined")

    raw_port = os.getenv("PORT")
    if not raw_port:
        _fatal("PORT is not defined")
    try:
        port = int(raw_port)
    except ValueError:
        _fatal(f"PORT must be an integer, got {raw_port!r}")

    return Settings(
        database_url=database_url,
        jwt_secret_key=secret,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
