import argparse
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()  # Load variables from .env file

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _port() -> int:
    value = os.getenv("ST_PORT")
    if not value:
        return 8080
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"ST_PORT must be an integer, got {value!r}") from None


def _log_level() -> str:
    value = os.getenv("ST_LOG_LEVEL", "INFO").upper()
    if value not in LOG_LEVELS:
        raise ValueError(f"ST_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return value


def _token_max_age() -> Optional[float]:
    value = os.getenv("ST_TOKEN_MAX_AGE")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"ST_TOKEN_MAX_AGE must be a number of seconds, got {value!r}") from None


# --- Defaults (overridable through the environment) ---
DEFAULT_PORT = _port()
DEFAULT_DB = os.getenv("ST_DB", "st.sqlite3")
HOST = os.getenv("ST_HOST", "0.0.0.0")
LOG_LEVEL = _log_level()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
TOKEN_MAX_AGE = _token_max_age()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="st", description="Minimal URL shortener.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                        help="port on which to start the server")
    parser.add_argument("--db", default=DEFAULT_DB,
                        help="file in which to store the SQLite link db")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
