import logging
import os
from pathlib import Path

DEFAULT_PORT = 3030


def _parse_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PORT
    if not 0 < port < 65536:
        return DEFAULT_PORT
    return port


def _parse_log_level(value) -> int:
    level = logging.getLevelName(str(value).upper())
    return level if isinstance(level, int) else logging.INFO


class Settings:
    def __init__(self):
        # --- Server ---
        self.LISTEN_PORT: int = _parse_port(os.getenv("LISTEN_PORT"))
        self.LISTEN_HOST: str = os.getenv("LISTEN_HOST", "0.0.0.0")

        # --- Files ---
        # Relative to the working directory unless given as an absolute path
        self.FILES_DIR: Path = Path(os.getenv("FILES_DIR", "files"))

        # --- Logging ---
        self.LOG_LEVEL: int = _parse_log_level(os.getenv("LOG_LEVEL", "INFO"))


settings = Settings()
