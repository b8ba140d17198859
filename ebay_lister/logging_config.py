import logging
from typing import Optional

from .config import Config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once, using LOG_LEVEL unless a level is given"""
    level_name = (level or Config.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
