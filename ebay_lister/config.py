"""Environment-driven settings (reads .env on import)"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    # Check multiple env var names, first one set wins
    GEMINI_API_KEY = (
        os.getenv("GEMINI_API_KEY") or
        os.getenv("GOOGLE_AI_API_KEY") or
        os.getenv("API_KEY")
    )
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TIMEOUT = _float_env("GEMINI_TIMEOUT", 120.0)
    GEMINI_MAX_RETRIES = _int_env("GEMINI_MAX_RETRIES", 0)

    LISTING_HISTORY_PATH = os.getenv("LISTING_HISTORY_PATH", "./data/listing_history.json")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    MAX_UPLOAD_MB = _int_env("MAX_UPLOAD_MB", 50)
