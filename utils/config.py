"""
Environment-driven settings.
Values are read when requested so importing a module never needs credentials.
"""

import os
from typing import Dict, Optional

from dotenv import load_dotenv

from utils.exceptions import ConfigurationError

load_dotenv()

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
CHAT_FUNCTION_PATH = "/functions/v1/study-assistant"


def require_env(*names: str) -> str:
    """Return the first non-empty variable among names, else raise ConfigurationError."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    raise ConfigurationError(
        f"{' or '.join(names)} must be set",
        context={"missing": list(names)},
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def get_storage_bucket() -> str:
    return os.getenv("STORAGE_BUCKET", "student-files")


def get_content_budgets() -> Dict[str, int]:
    """Maximum characters of extracted content embedded per artifact kind."""
    return {
        "flashcards": _int_env("FLASHCARD_CONTENT_BUDGET", 8000),
        "quiz": _int_env("QUIZ_CONTENT_BUDGET", 8000),
        "summary": _int_env("SUMMARY_CONTENT_BUDGET", 50000),
    }


def get_generation_timeout() -> float:
    return _float_env("GENERATION_TIMEOUT_SECONDS", 60.0)


def get_request_status_limit() -> int:
    """Most request statuses kept in memory; the oldest finished ones are evicted first."""
    limit = _int_env("REQUEST_STATUS_LIMIT", 1000)
    if limit < 1:
        raise ConfigurationError(f"REQUEST_STATUS_LIMIT must be positive, got {limit}")
    return limit


def get_mastery_settings() -> Dict[str, int]:
    settings = {
        "min": _int_env("MASTERY_MIN", 0),
        "max": _int_env("MASTERY_MAX", 5),
        "step": _int_env("MASTERY_STEP", 1),
    }
    if settings["min"] > settings["max"]:
        raise ConfigurationError("MASTERY_MIN must not exceed MASTERY_MAX", context=settings)
    return settings


def get_chat_url(override: Optional[str] = None) -> str:
    """Streaming chat endpoint; defaults to the study-assistant edge function."""
    if override:
        return override
    explicit = os.getenv("CHAT_COMPLETIONS_URL")
    if explicit:
        return explicit
    return require_env("SUPABASE_URL").rstrip("/") + CHAT_FUNCTION_PATH
