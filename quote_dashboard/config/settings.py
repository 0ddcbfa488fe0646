import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

DEFAULT_FINNHUB_BASE_URL = "https://finnhub.io/api/v1"


class Settings(BaseModel):
    FINNHUB_API_KEY: str = Field(min_length=1)
    FINNHUB_BASE_URL: str = DEFAULT_FINNHUB_BASE_URL
    FINNHUB_TIMEOUT_SEC: float = Field(default=10.0, gt=0)
    QUOTE_FETCH_MAX_WORKERS: int = Field(default=8, ge=1)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "FINNHUB_API_KEY": (os.getenv("FINNHUB_API_KEY") or "").strip() or None,
            "FINNHUB_BASE_URL": os.getenv("FINNHUB_BASE_URL"),
            "FINNHUB_TIMEOUT_SEC": os.getenv("FINNHUB_TIMEOUT_SEC"),
            "QUOTE_FETCH_MAX_WORKERS": os.getenv("QUOTE_FETCH_MAX_WORKERS"),
            "LOG_LEVEL": (os.getenv("LOG_LEVEL") or "").strip().upper() or None,
        }
        # unset optional vars fall back to field defaults
        return cls.model_validate(
            {
                key: value
                for key, value in raw.items()
                if value is not None or key == "FINNHUB_API_KEY"
            }
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def describe_validation_error(exc: ValidationError) -> str:
    """One-line summary naming the offending env vars, never their values."""
    fields = []
    for error in exc.errors():
        name = str(error["loc"][0]) if error.get("loc") else "settings"
        if name not in fields:
            fields.append(name)
    if fields == ["FINNHUB_API_KEY"]:
        return "FINNHUB_API_KEY is not configured"
    return f"Invalid configuration: {', '.join(fields)}"
