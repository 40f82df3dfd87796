"""Configuration management for basebridge."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Fallback applied when a formula cannot be translated
    # ('static', 'hybrid', 'original' or 'omit')
    formula_strategy: str = os.getenv("FORMULA_STRATEGY", "hybrid")

    # Translation limits
    max_nesting_depth: int = int(os.getenv("MAX_NESTING_DEPTH", "64"))
    max_formula_length: int = int(os.getenv("MAX_FORMULA_LENGTH", "10000"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()


settings = Settings()
