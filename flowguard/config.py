"""Engine configuration via environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Validation settings loaded from FLOWGUARD_* environment variables.

    Threshold defaults are tuned heuristics; override them per project rather
    than reading meaning into the exact cutoffs.
    """

    # Structure
    MIN_NODE_COUNT: int = 5
    # GET webhooks whose path contains one of these are warned about
    SENSITIVE_WEBHOOK_KEYWORDS: list[str] = ["offer", "payment", "password", "token", "account"]

    # Performance (all comparisons are strictly greater-than)
    NODE_COUNT_WARNING: int = 50
    NODE_COUNT_ERROR: int = 100
    SIZE_SOFT_LIMIT: int = 50_000
    SIZE_HARD_LIMIT: int = 100_000
    CONNECTION_LIMIT: int = 100
    MEMORY_MULTIPLIER: int = 10
    MEMORY_LIMIT_BYTES: int = 10 * 1024 * 1024

    # Documentation
    README_MIN_LINES: int = 20

    # Companion scripts, relative to the project root
    COMPANION_SCRIPTS: list[str] = ["test-requests.sh"]
    SCRIPT_CHECK_TIMEOUT: float = 10.0

    # Defaults to the workflow file's directory
    PROJECT_ROOT: Optional[str] = None

    # Scheduling
    MAX_WORKERS: int = 4
    PARALLEL_THRESHOLD: int = 3
    RUN_TIMEOUT_SECONDS: Optional[float] = None

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "warning"

    model_config = {
        "env_prefix": "FLOWGUARD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
