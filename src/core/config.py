"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMATS = ("json", "console")


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Engine
    trace_line_resolution: bool = False
    """Emit a debug event for every resolved line (noisy; audit sessions only)."""

    scenario_concurrency: int = 4
    """Max what-if returns computed at once by compute_returns_concurrently."""

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, value: object) -> str | None:
        """Accept json/console in any case; blank means environment default."""
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text:
            return None
        if text not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got {value!r}")
        return text

    @field_validator("scenario_concurrency")
    @classmethod
    def validate_scenario_concurrency(cls, value: int) -> int:
        """Concurrency must allow at least one return in flight."""
        if value < 1:
            raise ValueError(f"SCENARIO_CONCURRENCY must be >= 1, got {value}")
        return value


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Allowed values for LOG_FORMAT are: json, console (or unset).",
        "SCENARIO_CONCURRENCY must be a positive integer.",
    ]

    raise RuntimeError(
        "Failed to initialize engine settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
