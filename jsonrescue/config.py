"""
Engine Configuration — Tunables for the recovery engine.

The settings manage:
  - The size guard limit (the one behavioural tunable)
  - Default indentation for the safe serializer
  - Log level / rendering for `setup_logging()`
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_INPUT_LENGTH = 10_000_000


class RecoverySettings(BaseSettings):
    """Engine-wide settings, overridable through JSONRESCUE_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="JSONRESCUE_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Guard ─────────────────────────────────────────────────────────
    max_input_length: int = Field(default=DEFAULT_MAX_INPUT_LENGTH, gt=0)

    # ── Serializer ────────────────────────────────────────────────────
    serializer_indent: int = Field(default=2, ge=0)

    # ── Logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool = False


@lru_cache
def get_settings() -> RecoverySettings:
    """Singleton accessor — parsed once, cached forever."""
    return RecoverySettings()
