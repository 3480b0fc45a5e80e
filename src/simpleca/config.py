"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings so the CLI defaults (key profile, validity offsets,
log level) can be overridden without touching command lines:

    SIMPLECA_KEY__SIZE=2048
    SIMPLECA_VALIDITY__AFTER_DAYS=825
    SIMPLECA_LOG_LEVEL=DEBUG

Only AppSettings is a BaseSettings instance. Sub-settings are plain BaseModel
classes populated through env_nested_delimiter="__".
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"

MAX_DAYS = 2**32 - 1


class KeySettings(BaseModel):
    """
    RSA key generation profile.

    Only RSA-2048 with the F4 exponent is supported; anything else is
    rejected at startup rather than producing keys the issuer cannot use.
    """

    size: int = Field(default=2048, description="RSA modulus size in bits")
    public_exponent: int = Field(default=65537, description="RSA public exponent")

    @field_validator("size")
    @classmethod
    def validate_size(cls, value: int) -> int:
        if value != 2048:
            raise ValueError(f"Only 2048-bit RSA keys are supported, got {value}")
        return value

    @field_validator("public_exponent")
    @classmethod
    def validate_exponent(cls, value: int) -> int:
        if value != 65537:
            raise ValueError(f"Only public exponent 65537 is supported, got {value}")
        return value


class ValiditySettings(BaseModel):
    """Default day offsets for --before / --after (not-before / not-after = now + N days)."""

    before_days: int = Field(default=0, ge=0, le=MAX_DAYS)
    after_days: int = Field(default=3650, ge=0, le=MAX_DAYS)


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables (SIMPLECA_ prefix)
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPLECA_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    key: KeySettings = Field(default_factory=KeySettings)
    validity: ValiditySettings = Field(default_factory=ValiditySettings)
    log_level: str = Field(default="INFO")
