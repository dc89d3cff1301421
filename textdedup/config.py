"""Configuration management using Pydantic BaseSettings.

This module provides centralized configuration management with validation,
type safety, and sensible defaults for textdedup sessions.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Main configuration class for a deduplication session."""

    # Engine Configuration
    engine_backend: str = Field("local", description="Engine backend: local or http")
    engine_url: str = Field("http://127.0.0.1:8765", description="Base URL of an out-of-process engine")
    engine_timeout_seconds: float = Field(30.0, ge=1.0, le=600.0, description="Per-request engine timeout")

    # Settle Configuration (engines that warm up asynchronously after a strategy change)
    settle_timeout_seconds: float = Field(30.0, gt=0.0, le=600.0, description="Max wait for an engine readiness signal")
    settle_poll_interval_seconds: float = Field(0.25, gt=0.0, le=10.0, description="Delay between readiness polls")
    settle_max_attempts: int = Field(40, ge=1, le=10000, description="Readiness polls before giving up")

    # Session Configuration
    submission_mode: str = Field("accumulate", description="accumulate: keep corpus across submissions; reset: clear before each")
    default_preset: str = Field("Exact Match", description="Preset used when the engine has no saved strategy")

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "TEXTDEDUP_",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('engine_backend')
    @classmethod
    def validate_engine_backend(cls, v):
        if v.lower() not in ['local', 'http']:
            raise ValueError('engine_backend must be "local" or "http"')
        return v.lower()

    @field_validator('submission_mode')
    @classmethod
    def validate_submission_mode(cls, v):
        if v.lower() not in ['accumulate', 'reset']:
            raise ValueError('submission_mode must be "accumulate" or "reset"')
        return v.lower()

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.engine_backend == "http" and not self.engine_url.startswith(("http://", "https://")):
            issues.append("TEXTDEDUP_ENGINE_URL must be an http:// or https:// URL")

        # Imported lazily so that loading settings never builds the catalog
        from textdedup.strategy.presets import get_catalog

        if self.default_preset not in get_catalog().names():
            issues.append(f"TEXTDEDUP_DEFAULT_PRESET {self.default_preset!r} is not a known preset")

        poll_budget = self.settle_poll_interval_seconds * self.settle_max_attempts
        if poll_budget > self.settle_timeout_seconds * 10:
            issues.append("Readiness polling budget is far longer than TEXTDEDUP_SETTLE_TIMEOUT_SECONDS")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from textdedup.utils.logger import log_info

        log_info("Configuration loaded",
                 engine_backend=self.engine_backend,
                 engine_url=self.engine_url,
                 engine_timeout_seconds=self.engine_timeout_seconds,
                 settle_timeout_seconds=self.settle_timeout_seconds,
                 settle_poll_interval_seconds=self.settle_poll_interval_seconds,
                 settle_max_attempts=self.settle_max_attempts,
                 submission_mode=self.submission_mode,
                 default_preset=self.default_preset,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
