"""
Onboarding - Configuration and settings.

Values come from the environment or a local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class OnboardingSettings(BaseSettings):
    """Settings for the onboarding orchestrator and its remote service client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote onboarding service
    onboarding_api_url: str = "http://localhost:3000"
    onboarding_api_prefix: str = "/api/v1/onboarding"
    # AI generation calls can take minutes on the service side
    onboarding_request_timeout: float = 180.0

    # Bearer credential (normally handed over by the login flow)
    onboarding_auth_token: str | None = None

    # Durable fragment (the business domain) survives restarts here
    onboarding_state_file: Path = Path(".onboarding_state.json")

    # Action log
    # ONBOARDING_LOG_ACTIONS=1 - write one JSONL file per session
    onboarding_log_actions: bool = False
    onboarding_log_dir: Path = Path("session_logs")

    # Application
    onboarding_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def is_development(self) -> bool:
        return self.onboarding_env == "development"

    @property
    def is_production(self) -> bool:
        return self.onboarding_env == "production"


@lru_cache
def get_settings() -> OnboardingSettings:
    """Get cached settings instance."""
    return OnboardingSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: OnboardingSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
