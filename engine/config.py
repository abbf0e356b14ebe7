# config.py – settings loaded once from the environment

from typing import Optional, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immutable runtime configuration, built once at startup."""

    # empty variables fall back to the defaults below
    model_config = SettingsConfigDict(frozen=True, env_ignore_empty=True, extra="ignore")

    quiz_secret: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    # total time a flow may run, from acceptance
    max_flow_ms: int = 3 * 60 * 1000
    # don't start a flow with less than this left
    min_start_ms: int = 5000
    page_timeout_ms: int = 30_000
    submit_timeout_s: float = 20.0
    max_payload_bytes: int = 1 * 1024 * 1024
    headless: bool = True
    browser_args: Tuple[str, ...] = ("--no-sandbox",)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @property
    def max_flow_seconds(self) -> float:
        return self.max_flow_ms / 1000

    @property
    def min_start_seconds(self) -> float:
        return self.min_start_ms / 1000

    @property
    def submit_timeout_seconds(self) -> float:
        return self.submit_timeout_s


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Read the process environment, then `env_file` for anything unset."""
    return Settings(_env_file=env_file)
