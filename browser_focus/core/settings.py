"""
Centralized settings (environment variables / .env).
"""
# @file purpose: Centralized settings using Pydantic Settings.

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

BrowserName = Literal["chromium", "firefox", "webkit"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BF_", env_file=".env", extra="ignore")

    browser: BrowserName = "chromium"
    headless: bool = True
    slow_mo_ms: int = 0
    default_timeout_ms: int = 30_000
    script_timeout_ms: int = 30_000
    window_timeout_ms: int = 10_000
    log_level: str = "INFO"


settings = Settings()
