# Application settings loaded from the environment and the .env file
import os

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False  # Plain text for console by default
    # Redaction
    redact_keys: List[str] = [
        "authorization", "access_token", "public_token", "request_token", "api_secret",
        "api-secret", "checksum", "password", "secret", "token",
    ]

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Kite Gateway"
    version: str = "1.0.0"

    # Broker credentials. ACCESS_TOKEN is optional and probed before use.
    api_key: str = ""
    api_secret: str = ""
    access_token: Optional[str] = None

    base_url: str = "https://api.kite.trade"
    login_url: str = "https://kite.zerodha.com/connect/login"

    # Milliseconds, matching the REQUEST_TIMEOUT key written to .env
    request_timeout: int = Field(default=30000, gt=0)
    # Seconds; the token probe is kept short so a dead token fails fast
    validation_timeout: float = Field(default=10.0, gt=0)

    # Read at startup and rewritten when a fresh access token is minted
    env_file: str = ".env"

    logging: LoggingSettings = LoggingSettings()

    @field_validator("base_url", "login_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("api_key", "api_secret")
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        return v.strip()

    @field_validator("access_token")
    @classmethod
    def strip_access_token(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout / 1000.0

    @classmethod
    def load(cls, **overrides) -> "Settings":
        """Read settings from the dotenv file named by ENV_FILE.

        The same file receives a freshly minted ACCESS_TOKEN, so the next
        start picks it up.
        """
        env_file = os.environ.get("ENV_FILE") or ".env"
        overrides.setdefault("env_file", env_file)
        return cls(_env_file=overrides["env_file"], **overrides)


# No global settings instance - construct Settings.load() at the entry point
