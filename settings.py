"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Dict, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    SettingsConfigDict,
)

from errors import MissingConnectionStringError

DEVELOPMENT = "Development"


class Settings(BaseSettings):
    """Settings built once at startup and passed to every registration step.

    Priority: constructor arguments, environment variables, ``.env``,
    ``appsettings.json``. Connection strings may be given as
    ``CONNECTIONSTRINGS__DEFAULTCONNECTION=...``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        json_file="appsettings.json",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Database
    connection_strings: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("connection_strings", "ConnectionStrings"),
    )
    database_auto_create: bool = Field(default=True)

    # Hosting
    environment: str = Field(
        default="Production",
        validation_alias=AliasChoices("environment", "APP_ENVIRONMENT"),
    )
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=80, ge=1, le=65535)
    forwarded_allow_ips: str = Field(default="127.0.0.1")

    # Single-page application shell
    web_root: str = Field(default="wwwroot")
    default_document: str = Field(default="index.html")
    spa_fallback_file: str = Field(default="index.html")

    # Tokens
    secret_key: str = Field(default="your-secret-key-here-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30, gt=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def is_development(self) -> bool:
        return self.environment.strip().lower() == DEVELOPMENT.lower()

    def get_connection_string(self, name: str) -> str:
        """Look up a connection string by name, ignoring key case."""
        wanted = name.lower()
        for key, value in self.connection_strings.items():
            if key.lower() == wanted and value and value.strip():
                return value.strip()
        raise MissingConnectionStringError(name)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
