"""
Environment-backed settings for the connection layer.

Values come from the process environment (or a local ``.env`` file); empty
variables fall back to the defaults, except ``DB_PERSISTENT_CONNECTIONS``
where a set-but-empty value disables persistence. Settings are read fresh
on every call to ``load_settings()`` so a manager re-initialising after the
environment changed sees the new values.
"""

from typing import Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbconn.schemas import DatabaseConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    DB_DRIVER: str = "mysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "gemvc_db"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_CHARSET: str = "utf8mb4"
    DB_COLLATION: str = "utf8mb4_unicode_ci"
    # "1", "true" or "yes" (exact match) enables persistent connections
    DB_PERSISTENT_CONNECTIONS: str = "1"
    DB_CONNECTION_TIMEOUT: int = 5

    # "dev" turns on connection lifecycle logging
    APP_ENV: str = ""

    @field_validator(
        "DB_DRIVER",
        "DB_HOST",
        "DB_PORT",
        "DB_NAME",
        "DB_USER",
        "DB_PASSWORD",
        "DB_CHARSET",
        "DB_COLLATION",
        "DB_CONNECTION_TIMEOUT",
        "APP_ENV",
        mode="before",
    )
    @classmethod
    def _empty_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v == "":
            return cls.model_fields[info.field_name].default
        return v

    @property
    def is_dev(self) -> bool:
        return self.APP_ENV == "dev"

    def to_database_config(self) -> DatabaseConfig:
        """Map DB_* variables onto a validated DatabaseConfig."""
        return DatabaseConfig(
            driver=self.DB_DRIVER,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            charset=self.DB_CHARSET,
            collation=self.DB_COLLATION,
            timeout=self.DB_CONNECTION_TIMEOUT,
            persistent=self.DB_PERSISTENT_CONNECTIONS,
        )


def load_settings() -> Settings:
    return Settings()
