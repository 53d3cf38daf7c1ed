"""
Pydantic schemas for the connection layer.

DatabaseConfig is the resolved, validated connection configuration the
manager works from. It is built either from the environment
(``dbconn.core.config.Settings``) or from a programmatic override.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dbconn.models import DriverEnum

# Only these exact strings enable persistent connections.
PERSISTENT_TRUE_TOKENS = ("1", "true", "yes")

# PyMySQL rejects connect timeouts above one year.
MAX_CONNECT_TIMEOUT = 31_536_000


def parse_persistent_flag(value: Any) -> bool:
    """Parse a persistent-connection flag; strings must match a token exactly (case-sensitive)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in PERSISTENT_TRUE_TOKENS
    if isinstance(value, int):
        return value == 1
    return False


class DatabaseConfig(BaseModel):
    """Connection configuration with documented defaults; immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    driver: DriverEnum = DriverEnum.MYSQL
    host: str = Field(default="localhost", min_length=1)
    port: int = Field(default=3306, ge=1, le=65535)
    database: str = Field(default="gemvc_db", min_length=1)
    username: str = "root"
    password: str = ""
    charset: str = Field(default="utf8mb4", min_length=1)
    collation: str = Field(default="utf8mb4_unicode_ci", min_length=1)
    timeout: int = Field(
        default=5, ge=0, le=MAX_CONNECT_TIMEOUT, description="Connect timeout in seconds."
    )
    persistent: bool = True

    @field_validator("persistent", mode="before")
    @classmethod
    def _parse_persistent(cls, v: Any) -> bool:
        return parse_persistent_flag(v)

    def summary(self) -> dict[str, Any]:
        """Non-secret subset used in stats and log lines."""
        return {
            "driver": self.driver.value,
            "host": self.host,
            "database": self.database,
            "timeout": self.timeout,
        }
