"""Environment-driven settings for the router process."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Settings field -> environment variable
ENV_VARS: dict[str, str] = {
    "port": "PORT",
    "log_level": "LOG_LEVEL",
    "mock_mode": "MOCK_MODE",
    "session_timeout_seconds": "SESSION_TIMEOUT_SECONDS",
    "session_sweep_seconds": "SESSION_SWEEP_SECONDS",
    "db_path": "DB_PATH",
    "activity_log_path": "ACTIVITY_LOG_PATH",
    "reply_to_unregistered": "REPLY_TO_UNREGISTERED",
    "phone_number": "PHONE_NUMBER",
    "shop_url": "SHOP_URL",
    "auth_token": "AUTH_TOKEN",
    "green_api_instance_id": "GREEN_API_INSTANCE_ID",
    "green_api_token": "GREEN_API_TOKEN",
}

_SECRET_FIELDS = frozenset({"auth_token", "green_api_token"})


class ConfigError(Exception):
    """Raised when the process configuration is missing or invalid."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int = Field(default=3000, ge=1, le=65535)
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    mock_mode: bool = False
    session_timeout_seconds: int = Field(default=300, ge=1)
    session_sweep_seconds: int = Field(default=60, ge=0)
    db_path: str = Field(default="data/router.db", min_length=1)
    activity_log_path: str | None = None
    reply_to_unregistered: bool = True
    phone_number: str = Field(min_length=1)
    shop_url: str = Field(min_length=1)
    auth_token: str = Field(min_length=1)
    green_api_instance_id: str = Field(min_length=1)
    green_api_token: str = Field(min_length=1)

    @field_validator("mock_mode", "reply_to_unregistered", mode="before")
    @classmethod
    def _parse_flag(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def chat_id(self) -> str:
        """Chat id of the single registered shop owner."""
        return f"{self.phone_number}@c.us"

    def public_dict(self) -> dict[str, object]:
        """Settings without secrets, safe to print or log."""
        return self.model_dump(exclude=set(_SECRET_FIELDS))


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Raises:
        ConfigError: naming the environment variable of the first invalid field.
    """
    source = os.environ if env is None else env
    raw = {
        field: source[var]
        for field, var in ENV_VARS.items()
        if source.get(var) not in (None, "")
    }

    try:
        settings = Settings(**raw)
    except ValidationError as exc:
        errors = exc.errors()
        missing = [
            ENV_VARS.get(str(e["loc"][0]), str(e["loc"][0]))
            for e in errors
            if e["type"] == "missing"
        ]
        for e in errors:
            var = ENV_VARS.get(str(e["loc"][0]), str(e["loc"][0]))
            logger.error("config_validation_failed env_var=%s error=%s", var, e["msg"])
        if missing:
            logger.error("missing_environment_variables missing=%s", ",".join(missing))

        first = errors[0]
        var = ENV_VARS.get(str(first["loc"][0]), str(first["loc"][0]))
        if first["type"] == "missing":
            raise ConfigError(f"{var} is required", var) from exc
        raise ConfigError(f"{var}: {first['msg']}", var) from exc

    logger.info("config_loaded port=%d log_level=%s", settings.port, settings.log_level)
    return settings


def configure_logging(level: str = "info") -> None:
    """Set the process-wide log format and level."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
