"""Configuration for schema-delta.

Settings are read from the environment whenever a ``SchemaDeltaConfig`` is
constructed. Keyword arguments win over the environment.

Environment variables:
  SCHEMA_DELTA_LOG_LEVEL         loguru level used by setup_logging (default INFO)
  SCHEMA_DELTA_ENRICH_DEFAULTS   append data default operations (default true)
  SCHEMA_DELTA_ID_PREFIX         prefix for node ids minted by the parser/factory
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class SchemaDeltaConfig(BaseSettings):
    """Runtime settings for the diff/patch pipeline."""

    log_level: LogLevel = Field(default="INFO", description="Log level for setup_logging")
    enrich_defaults: bool = Field(
        default=True,
        description="Append data default operations for added fields",
    )
    id_prefix: str = Field(default="", description="Prefix for minted node ids")

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_DELTA_",
        extra="ignore",
        frozen=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value
