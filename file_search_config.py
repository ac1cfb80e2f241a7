"""Configuration and logging setup for the file search MCP servers."""

import logging
import sys
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ServerConfig(BaseSettings):
    """Server configuration, read from the environment and an optional .env file."""

    server_name: str = Field(default="FileMCP", validation_alias="MCP_SERVER_NAME")
    server_version: str = Field(default="1.0.0", validation_alias="MCP_SERVER_VERSION")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, ge=1, le=65535, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    max_file_bytes: Optional[int] = Field(
        default=None,
        gt=0,
        validation_alias="FILE_SEARCH_MAX_BYTES",
        description="Reject files larger than this many bytes",
    )
    read_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias="FILE_SEARCH_READ_TIMEOUT",
        description="Seconds before a file read is abandoned",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level


def configure_logging(level: str = "INFO") -> None:
    # stdout belongs to the stdio transport
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
