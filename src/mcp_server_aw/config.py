"""
ActivityWatch MCP Server Configuration

Handles environment variables and server settings. A `.env` file in the
working directory is loaded first when present.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_ACTIVITYWATCH_URL = "http://localhost:5600/api/0"


class TransportType(str, Enum):
    """MCP transport types."""
    STDIO = "stdio"
    STREAMABLE_HTTP = "streamable_http"


class ServerConfig(BaseModel):
    """MCP Server configuration."""
    name: str = Field(default="activitywatch-mcp", description="Server name")
    version: str = Field(default="0.1.0", description="Server version")
    transport: TransportType = Field(
        default=TransportType.STDIO,
        description="Transport: stdio or streamable_http"
    )
    port: int = Field(default=8000, description="HTTP port if using streamable_http")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")


class ActivityWatchConfig(BaseModel):
    """aw-server connection settings."""
    base_url: str = Field(
        default=DEFAULT_ACTIVITYWATCH_URL,
        description="Base URL of the aw-server REST API"
    )
    timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
        gt=0
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip('/')
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"ActivityWatch URL must start with http:// or https://, got {v!r}")
        return v


@dataclass
class AppConfig:
    """Application configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    activitywatch: ActivityWatchConfig = field(default_factory=ActivityWatchConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Environment variables referenced:
        - ACTIVITYWATCH_URL
        - ACTIVITYWATCH_TIMEOUT
        - AW_MCP_NAME
        - AW_MCP_TRANSPORT
        - AW_MCP_PORT
        - AW_MCP_LOG_LEVEL
        - AW_MCP_LOG_JSON
        """
        load_dotenv(find_dotenv(usecwd=True))

        return cls(
            server=ServerConfig(
                name=os.getenv("AW_MCP_NAME", "activitywatch-mcp"),
                transport=TransportType(os.getenv("AW_MCP_TRANSPORT", "stdio")),
                port=int(os.getenv("AW_MCP_PORT", "8000")),
                log_level=os.getenv("AW_MCP_LOG_LEVEL", "INFO"),
                json_logs=os.getenv("AW_MCP_LOG_JSON", "false").lower() == "true",
            ),
            activitywatch=ActivityWatchConfig(
                base_url=os.getenv("ACTIVITYWATCH_URL", DEFAULT_ACTIVITYWATCH_URL),
                timeout=float(os.getenv("ACTIVITYWATCH_TIMEOUT", "30")),
            ),
        )


# Global config instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
