"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Host API Configuration Models
# =====================================================================


class HostApiConfig(BaseModel):
    """Host application REST API configuration (used by the HTTP collaborator)."""

    url: Optional[str] = Field(
        default=None,
        alias="WORKSPACE_PILOT_HOST_API_URL",
        description="Base URL of the host application API (e.g. http://localhost:5000)",
    )
    token: Optional[str] = Field(
        default=None,
        alias="WORKSPACE_PILOT_HOST_API_TOKEN",
        description="Bearer token sent to the host application API (optional)",
    )
    timeout: float = Field(
        default=30.0,
        alias="WORKSPACE_PILOT_HOST_API_TIMEOUT",
        description="HTTP timeout in seconds for host API calls",
    )

    model_config = {"populate_by_name": True}


class ExecutorConfig(BaseModel):
    """Batch executor configuration."""

    action_timeout: Optional[float] = Field(
        default=None,
        alias="WORKSPACE_PILOT_ACTION_TIMEOUT",
        description="Per-action timeout in seconds (unset means no timeout)",
    )
    strict_substring: bool = Field(
        default=True,
        alias="WORKSPACE_PILOT_STRICT_SUBSTRING",
        description="Fail an edit whose old content is not found in the current file",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="WORKSPACE_PILOT_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log format preset (simple, detailed, json)",
        alias="WORKSPACE_PILOT_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="WORKSPACE_PILOT_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write DEBUG logs to <log_file_dir>/workspace_pilot.log",
        alias="WORKSPACE_PILOT_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Workspace Configuration
    # =====================================================================
    workspace_root: str = Field(
        default=".",
        description="Root directory the local collaborator is scoped to",
        alias="WORKSPACE_PILOT_ROOT",
    )
    shell_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for shell commands run by the local collaborator",
        alias="WORKSPACE_PILOT_SHELL_TIMEOUT",
    )

    # =====================================================================
    # Executor Configuration
    # =====================================================================
    action_timeout: Optional[float] = Field(
        default=None,
        description="Per-action timeout in seconds (unset means no timeout)",
        alias="WORKSPACE_PILOT_ACTION_TIMEOUT",
    )
    strict_substring: bool = Field(
        default=True,
        description="Fail an edit whose old content is not found in the current file",
        alias="WORKSPACE_PILOT_STRICT_SUBSTRING",
    )

    # =====================================================================
    # Host API Configuration
    # =====================================================================
    host_api_url: Optional[str] = Field(
        default=None,
        description="Base URL of the host application API",
        alias="WORKSPACE_PILOT_HOST_API_URL",
    )
    host_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the host application API",
        alias="WORKSPACE_PILOT_HOST_API_TOKEN",
    )
    host_api_timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for host API calls",
        alias="WORKSPACE_PILOT_HOST_API_TIMEOUT",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def host_api(self) -> HostApiConfig:
        """Get host API configuration from environment variables."""
        return HostApiConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def executor(self) -> ExecutorConfig:
        """Get batch executor configuration from environment variables."""
        return ExecutorConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
