"""Input/output schemas for collaborator operations.

Every output carries ``success`` and ``error`` so the batch executor can tell
success from failure without knowing which transport produced the result.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..schemas.domain import WorkflowMode


class FileReadInput(BaseModel):
    """Input schema for file read operation."""

    file_path: str = Field(..., description="Workspace-relative path of the file to read")
    encoding: str = Field(default="utf-8", description="File encoding (default: utf-8)")


class FileReadOutput(BaseModel):
    """Output schema for file read operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    content: Optional[str] = Field(None, description="File content if successful")
    error: Optional[str] = Field(None, description="Error message if failed")
    file_path: str = Field(..., description="Path of the file read")
    size_bytes: Optional[int] = Field(None, description="Size of file in bytes")
    not_found: bool = Field(default=False, description="Set when the failure is that the file does not exist")


class FileWriteInput(BaseModel):
    """Input schema for file write operation."""

    file_path: str = Field(..., description="Workspace-relative path of the file to write")
    content: str = Field(..., description="Content to write to the file")
    encoding: str = Field(default="utf-8", description="File encoding (default: utf-8)")
    create_dirs: bool = Field(
        default=True,
        description="Create parent directories if they don't exist",
    )


class FileWriteOutput(BaseModel):
    """Output schema for file write operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    file_path: str = Field(..., description="Path of the file written")
    bytes_written: Optional[int] = Field(None, description="Number of bytes written")
    error: Optional[str] = Field(None, description="Error message if failed")


class FileDeleteInput(BaseModel):
    """Input schema for file delete operation."""

    file_path: str = Field(..., description="Workspace-relative path of the file or directory to delete")


class FileDeleteOutput(BaseModel):
    """Output schema for file delete operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    file_path: str = Field(..., description="Path of the deleted file")
    error: Optional[str] = Field(None, description="Error message if failed")


class CommandRunInput(BaseModel):
    """Input schema for command execution."""

    command: str = Field(..., description="Command to execute (shell command or script)")
    cwd: Optional[str] = Field(None, description="Workspace-relative working directory")
    timeout: Optional[float] = Field(
        default=30.0,
        description="Timeout in seconds (default: 30)",
    )


class CommandRunOutput(BaseModel):
    """Output schema for command execution."""

    success: bool = Field(..., description="Whether the command executed successfully")
    exit_code: Optional[int] = Field(None, description="Command exit code")
    stdout: Optional[str] = Field(None, description="Standard output")
    stderr: Optional[str] = Field(None, description="Standard error")
    error: Optional[str] = Field(None, description="Error message if execution failed")
    command: str = Field(..., description="Command that was executed")
    duration_seconds: Optional[float] = Field(None, description="Execution duration in seconds")


class PackageInstallInput(BaseModel):
    """Input schema for package installation."""

    language: str = Field(..., description="Language ecosystem, e.g. nodejs or python")
    packages: List[str] = Field(..., min_length=1, description="Packages to install")


class PackageInstallOutput(BaseModel):
    """Output schema for package installation."""

    success: bool = Field(..., description="Whether the installation succeeded")
    language: str = Field(..., description="Language ecosystem")
    packages: List[str] = Field(default_factory=list, description="Packages requested")
    manager: Optional[str] = Field(None, description="Package manager used")
    command: Optional[str] = Field(None, description="Install command that was run")
    output: Optional[str] = Field(None, description="Installer output")
    error: Optional[str] = Field(None, description="Error message if failed")


class WorkflowConfigureInput(BaseModel):
    """Input schema for workflow configuration."""

    workflow_name: str = Field(..., description="Workflow name")
    commands: List[str] = Field(default_factory=list, description="Commands run by the workflow")
    mode: WorkflowMode = Field(default=WorkflowMode.sequential, description="Run commands in sequence or in parallel")
    set_run_button: bool = Field(default=False, description="Bind the workflow to the run button")


class DeploymentConfigureInput(BaseModel):
    """Input schema for deployment configuration."""

    build_command: Optional[str] = Field(None, description="Optional build command")
    run_command: str = Field(..., description="Command that starts the deployed app")


class ConfigurationOutput(BaseModel):
    """Output schema for workflow and deployment configuration."""

    success: bool = Field(..., description="Whether the configuration was accepted")
    config: Dict[str, object] = Field(default_factory=dict, description="Configuration as stored by the host")
    error: Optional[str] = Field(None, description="Error message if failed")
