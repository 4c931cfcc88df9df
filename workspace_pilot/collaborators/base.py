"""Collaborator protocol.

A collaborator performs the actual side effects of an action: filesystem,
shell, package manager and workspace configuration. The batch executor only
talks to this Protocol, so transports (local process, host HTTP API, test
doubles) are interchangeable.

Every method must signal success or failure through the ``success`` flag of
its output model. Raising is also treated as a failure of that one action.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from .definitions import (
    CommandRunOutput,
    ConfigurationOutput,
    DeploymentConfigureInput,
    FileDeleteOutput,
    FileReadOutput,
    FileWriteOutput,
    PackageInstallOutput,
    WorkflowConfigureInput,
)


@runtime_checkable
class WorkspaceCollaborator(Protocol):
    """Side-effecting operations the batch executor delegates to."""

    async def read_file(self, path: str) -> FileReadOutput: ...

    async def write_file(self, path: str, content: str) -> FileWriteOutput: ...

    async def delete_file(self, path: str) -> FileDeleteOutput: ...

    async def execute_shell(self, command: str, cwd: Optional[str] = None) -> CommandRunOutput: ...

    async def install_packages(self, language: str, packages: List[str]) -> PackageInstallOutput: ...

    async def configure_workflow(self, config: WorkflowConfigureInput) -> ConfigurationOutput: ...

    async def configure_deployment(self, config: DeploymentConfigureInput) -> ConfigurationOutput: ...
