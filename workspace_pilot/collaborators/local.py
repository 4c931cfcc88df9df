"""Collaborator that performs side effects directly in a local workspace."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.logging_config import get_logger
from .definitions import (
    CommandRunInput,
    CommandRunOutput,
    ConfigurationOutput,
    DeploymentConfigureInput,
    FileDeleteInput,
    FileDeleteOutput,
    FileReadInput,
    FileReadOutput,
    FileWriteInput,
    FileWriteOutput,
    PackageInstallInput,
    PackageInstallOutput,
    WorkflowConfigureInput,
)
from .handlers import (
    CommandRunHandler,
    FileDeleteHandler,
    FileReadHandler,
    FileWriteHandler,
    PackageInstallHandler,
)
from .workspace import Workspace

logger = get_logger(__name__)


class LocalWorkspaceCollaborator:
    """``WorkspaceCollaborator`` backed by the local filesystem and shell.

    All paths are scoped to ``root``. Workflow and deployment configurations
    are kept in memory, in the order they were configured.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        shell_timeout: float = 30.0,
        install_timeout: float = 300.0,
    ) -> None:
        self.workspace = Workspace.from_path(root)
        self._shell_timeout = shell_timeout
        self._reader = FileReadHandler(self.workspace)
        self._writer = FileWriteHandler(self.workspace)
        self._deleter = FileDeleteHandler(self.workspace)
        self._runner = CommandRunHandler(self.workspace)
        self._installer = PackageInstallHandler(self.workspace, runner=self._runner, timeout=install_timeout)
        self.workflows: Dict[str, Dict[str, Any]] = {}
        self.deployment: Optional[Dict[str, Any]] = None

    async def read_file(self, path: str) -> FileReadOutput:
        return await self._reader(FileReadInput(file_path=path))

    async def write_file(self, path: str, content: str) -> FileWriteOutput:
        return await self._writer(FileWriteInput(file_path=path, content=content))

    async def delete_file(self, path: str) -> FileDeleteOutput:
        return await self._deleter(FileDeleteInput(file_path=path))

    async def execute_shell(self, command: str, cwd: Optional[str] = None) -> CommandRunOutput:
        return await self._runner(CommandRunInput(command=command, cwd=cwd, timeout=self._shell_timeout))

    async def install_packages(self, language: str, packages: List[str]) -> PackageInstallOutput:
        return await self._installer(PackageInstallInput(language=language, packages=packages))

    async def configure_workflow(self, config: WorkflowConfigureInput) -> ConfigurationOutput:
        stored = config.model_dump(mode="json")
        self.workflows[config.workflow_name] = stored
        logger.info(f"Workflow configured: {config.workflow_name} ({len(config.commands)} commands, {config.mode.value})")
        return ConfigurationOutput(success=True, config=stored)

    async def configure_deployment(self, config: DeploymentConfigureInput) -> ConfigurationOutput:
        stored = config.model_dump(mode="json")
        self.deployment = stored
        logger.info(f"Deployment configured: run={config.run_command!r} build={config.build_command!r}")
        return ConfigurationOutput(success=True, config=stored)
