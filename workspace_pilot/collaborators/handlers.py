"""Local handlers for collaborator operations.

This module implements handlers for file operations, command execution and
package installation against a workspace directory, using an abstraction-based,
object-oriented approach for better maintainability and extensibility.
"""

import asyncio
import shlex
import shutil
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, TypeVar

from ..core.errors import WorkspaceViolation
from ..core.logging_config import get_logger
from .definitions import (
    CommandRunInput,
    CommandRunOutput,
    FileDeleteInput,
    FileDeleteOutput,
    FileReadInput,
    FileReadOutput,
    FileWriteInput,
    FileWriteOutput,
    PackageInstallInput,
    PackageInstallOutput,
)
from .workspace import Workspace

logger = get_logger(__name__)

# Type variables for generic handler
InputType = TypeVar("InputType")
OutputType = TypeVar("OutputType")


class ToolHandler(ABC, Generic[InputType, OutputType]):
    """Abstract base class for local handlers.

    Provides a common interface for all handlers with logging and error handling.
    Handlers never raise for operational failures; they report them in the output.
    """

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the handler name."""

    @abstractmethod
    async def execute(self, input_data: InputType) -> OutputType:
        """Execute the operation.

        Args:
            input_data: Input data for the operation

        Returns:
            Output data from the execution
        """

    async def __call__(self, input_data: InputType) -> OutputType:
        return await self.execute(input_data)


class FileReadHandler(ToolHandler[FileReadInput, FileReadOutput]):
    """Handler for file read operations."""

    @property
    def name(self) -> str:
        return "read_file"

    async def execute(self, input_data: FileReadInput) -> FileReadOutput:
        """Execute file read operation.

        Args:
            input_data: FileReadInput with file_path and encoding

        Returns:
            FileReadOutput with success status and file content or error
        """
        try:
            file_path = self.workspace.resolve_rel(input_data.file_path)

            if not file_path.exists():
                return FileReadOutput(
                    success=False,
                    file_path=input_data.file_path,
                    error=f"File not found: {input_data.file_path}",
                    not_found=True,
                )

            if not file_path.is_file():
                return FileReadOutput(
                    success=False,
                    file_path=input_data.file_path,
                    error=f"Path is not a file: {input_data.file_path}",
                )

            content = file_path.read_text(encoding=input_data.encoding)
            size_bytes = file_path.stat().st_size

            logger.debug(f"Read file: {file_path} ({size_bytes} bytes)")

            return FileReadOutput(
                success=True,
                content=content,
                file_path=input_data.file_path,
                size_bytes=size_bytes,
            )

        except WorkspaceViolation as e:
            logger.error(str(e))
            return FileReadOutput(success=False, file_path=input_data.file_path, error=str(e))
        except UnicodeDecodeError as e:
            error_msg = f"Encoding error reading {input_data.file_path}: {str(e)}"
            logger.error(error_msg)
            return FileReadOutput(success=False, file_path=input_data.file_path, error=error_msg)
        except OSError as e:
            error_msg = f"Error reading file {input_data.file_path}: {str(e)}"
            logger.error(error_msg)
            return FileReadOutput(success=False, file_path=input_data.file_path, error=error_msg)


class FileWriteHandler(ToolHandler[FileWriteInput, FileWriteOutput]):
    """Handler for file write operations."""

    @property
    def name(self) -> str:
        return "write_file"

    async def execute(self, input_data: FileWriteInput) -> FileWriteOutput:
        """Execute file write operation.

        Args:
            input_data: FileWriteInput with file_path, content, and options

        Returns:
            FileWriteOutput with success status and bytes written or error
        """
        try:
            file_path = self.workspace.resolve_rel(input_data.file_path)

            if input_data.create_dirs:
                file_path.parent.mkdir(parents=True, exist_ok=True)

            bytes_written = file_path.write_text(input_data.content, encoding=input_data.encoding)

            logger.info(f"Wrote file: {file_path} ({bytes_written} bytes)")

            return FileWriteOutput(
                success=True,
                file_path=input_data.file_path,
                bytes_written=bytes_written,
            )

        except WorkspaceViolation as e:
            logger.error(str(e))
            return FileWriteOutput(success=False, file_path=input_data.file_path, error=str(e))
        except PermissionError as e:
            error_msg = f"Permission denied writing to {input_data.file_path}: {str(e)}"
            logger.error(error_msg)
            return FileWriteOutput(success=False, file_path=input_data.file_path, error=error_msg)
        except OSError as e:
            error_msg = f"Error writing file {input_data.file_path}: {str(e)}"
            logger.error(error_msg)
            return FileWriteOutput(success=False, file_path=input_data.file_path, error=error_msg)


class FileDeleteHandler(ToolHandler[FileDeleteInput, FileDeleteOutput]):
    """Handler for file and directory deletion."""

    @property
    def name(self) -> str:
        return "delete_file"

    async def execute(self, input_data: FileDeleteInput) -> FileDeleteOutput:
        try:
            file_path = self.workspace.resolve_rel(input_data.file_path)
            if file_path == self.workspace.root:
                raise WorkspaceViolation("Refusing to delete the workspace root")

            if not file_path.exists():
                return FileDeleteOutput(
                    success=False,
                    file_path=input_data.file_path,
                    error=f"File not found: {input_data.file_path}",
                )

            if file_path.is_dir():
                shutil.rmtree(file_path)
            else:
                file_path.unlink()

            logger.info(f"Deleted: {file_path}")
            return FileDeleteOutput(success=True, file_path=input_data.file_path)

        except WorkspaceViolation as e:
            logger.error(str(e))
            return FileDeleteOutput(success=False, file_path=input_data.file_path, error=str(e))
        except OSError as e:
            error_msg = f"Error deleting {input_data.file_path}: {str(e)}"
            logger.error(error_msg)
            return FileDeleteOutput(success=False, file_path=input_data.file_path, error=error_msg)


class CommandRunHandler(ToolHandler[CommandRunInput, CommandRunOutput]):
    """Handler for command execution operations."""

    @property
    def name(self) -> str:
        return "run_command"

    async def execute(self, input_data: CommandRunInput) -> CommandRunOutput:
        """Execute command operation.

        Args:
            input_data: CommandRunInput with command and options

        Returns:
            CommandRunOutput with exit code, stdout, stderr, or error
        """
        start_time = time.time()
        cmd = input_data.command

        try:
            cwd = self.workspace.resolve_rel(input_data.cwd or ".")

            if not cwd.is_dir():
                error_msg = f"Working directory not found: {input_data.cwd}"
                logger.error(error_msg)
                return CommandRunOutput(success=False, command=cmd, error=error_msg)

            logger.info(f"Executing command: {cmd} (cwd={cwd})")

            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd),
            )
            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(
                    process.communicate(),
                    timeout=input_data.timeout,
                )
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
                duration = time.time() - start_time
                error_msg = f"Command execution timeout after {input_data.timeout} seconds"
                logger.error(error_msg)
                return CommandRunOutput(success=False, command=cmd, error=error_msg, duration_seconds=duration)

            stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
            stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""
            exit_code = process.returncode
            duration = time.time() - start_time

            logger.info(
                f"Command completed with exit code {exit_code} "
                f"(duration: {duration:.2f}s, stdout: {len(stdout)} chars, stderr: {len(stderr)} chars)"
            )

            return CommandRunOutput(
                success=exit_code == 0,
                exit_code=exit_code,
                stdout=stdout if stdout else None,
                stderr=stderr if stderr else None,
                error=None if exit_code == 0 else (stderr.strip() or f"Command exited with code {exit_code}"),
                command=cmd,
                duration_seconds=duration,
            )

        except WorkspaceViolation as e:
            logger.error(str(e))
            return CommandRunOutput(success=False, command=cmd, error=str(e))
        except OSError as e:
            duration = time.time() - start_time
            error_msg = f"Error executing command: {str(e)}"
            logger.error(error_msg)
            return CommandRunOutput(success=False, command=cmd, error=error_msg, duration_seconds=duration)


@dataclass(frozen=True)
class PackageManager:
    name: str
    command: str
    install_cmd: str
    lock_file: str

    def install_command(self, packages: List[str]) -> str:
        return " ".join([self.command, self.install_cmd, *(shlex.quote(p) for p in packages)])


PACKAGE_MANAGERS: Dict[str, List[PackageManager]] = {
    "nodejs": [
        PackageManager(name="npm", command="npm", install_cmd="install --no-audit", lock_file="package-lock.json"),
        PackageManager(name="yarn", command="yarn", install_cmd="add", lock_file="yarn.lock"),
        PackageManager(name="pnpm", command="pnpm", install_cmd="add", lock_file="pnpm-lock.yaml"),
    ],
    "python": [
        PackageManager(name="pip", command="pip", install_cmd="install", lock_file="requirements.txt"),
        PackageManager(name="poetry", command="poetry", install_cmd="add", lock_file="poetry.lock"),
    ],
}

LANGUAGE_ALIASES: Dict[str, str] = {
    "node": "nodejs",
    "javascript": "nodejs",
    "typescript": "nodejs",
    "js": "nodejs",
    "ts": "nodejs",
    "python3": "python",
    "py": "python",
}


class PackageInstallHandler(ToolHandler[PackageInstallInput, PackageInstallOutput]):
    """Install packages with the package manager detected for a language.

    Detection prefers an installed manager whose lock file exists in the
    workspace root and falls back to the first manager listed for the language.
    """

    def __init__(self, workspace: Workspace, *, runner: CommandRunHandler, timeout: float = 300.0) -> None:
        super().__init__(workspace)
        self._runner = runner
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "install_packages"

    def detect_manager(self, language: str) -> Optional[PackageManager]:
        key = language.strip().lower()
        key = LANGUAGE_ALIASES.get(key, key)
        managers = PACKAGE_MANAGERS.get(key, [])
        for manager in managers:
            if shutil.which(manager.command) is None:
                continue
            if (self.workspace.root / manager.lock_file).exists():
                return manager
        return managers[0] if managers else None

    async def execute(self, input_data: PackageInstallInput) -> PackageInstallOutput:
        manager = self.detect_manager(input_data.language)
        if manager is None:
            error_msg = f"No package manager found for {input_data.language}"
            logger.error(error_msg)
            return PackageInstallOutput(
                success=False,
                language=input_data.language,
                packages=list(input_data.packages),
                error=error_msg,
            )

        command = manager.install_command(list(input_data.packages))
        logger.info(f"Installing with {manager.name}: {command}")
        result = await self._runner(CommandRunInput(command=command, timeout=self._timeout))
        return PackageInstallOutput(
            success=result.success,
            language=input_data.language,
            packages=list(input_data.packages),
            manager=manager.name,
            command=command,
            output=result.stdout or result.stderr,
            error=result.error,
        )
