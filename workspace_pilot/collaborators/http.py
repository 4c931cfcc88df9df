"""HTTP collaborator for the host application's REST API.

The host exposes one ``POST`` endpoint per operation and answers with camelCase
JSON. Non-2xx answers carry ``{"error": ..., "details": ...}`` and are turned
into failed outputs; transport problems raise ``CollaboratorError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..core.errors import CollaboratorError
from ..core.logging_config import get_logger
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

logger = get_logger(__name__)


class HttpWorkspaceCollaborator:
    """``WorkspaceCollaborator`` that forwards every operation to the host API.

    - Uses `httpx.AsyncClient` for HTTP operations; pass ``client`` to inject one
      (tests use ``httpx.MockTransport``).
    - Sends ``Authorization`` when a token is configured.
    - Owns the client only when it created it; ``aclose()`` is a no-op otherwise.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _post(self, path: str, payload: Dict[str, Any]) -> Tuple[bool, Dict[str, Any], Optional[str]]:
        """POST ``payload`` and return ``(ok, body, error)``.

        Raises:
            CollaboratorError: For transport-level HTTP issues.
        """
        _, body, error = await self._send(path, payload)
        return error is None, body, error

    async def _send(self, path: str, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any], Optional[str]]:
        """POST ``payload`` and return ``(status_code, body, error)``.

        Raises:
            CollaboratorError: For transport-level HTTP issues.
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"POST {url}")
        try:
            response = await self._http.post(url, json=payload, headers=self._headers())
        except httpx.RequestError as e:
            raise CollaboratorError(f"Request to {url} failed: {e}", details=str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.is_success:
            return response.status_code, body, None

        error = body.get("error") or response.text or f"HTTP {response.status_code}"
        details = body.get("details")
        if details:
            error = f"{error}: {details}"
        logger.warning(f"POST {url} returned {response.status_code}: {error}")
        return response.status_code, body, error

    async def read_file(self, path: str) -> FileReadOutput:
        status_code, body, error = await self._send("/api/file/read", {"filePath": path})
        ok = error is None
        content = body.get("content") if ok else None
        if ok and content is None:
            return FileReadOutput(success=False, file_path=path, error=f"No content returned for {path}")
        return FileReadOutput(
            success=ok,
            file_path=body.get("filePath", path),
            content=content,
            size_bytes=len(content.encode("utf-8")) if content is not None else None,
            error=error,
            not_found=not ok and _is_missing_file(status_code, body),
        )

    async def write_file(self, path: str, content: str) -> FileWriteOutput:
        ok, body, error = await self._post("/api/file/write", {"filePath": path, "content": content})
        return FileWriteOutput(
            success=ok,
            file_path=path,
            bytes_written=len(content.encode("utf-8")) if ok else None,
            error=error,
        )

    async def delete_file(self, path: str) -> FileDeleteOutput:
        ok, _, error = await self._post("/api/file/delete", {"filePath": path})
        return FileDeleteOutput(success=ok, file_path=path, error=error)

    async def execute_shell(self, command: str, cwd: Optional[str] = None) -> CommandRunOutput:
        payload: Dict[str, Any] = {"command": command}
        if cwd:
            payload["workingDirectory"] = cwd
        ok, body, error = await self._post("/api/shell/execute", payload)
        if not ok:
            return CommandRunOutput(success=False, command=command, error=error)

        exit_code = body.get("exitCode", 0)
        output = body.get("output")
        return CommandRunOutput(
            success=exit_code == 0,
            exit_code=exit_code,
            stdout=output if exit_code == 0 else None,
            stderr=output if exit_code != 0 else None,
            error=None if exit_code == 0 else (output or f"Command exited with code {exit_code}"),
            command=command,
        )

    async def install_packages(self, language: str, packages: List[str]) -> PackageInstallOutput:
        ok, body, error = await self._post(
            "/api/packages/install",
            {"language": language, "packageList": ",".join(packages), "confirmed": True},
        )
        if ok and body.get("success") is False:
            ok, error = False, body.get("error") or "Package installation failed"
        return PackageInstallOutput(
            success=ok,
            language=language,
            packages=list(body.get("packages") or packages),
            manager=body.get("manager"),
            command=body.get("command"),
            output=body.get("output"),
            error=error,
        )

    async def configure_workflow(self, config: WorkflowConfigureInput) -> ConfigurationOutput:
        ok, body, error = await self._post(
            "/api/workflow/configure",
            {
                "currentName": config.workflow_name,
                "commands": config.commands,
                "mode": config.mode.value,
                "setRunButton": config.set_run_button,
            },
        )
        return ConfigurationOutput(success=ok, config=body.get("workflow") or {}, error=error)

    async def configure_deployment(self, config: DeploymentConfigureInput) -> ConfigurationOutput:
        payload: Dict[str, Any] = {"runCommand": config.run_command}
        if config.build_command:
            payload["buildCommand"] = config.build_command
        ok, body, error = await self._post("/api/deployment/configure", payload)
        return ConfigurationOutput(success=ok, config=body.get("config") or {}, error=error)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


def _is_missing_file(status_code: int, body: Dict[str, Any]) -> bool:
    # The host reports fs errors as 500 with the Node error text in ``details``.
    if status_code == 404:
        return True
    details = body.get("details")
    return isinstance(details, str) and details.startswith("ENOENT")
