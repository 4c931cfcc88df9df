"""Convenience factories for wiring workspace-pilot.

``build_service`` turns a ``Settings`` object into a ready ``ActionService``:
the HTTP collaborator is used when a host API URL is configured, the local
workspace collaborator otherwise.
"""

from __future__ import annotations

from .collaborators.base import WorkspaceCollaborator
from .collaborators.http import HttpWorkspaceCollaborator
from .collaborators.local import LocalWorkspaceCollaborator
from .core.config import Settings
from .core.config import settings as default_settings
from .core.logging_config import get_logger, setup_logging
from .runtime.executor import BatchExecutor
from .service import ActionService

logger = get_logger(__name__)


def build_collaborator(settings: Settings) -> WorkspaceCollaborator:
    """Pick the collaborator transport configured in ``settings``."""
    host_api = settings.host_api
    if host_api.url:
        logger.info(f"Using host API collaborator at {host_api.url}")
        return HttpWorkspaceCollaborator(host_api.url, token=host_api.token, timeout=host_api.timeout)
    logger.info(f"Using local collaborator rooted at {settings.workspace_root}")
    return LocalWorkspaceCollaborator(settings.workspace_root, shell_timeout=settings.shell_timeout)


def build_executor(settings: Settings, collaborator: WorkspaceCollaborator) -> BatchExecutor:
    """Construct a ``BatchExecutor`` from the executor settings."""
    cfg = settings.executor
    return BatchExecutor(
        collaborator,
        action_timeout=cfg.action_timeout,
        strict_substring=cfg.strict_substring,
    )


def build_service(settings: Settings | None = None, *, configure_logging: bool = True) -> ActionService:
    """Build an ``ActionService`` from settings (the module singleton by default)."""
    settings = settings if settings is not None else default_settings
    if configure_logging:
        setup_logging(
            log_level=settings.log_level,
            log_format=settings.log_format,
            enable_file=settings.enable_file_logging,
        )
    collaborator = build_collaborator(settings)
    return ActionService(collaborator, executor=build_executor(settings, collaborator))
