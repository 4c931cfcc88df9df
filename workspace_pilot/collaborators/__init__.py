"""Collaborators perform the side effects of executed actions.

``WorkspaceCollaborator`` is the protocol the batch executor talks to;
``LocalWorkspaceCollaborator`` acts on a local directory and
``HttpWorkspaceCollaborator`` forwards to the host application's REST API.
"""

from .base import WorkspaceCollaborator
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
from .http import HttpWorkspaceCollaborator
from .local import LocalWorkspaceCollaborator
from .workspace import Workspace

__all__ = [
    "WorkspaceCollaborator",
    "LocalWorkspaceCollaborator",
    "HttpWorkspaceCollaborator",
    "Workspace",
    "CommandRunInput",
    "CommandRunOutput",
    "ConfigurationOutput",
    "DeploymentConfigureInput",
    "FileDeleteInput",
    "FileDeleteOutput",
    "FileReadInput",
    "FileReadOutput",
    "FileWriteInput",
    "FileWriteOutput",
    "PackageInstallInput",
    "PackageInstallOutput",
    "WorkflowConfigureInput",
]
