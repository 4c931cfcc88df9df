"""Recover typed actions from assistant output.

``extract`` never raises on malformed input. Every fragment the tokenizer
yields goes through exactly one builder; a builder returns ``None`` when the
fragment does not satisfy its kind's requirements and the fragment is skipped.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..core.logging_config import get_logger
from ..schemas.domain import (
    Action,
    ActionBatch,
    DeploymentConfiguration,
    FileEdit,
    PackageInstall,
    RagSourceReference,
    ShellCommand,
    WorkflowConfiguration,
    WorkflowMode,
    WorkspaceToolNudge,
)
from . import grammar
from .tokenizer import RagLink, TagFragment, find_block, iter_rag_links, iter_tags

logger = get_logger(__name__)

Builder = Callable[[TagFragment], Optional[Action]]


def _attr(fragment: TagFragment, name: str) -> str:
    return fragment.attributes.get(name, "").strip()


def _build_substring_edit(fragment: TagFragment) -> Optional[Action]:
    path = _attr(fragment, grammar.ATTR_FILE_PATH)
    if not path or fragment.body is None:
        return None
    old = find_block(fragment.body, grammar.OLD_STR)
    new = find_block(fragment.body, grammar.NEW_STR)
    if old is None or new is None:
        return None
    old = old.strip()
    if not old:
        return None
    return FileEdit.edit(path, old, new.strip())


def _build_whole_file(fragment: TagFragment) -> Optional[Action]:
    path = _attr(fragment, grammar.ATTR_FILE_PATH)
    if not path or fragment.body is None:
        return None
    return FileEdit.create(path, fragment.body.strip())


def _build_shell_command(fragment: TagFragment) -> Optional[Action]:
    command = (fragment.body or "").strip()
    if not command:
        return None
    return ShellCommand(
        command=command,
        working_directory=_attr(fragment, grammar.ATTR_WORKING_DIRECTORY) or None,
        is_dangerous=_attr(fragment, grammar.ATTR_IS_DANGEROUS) == grammar.TRUE_VALUE,
    )


def _build_package_install(fragment: TagFragment) -> Optional[Action]:
    language = _attr(fragment, grammar.ATTR_LANGUAGE)
    packages = [p.strip() for p in fragment.attributes.get(grammar.ATTR_PACKAGE_LIST, "").split(",")]
    packages = [p for p in packages if p]
    if not language or not packages:
        return None
    return PackageInstall(language=language, packages=packages)


def _build_tool_nudge(fragment: TagFragment) -> Optional[Action]:
    tool_name = _attr(fragment, grammar.ATTR_TOOL_NAME)
    reason = _attr(fragment, grammar.ATTR_REASON)
    if not tool_name or not reason:
        return None
    return WorkspaceToolNudge(tool_name=tool_name, reason=reason)


def _build_workflow(fragment: TagFragment) -> Optional[Action]:
    name = _attr(fragment, grammar.ATTR_WORKFLOW_NAME)
    if not name or fragment.body is None:
        return None
    commands = [line.strip() for line in fragment.body.split("\n")]
    mode_value = _attr(fragment, grammar.ATTR_MODE)
    mode = WorkflowMode(mode_value) if mode_value in {m.value for m in WorkflowMode} else WorkflowMode.sequential
    return WorkflowConfiguration(
        workflow_name=name,
        commands=[c for c in commands if c],
        mode=mode,
        set_run_button=_attr(fragment, grammar.ATTR_SET_RUN_BUTTON) == grammar.TRUE_VALUE,
    )


def _build_deployment(fragment: TagFragment) -> Optional[Action]:
    run_command = _attr(fragment, grammar.ATTR_RUN_COMMAND)
    if not run_command:
        return None
    return DeploymentConfiguration(
        build_command=_attr(fragment, grammar.ATTR_BUILD_COMMAND) or None,
        run_command=run_command,
    )


_BUILDERS: Dict[str, Builder] = {
    grammar.FILE_REPLACE_SUBSTRING: _build_substring_edit,
    grammar.FILE_REPLACE: _build_whole_file,
    grammar.FILE_INSERT: _build_whole_file,
    grammar.SHELL_COMMAND: _build_shell_command,
    grammar.PACKAGE_INSTALL: _build_package_install,
    grammar.WORKSPACE_TOOL_NUDGE: _build_tool_nudge,
    grammar.WORKFLOW_CONFIGURATION: _build_workflow,
    grammar.DEPLOYMENT_CONFIGURATION: _build_deployment,
}


class ActionExtractor:
    """Turn free text into an ``ActionBatch``.

    The extractor is stateless; one instance can be shared across sessions.
    """

    def extract(self, text: str) -> ActionBatch:
        """Extract every well-formed proposed action from ``text``.

        Output order follows the canonical kind order (file edits, shell
        commands, package installs, workspace nudges, workflow configurations,
        deployment configurations, RAG references); within one kind, textual
        order is kept.
        """
        buckets: Dict[str, List[Action]] = {}
        summary: Optional[str] = None
        skipped = 0

        for fragment in iter_tags(text or ""):
            if fragment.name == grammar.ACTIONS_SUMMARY:
                if summary is None:
                    summary = _attr(fragment, grammar.ATTR_SUMMARY) or None
                continue
            action = self._build(fragment)
            if action is None:
                skipped += 1
                continue
            buckets.setdefault(action.kind, []).append(action)

        rag_sources = [self._rag_source(link) for link in iter_rag_links(text or "")]

        batch = ActionBatch(
            file_edits=buckets.get("file_edit", []),
            shell_commands=buckets.get("shell_command", []),
            package_installs=buckets.get("package_install", []),
            workspace_tool_nudges=buckets.get("workspace_tool_nudge", []),
            workflow_configurations=buckets.get("workflow_configuration", []),
            deployment_configurations=buckets.get("deployment_configuration", []),
            rag_sources=rag_sources,
            action_summary=summary,
        )
        logger.debug(f"Extracted {batch.total} actions ({skipped} malformed fragments skipped)")
        return batch

    @staticmethod
    def _build(fragment: TagFragment) -> Optional[Action]:
        builder = _BUILDERS.get(fragment.name)
        if builder is None:
            return None
        try:
            return builder(fragment)
        except (ValidationError, ValueError) as e:
            logger.debug(f"Skipping malformed <{fragment.name}> at offset {fragment.start}: {e}")
            return None

    @staticmethod
    def _rag_source(link: RagLink) -> RagSourceReference:
        return RagSourceReference(id=link.target, path=link.label)


_default_extractor = ActionExtractor()


def extract(text: str) -> ActionBatch:
    """Module-level shortcut for ``ActionExtractor().extract``."""
    return _default_extractor.extract(text)
