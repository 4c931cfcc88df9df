from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..core.errors import WorkspaceViolation


@dataclass(frozen=True)
class Workspace:
    """A directory that scopes every local file and shell operation."""

    root: Path

    @classmethod
    def from_path(cls, root: str | Path) -> "Workspace":
        p = Path(root).expanduser()
        try:
            p = p.resolve()
        except OSError:
            # If resolve fails (non-existent), normalize as absolute.
            p = p.absolute()
        return cls(root=p)

    def resolve_rel(self, rel: str | Path) -> Path:
        """Resolve a workspace-relative path; a leading '/' means the workspace root."""
        text = str(rel).lstrip("/\\")
        candidate = (self.root / text).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError as e:
            raise WorkspaceViolation(f"Path escapes workspace: {rel}") from e
        return candidate
