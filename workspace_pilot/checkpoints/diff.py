"""Line-level comparison between two file snapshots."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from ..schemas.domain import FileDiff, FileRecord, count_lines


def count_diff_lines(old_content: str, new_content: str) -> Tuple[int, int]:
    """Count added and deleted lines by set membership (order-insensitive)."""
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")
    old_set = set(old_lines)
    new_set = set(new_lines)
    additions = sum(1 for line in new_lines if line not in old_set)
    deletions = sum(1 for line in old_lines if line not in new_set)
    return additions, deletions


def diff_snapshots(current: Iterable[FileRecord], previous: Iterable[FileRecord]) -> List[FileDiff]:
    """Describe how ``current`` differs from ``previous``.

    Files only in ``previous`` are deleted, files in both with different content
    are modified, files only in ``current`` are added. Deleted and modified
    entries come first, in ``previous`` order, then added ones in ``current`` order.
    """
    current_files: Dict[str, str] = {f.path: f.content for f in current}
    previous_files: Dict[str, str] = {f.path: f.content for f in previous}
    diffs: List[FileDiff] = []

    for path, old_content in previous_files.items():
        if path not in current_files:
            diffs.append(
                FileDiff(path=path, type="deleted", old_content=old_content, deletions=count_lines(old_content))
            )
            continue
        new_content = current_files[path]
        if new_content != old_content:
            additions, deletions = count_diff_lines(old_content, new_content)
            diffs.append(
                FileDiff(
                    path=path,
                    type="modified",
                    old_content=old_content,
                    new_content=new_content,
                    additions=additions,
                    deletions=deletions,
                )
            )

    for path, new_content in current_files.items():
        if path not in previous_files:
            diffs.append(
                FileDiff(path=path, type="added", new_content=new_content, additions=count_lines(new_content))
            )

    return diffs
