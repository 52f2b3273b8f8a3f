"""Directory snapshot schema: structure only, never file contents."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class NodeKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    LIMIT = "limit"  # listing truncated at the sibling cap
    PLACEHOLDER = "placeholder"  # directory below the depth limit, not scanned


class DirectoryTreeNode(BaseModel):
    """One node of a scanned directory tree."""
    name: str
    path: str
    kind: NodeKind
    children: list[DirectoryTreeNode] | None = None
    error: str | None = None

    def real_children(self) -> list[DirectoryTreeNode]:
        """Children that stand for actual entries (no limit/placeholder markers)."""
        return [
            c for c in self.children or []
            if c.kind in (NodeKind.DIRECTORY, NodeKind.FILE)
        ]

    def items_at(self, path: str) -> list[DirectoryTreeNode]:
        """Children of the directory at ``path`` ("/" is this node).

        Only directory nodes are followed; an unknown segment yields ``[]``.
        """
        current = self
        for part in [p for p in path.split("/") if p]:
            current = next(
                (c for c in current.children or [] if c.kind == NodeKind.DIRECTORY and c.name == part),
                None,
            )
            if current is None:
                return []
        return list(current.children or [])
