"""Folder Scanner: bounded, structure-only snapshot of a directory tree.

Entries appear in whatever order the capability yields them; nothing is
sorted. The root is depth 0. Directories reached at ``max_depth`` are not
opened and get a single placeholder child. At most ``max_items`` real
entries are kept per directory; if more exist a trailing limit marker is
appended. A failing directory records its error and keeps the children read
so far.
"""

from __future__ import annotations

import logging

from sharebox.client.capability import DirectoryCapability
from sharebox.config import settings
from sharebox.schemas.tree import DirectoryTreeNode, NodeKind

logger = logging.getLogger(__name__)

LIMIT_LABEL = "(More items not shown)"
PLACEHOLDER_LABEL = "(Subfolder contents not shown)"


def _join(parent: str, name: str) -> str:
    return name if parent in ("", "/") else f"{parent}/{name}"


async def scan_directory(
    capability: DirectoryCapability,
    max_depth: int | None = None,
    max_items: int | None = None,
) -> DirectoryTreeNode:
    """Snapshot ``capability`` without reading any file contents."""
    depth_limit = settings.scan_max_depth if max_depth is None else max_depth
    item_limit = settings.scan_max_items if max_items is None else max_items
    return await _scan(capability, "/", 0, depth_limit, item_limit)


async def _scan(
    directory: DirectoryCapability,
    path: str,
    depth: int,
    max_depth: int,
    max_items: int,
) -> DirectoryTreeNode:
    node = DirectoryTreeNode(name=directory.name, path=path, kind=NodeKind.DIRECTORY, children=[])

    if depth >= max_depth:
        node.children.append(
            DirectoryTreeNode(name=PLACEHOLDER_LABEL, path=path, kind=NodeKind.PLACEHOLDER)
        )
        return node

    count = 0
    try:
        async for entry in directory.enumerate():
            if count >= max_items:
                node.children.append(
                    DirectoryTreeNode(name=LIMIT_LABEL, path=path, kind=NodeKind.LIMIT)
                )
                break

            entry_path = _join(path, entry.name)
            if entry.kind == "directory":
                node.children.append(
                    await _scan(entry, entry_path, depth + 1, max_depth, max_items)
                )
            else:
                node.children.append(
                    DirectoryTreeNode(name=entry.name, path=entry_path, kind=NodeKind.FILE)
                )
            count += 1
    except Exception as e:
        logger.warning("Scan of %s stopped early: %s", path, e)
        node.error = str(e) or type(e).__name__

    return node
