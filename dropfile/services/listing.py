from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

FILE = 'file'
DIRECTORY = 'directory'


@dataclass
class DirectoryTreeNode:
    name: str
    type: str
    children: Optional[list[DirectoryTreeNode]] = field(default=None)

    def _shallow_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {'name': self.name, 'type': self.type}
        if self.type == DIRECTORY:
            node['children'] = []
        return node

    def to_dict(self) -> dict[str, Any]:
        result = self._shallow_dict()
        stack = [(self, result)]
        while stack:
            node, out = stack.pop()
            for child in node.children or []:
                child_out = child._shallow_dict()
                out['children'].append(child_out)
                if child.type == DIRECTORY:
                    stack.append((child, child_out))
        return result


def list_names(directory: Path) -> list[str]:
    with os.scandir(directory) as entries:
        return sorted(entry.name for entry in entries)


def build_tree(directory: Path) -> DirectoryTreeNode:
    """Walk ``directory`` into a tree of names.

    Symlinks are leaves, whatever they point at, so the walk never leaves the
    starting subtree and cannot loop. The walk keeps its own stack, so depth
    is bounded by the filesystem only.
    """
    root = DirectoryTreeNode(name=directory.name, type=DIRECTORY, children=[])
    stack = [(directory, root)]
    while stack:
        path, node = stack.pop()
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                child = DirectoryTreeNode(name=entry.name, type=DIRECTORY, children=[])
                stack.append((Path(entry.path), child))
            else:
                child = DirectoryTreeNode(name=entry.name, type=FILE)
            node.children.append(child)
    return root
