# tree.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional

from clarion.clarioncore.codebase.models import Codebase

NodeType = Literal["file", "folder"]


@dataclass
class FileTreeNode:
    """Node of the hierarchical file tree sent to the UI."""

    id: str
    name: str
    path: str
    type: NodeType
    children: Optional[List["FileTreeNode"]] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.children is None:
            d.pop("children")
        return d


def build_file_tree(codebase: Codebase) -> List[FileTreeNode]:
    """Turn the flat file list into nested nodes. Keeps traversal order."""
    root = FileTreeNode(id="root", name="root", path="", type="folder", children=[])
    index: Dict[str, FileTreeNode] = {}

    for file in codebase.files:
        parts = file.path.split("/")
        current = root
        for i, part in enumerate(parts):
            so_far = "/".join(parts[: i + 1])
            node = index.get(so_far)
            if node is None:
                is_file = i == len(parts) - 1
                node = FileTreeNode(
                    id=so_far,
                    name=part,
                    path=so_far,
                    type="file" if is_file else "folder",
                    children=None if is_file else [],
                )
                current.children.append(node)
                index[so_far] = node
            current = node

    return root.children or []


def render_tree(codebase: Codebase) -> str:
    """Printable tree: directories before files, each group sorted by name."""
    lines = [codebase.root_path]
    if not codebase.files:
        lines.append("└── (empty)")
        return "\n".join(lines)

    tree: Dict[str, Any] = {}
    for file in codebase.files:
        parts = file.path.split("/")
        node = tree
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = None

    def walk(node: Dict[str, Any], prefix: str) -> None:
        dirs = sorted(k for k, v in node.items() if v is not None)
        files = sorted(k for k, v in node.items() if v is None)
        keys = dirs + files
        for i, key in enumerate(keys):
            last = i == len(keys) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{key}")
            if node[key] is not None:
                walk(node[key], prefix + ("    " if last else "│   "))

    walk(tree, "")
    return "\n".join(lines)


def codebase_to_string(codebase: Optional[Codebase]) -> str:
    """Fenced `File:` blocks, sorted by path, for pasting a codebase into a prompt."""
    if codebase is None or not codebase.files:
        return "No codebase files provided or filtered."

    chunks = []
    for file in codebase.sorted_files():
        chunks.append(f"File: {file.path}\n```\n{file.text()}\n```\n\n")
    return "".join(chunks).strip()
