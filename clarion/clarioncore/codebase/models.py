# models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CodeFile:
    """A single file of a codebase: repo-relative path (forward slashes) plus raw bytes.

    `content` is None for structure-only loads.
    """

    path: str
    content: Optional[bytes] = None

    def text(self, errors: str = "replace") -> str:
        if self.content is None:
            return ""
        return self.content.decode("utf-8", errors=errors)


@dataclass
class Codebase:
    """
    Snapshot of a directory at load time. `files` keeps traversal order and is
    NOT sorted; callers needing determinism sort by path themselves.
    """

    root_path: str
    files: List[CodeFile] = field(default_factory=list)

    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def sorted_files(self) -> List[CodeFile]:
        return sorted(self.files, key=lambda f: f.path)

    def __len__(self) -> int:
        return len(self.files)
