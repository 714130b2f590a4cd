# loader.py
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Protocol

from clarion.clarioncore.codebase.models import CodeFile, Codebase
from clarion.clarioncore.errors import CodebaseLoadError

logger = logging.getLogger(__name__)

# Directory names skipped anywhere in the tree.
DEFAULT_IGNORE_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "dist",
        "build",
        ".vscode",
        ".idea",
        "target",  # Rust/Java
        "__pycache__",
        ".venv",
        "venv",
    }
)


class CodebaseLoader(Protocol):
    def load_codebase(self, root_path: str) -> Codebase: ...
    def load_codebase_structure(self, root_path: str) -> Codebase: ...


def _raise(err: OSError) -> None:
    raise err


class LocalFSLoader:
    """Loads a codebase from the local disk. Any I/O error aborts the whole load."""

    def __init__(self, ignore_dirs=DEFAULT_IGNORE_DIRS):
        self.ignore_dirs = frozenset(ignore_dirs)

    def load_codebase(self, root_path: str) -> Codebase:
        return self._walk(root_path, with_content=True)

    def load_codebase_structure(self, root_path: str) -> Codebase:
        return self._walk(root_path, with_content=False)

    def _walk(self, root_path: str, *, with_content: bool) -> Codebase:
        abs_root = Path(root_path).resolve()
        if not abs_root.is_dir():
            raise CodebaseLoadError(
                str(abs_root), NotADirectoryError(f"not a directory: {abs_root}")
            )

        files = []
        try:
            for dirpath, dirnames, filenames in os.walk(abs_root, onerror=_raise):
                # prune in place so os.walk never descends into ignored dirs
                dirnames[:] = [d for d in dirnames if d not in self.ignore_dirs]
                for name in filenames:
                    full = Path(dirpath) / name
                    rel = full.relative_to(abs_root).as_posix()
                    content = full.read_bytes() if with_content else None
                    files.append(CodeFile(path=rel, content=content))
        except OSError as e:
            raise CodebaseLoadError(str(abs_root), e) from e

        logger.debug(
            "Loaded %d file(s) from %s (content=%s)", len(files), abs_root, with_content
        )
        return Codebase(root_path=str(abs_root), files=files)


def load_codebase(root_path: str) -> Codebase:
    return LocalFSLoader().load_codebase(root_path)


def load_codebase_structure(root_path: str) -> Codebase:
    return LocalFSLoader().load_codebase_structure(root_path)
