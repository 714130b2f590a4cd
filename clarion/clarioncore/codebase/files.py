# files.py
from __future__ import annotations
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from pydantic import ValidationError

from clarion.clarioncore.agent.models import AgentRunOutput, FileAction, FileChange
from clarion.clarioncore.ai_clients.protocols.protocol_files import (
    ACTION_TO_KIND,
    ApplyChangesResult,
    ChangeRecord,
)
from clarion.clarioncore.errors import FileChangeError, ProviderResponseError

logger = logging.getLogger(__name__)

READ_ERROR_MARKER = "// Error reading file: {error}"


# ---------------------- selective reads ----------------------


def read_codebase_files(project_root: str, paths: Iterable[str]) -> Dict[str, str]:
    """
    Read the selected files for a prompt. Unreadable files and paths outside
    `project_root` are logged and skipped; the rest of the batch is still returned.
    """
    out: Dict[str, str] = {}
    for rel in paths:
        try:
            target = resolve_inside(project_root, rel)
            out[rel] = target.read_text(encoding="utf-8", errors="replace")
        except (FileChangeError, OSError) as e:
            logger.warning("Skipping file %s due to read error: %s", rel, e)
    return out


def read_files(paths: Iterable[str]) -> Dict[str, str]:
    """Read files for display; a failed read becomes an inline error marker."""
    out: Dict[str, str] = {}
    for p in paths:
        try:
            out[p] = Path(p).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read file %s: %s", p, e)
            out[p] = READ_ERROR_MARKER.format(error=e)
    return out


# ---------------------- primitive operations ----------------------


def resolve_inside(root: Union[str, Path], rel_path: str) -> Path:
    """Join `rel_path` onto `root`, refusing anything that escapes the root."""
    base = Path(root).resolve()
    target = (base / rel_path).resolve()
    if target != base and base not in target.parents:
        raise FileChangeError(rel_path, "resolve", "path escapes the project root")
    if target == base:
        raise FileChangeError(rel_path, "resolve", "path points at the project root")
    return target


def create_file(root: Union[str, Path], rel_path: str, content: str = "") -> Path:
    target = resolve_inside(root, rel_path)
    if target.exists():
        raise FileChangeError(rel_path, "create", "file already exists")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def modify_file(root: Union[str, Path], rel_path: str, content: str) -> Path:
    target = resolve_inside(root, rel_path)
    if not target.is_file():
        raise FileChangeError(rel_path, "modify", "file does not exist")
    target.write_text(content, encoding="utf-8")
    return target


def write_file(root: Union[str, Path], rel_path: str, content: str) -> Path:
    """Create-or-overwrite, used by the editor save path."""
    target = resolve_inside(root, rel_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def delete_file(root: Union[str, Path], rel_path: str) -> Path:
    target = resolve_inside(root, rel_path)
    if not target.exists():
        raise FileChangeError(rel_path, "delete", "file does not exist")
    if target.is_dir():
        shutil.rmtree(target)
    else:
        target.unlink()
    return target


def copy_file(root: Union[str, Path], source: str, destination: str) -> Path:
    src = resolve_inside(root, source)
    dst = resolve_inside(root, destination)
    if not src.is_file():
        raise FileChangeError(source, "copy", "source file does not exist")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    return dst


# ---------------------- applier ----------------------


def _apply_one(root: Path, change: FileChange) -> Path:
    if change.action is FileAction.CREATE:
        return create_file(root, change.path, change.new_content or "")
    if change.action is FileAction.MODIFY:
        return modify_file(root, change.path, change.new_content or "")
    if change.action is FileAction.DELETE:
        return delete_file(root, change.path)
    raise FileChangeError(change.path, str(change.action), "unknown action")


def apply_file_changes(
    root_path: str, changes: Sequence[Union[FileChange, Mapping[str, Any]]]
) -> ApplyChangesResult:
    """
    Apply changes in order. The first failure stops the batch and raises
    FileChangeError; changes applied before it stay applied.
    """
    if not root_path:
        raise FileChangeError("", "apply", "root path is required to apply changes")
    root = Path(root_path)
    result = ApplyChangesResult(root_path=str(root))

    for raw in changes:
        path = raw.get("path", "") if isinstance(raw, Mapping) else raw.path
        action = raw.get("action", "") if isinstance(raw, Mapping) else raw.action
        try:
            change = raw if isinstance(raw, FileChange) else FileChange.model_validate(raw)
            target = _apply_one(root, change)
        except (FileChangeError, ValidationError, OSError) as e:
            reason = e.reason if isinstance(e, FileChangeError) else e
            result.ok = False
            result.failed_path = str(path)
            result.error = str(e)
            raise FileChangeError(str(path), str(getattr(action, "value", action)), reason, result) from e

        size = target.stat().st_size if target.exists() else None
        result.applied.append(
            ChangeRecord(kind=ACTION_TO_KIND[change.action.value], path=change.path, size_bytes=size)
        )
        logger.info("Applied %s to %s", change.action.value, change.path)

    return result


def parse_structured_output(output: Mapping[str, Any]) -> AgentRunOutput:
    """Read the conventional `summary` + `file_changes` keys of a structured output."""
    if not isinstance(output, Mapping):
        raise ProviderResponseError(
            f"structured output must be a JSON object, got {type(output).__name__}"
        )
    raw_changes: List[Any] = output.get("file_changes") or output.get("fileChanges") or []
    try:
        changes = [FileChange.model_validate(c) for c in raw_changes]
    except ValidationError as e:
        raise ProviderResponseError(f"structured output has invalid file changes: {e}") from e
    return AgentRunOutput(
        summary=str(output.get("summary") or ""),
        file_changes=changes,
        raw_output=dict(output),
    )
