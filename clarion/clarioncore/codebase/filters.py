# filters.py
from __future__ import annotations
import fnmatch
import re
from typing import Dict, Iterable, List, Optional, Sequence

from clarion.clarioncore.agent.models import FilterSet
from clarion.clarioncore.codebase.models import CodeFile, Codebase
from clarion.clarioncore.errors import FilterError

INCLUDED = "included"
EXCLUDED = "excluded"


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def match_globs(path: str, patterns: Iterable[str]) -> bool:
    """
    Shell-style match of the full relative path against any pattern.
    `*` also matches `/`, so `node_modules/**` covers every nested file.
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(path, normalize_path(pattern)):
            return True
    return False


def is_path_included(
    path: str, include_globs: Sequence[str], exclude_globs: Sequence[str]
) -> bool:
    path = normalize_path(path)
    # exclude always wins
    if match_globs(path, exclude_globs):
        return False
    if not include_globs:
        return True
    return match_globs(path, include_globs)


def _compile_content_regex(expr: str) -> Optional[re.Pattern]:
    if not expr:
        return None
    try:
        return re.compile(expr, re.MULTILINE)
    except re.error as e:
        raise FilterError(f"invalid content_regex_include {expr!r}: {e}") from e


def apply_filter(codebase: Codebase, filter_set: Optional[FilterSet]) -> Codebase:
    """Return a new Codebase holding only the files selected by `filter_set`."""
    if filter_set is None:
        return Codebase(root_path=codebase.root_path, files=list(codebase.files))

    content_re = _compile_content_regex(filter_set.content_regex_include)

    kept: List[CodeFile] = []
    for file in codebase.files:
        if not is_path_included(
            file.path, filter_set.include_globs, filter_set.exclude_globs
        ):
            continue
        # structure-only files carry no content to judge
        if content_re is not None and file.content is not None:
            if not content_re.search(file.text()):
                continue
        kept.append(file)

    if filter_set.max_total_files and len(kept) > filter_set.max_total_files:
        allowed = {
            f.path
            for f in sorted(kept, key=lambda f: f.path)[: filter_set.max_total_files]
        }
        kept = [f for f in kept if f.path in allowed]

    return Codebase(root_path=codebase.root_path, files=kept)


def get_file_statuses(
    paths: Iterable[str],
    include_globs: Optional[Sequence[str]] = None,
    exclude_globs: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Classify paths as "included"/"excluded" without touching their content."""
    include = list(include_globs or [])
    exclude = list(exclude_globs or [])
    return {
        p: INCLUDED if is_path_included(p, include, exclude) else EXCLUDED
        for p in paths
    }
