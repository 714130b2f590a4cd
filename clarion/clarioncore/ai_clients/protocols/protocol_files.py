# protocol_files.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any
import json

# ---------------------- core enums ----------------------


class ChangeKind(str, Enum):
    created = "created"
    updated = "updated"
    deleted = "deleted"


ACTION_TO_KIND = {
    "create": ChangeKind.created,
    "modify": ChangeKind.updated,
    "delete": ChangeKind.deleted,
}


# ---------------------- result schemas ----------------------


@dataclass
class ChangeRecord:
    """Describe a single applied file-level change."""

    kind: ChangeKind
    path: str  # repo-relative, e.g. "src/utils/a.py"
    size_bytes: Optional[int] = None


@dataclass
class ApplyChangesResult:
    root_path: str
    ok: bool = True
    applied: List[ChangeRecord] = field(default_factory=list)
    failed_path: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: Optional[int] = 2) -> str:
        def _default(o):
            if isinstance(o, Enum):
                return o.value
            return str(o)

        return json.dumps(self.to_dict(), indent=indent, default=_default)
