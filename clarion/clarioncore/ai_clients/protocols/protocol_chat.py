# protocol_chat.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Literal, Iterable

from enum import Enum
import json


# ----------------------------- Roles -----------------------------


class Role(str, Enum):
    system = "system"
    user = "user"
    developer = "developer"


RoleName = Literal["system", "user", "developer"]

# ----------------------------- Messages -----------------------------


@dataclass
class ChatMessage:
    role: RoleName
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


# ----------------------------- Prompt views -----------------------------


@dataclass
class PromptFile:
    path: str
    content: str


@dataclass
class PromptData:
    """
    Structured view of everything that goes into a prompt. Files are already
    sorted by path; the markdown and JSON renderings both derive from this.
    """

    files: List[PromptFile] = field(default_factory=list)
    user_task: str = ""
    system_instructions: str = ""
    output_schema: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.files:
            d["Codebase"] = [asdict(f) for f in self.files]
        d["Prompt"] = self.user_task
        d["System Instructions"] = self.system_instructions
        d["Output Schema"] = self.output_schema or None
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ----------------------------- OpenAI bridges -----------------------------


def to_openai_messages(messages: Iterable[ChatMessage]) -> List[Dict[str, str]]:
    """Role/content dicts as accepted by both Responses `input` and chat `messages`."""
    return [m.to_dict() for m in messages]

