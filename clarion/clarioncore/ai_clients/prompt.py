# prompt.py
from __future__ import annotations
import json
from typing import Any, List, Mapping

from clarion.clarioncore.agent.models import AgentRunRequest
from clarion.clarioncore.ai_clients.protocols.protocol_chat import (
    ChatMessage,
    PromptData,
    PromptFile,
    Role,
)
from clarion.engines.prompts import (
    CODEBASE_CONTEXT_HEADER,
    FILE_BLOCK,
    OUTPUT_SCHEMA_HEADER,
    SYSTEM_INSTRUCTIONS_HEADER,
    USER_TASK_HEADER,
)


def sorted_files(codebase_content: Mapping[str, str]) -> List[PromptFile]:
    """The only place prompt file order is decided: lexicographic by path."""
    return [PromptFile(path=p, content=codebase_content[p]) for p in sorted(codebase_content)]


def build_prompt_data(
    request: AgentRunRequest, codebase_content: Mapping[str, str]
) -> PromptData:
    return PromptData(
        files=sorted_files(codebase_content or {}),
        user_task=request.prompt,
        system_instructions=request.system_instruction,
        output_schema=dict(request.output_schema or {}),
    )


def render_codebase_context(files: List[PromptFile]) -> str:
    if not files:
        return ""
    parts = [CODEBASE_CONTEXT_HEADER]
    parts.extend(FILE_BLOCK.format(path=f.path, content=f.content) for f in files)
    return "".join(parts)


def build_chat_messages(
    request: AgentRunRequest, codebase_content: Mapping[str, str]
) -> List[ChatMessage]:
    """
    Messages sent to the provider, always in this order:
      1. system  (only when a system instruction is set)
      2. user    (codebase context, then the task)
    """
    messages: List[ChatMessage] = []
    if request.system_instruction:
        messages.append(
            ChatMessage(role=Role.system.value, content=request.system_instruction)
        )

    data = build_prompt_data(request, codebase_content)
    user_content = render_codebase_context(data.files) + USER_TASK_HEADER + data.user_task
    messages.append(ChatMessage(role=Role.user.value, content=user_content))
    return messages


def build_prompt_markdown(
    request: AgentRunRequest, codebase_content: Mapping[str, str]
) -> str:
    """Human-readable rendering of the full request, for inspection in the UI."""
    data = build_prompt_data(request, codebase_content)
    schema: Any = data.output_schema or None
    return "".join(
        [
            render_codebase_context(data.files),
            USER_TASK_HEADER,
            data.user_task,
            "\n\n",
            SYSTEM_INSTRUCTIONS_HEADER,
            data.system_instructions,
            "\n\n",
            OUTPUT_SCHEMA_HEADER,
            "```json\n",
            json.dumps(schema, indent=2, ensure_ascii=False, sort_keys=True),
            "\n```\n",
        ]
    )


def build_prompt_json(
    request: AgentRunRequest, codebase_content: Mapping[str, str]
) -> str:
    return build_prompt_data(request, codebase_content).to_json(indent=2)
