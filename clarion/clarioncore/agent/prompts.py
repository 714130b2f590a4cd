from __future__ import annotations
import copy
from typing import Any, Dict

from clarion.clarioncore.agent.models import (
    Agent,
    AgentProfile,
    FilterSet,
    LLMConfig,
    OutputSchema,
)
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    DEFAULT_OPENAI_CONFIG_ID,
    Provider,
)

BASIC_EDITOR_SYSTEM_PROMPT = """You are an expert software developer. Your task is to perform file operations based on the user's request. You must only respond with the specified JSON output schema."""

FILE_OPERATIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A summary of the file changes to be performed.",
        },
        "file_changes": {
            "type": "array",
            "description": "A list of file modifications.",
            "items": {
                "type": "object",
                "properties": {
                    "action": {
                        "type": "string",
                        "enum": ["create", "modify", "delete"],
                    },
                    "path": {
                        "type": "string",
                        "description": "The relative path to the file.",
                    },
                    "new_content": {
                        "type": "string",
                        "description": "The new content for 'create' or 'modify' actions.",
                    },
                },
                "required": ["action", "path"],
            },
        },
    },
    "required": ["summary", "file_changes"],
}


def basic_editor_agent(config_id: str = DEFAULT_OPENAI_CONFIG_ID) -> Agent:
    """The starter agent offered on a fresh install."""
    return Agent(
        profile=AgentProfile(
            id="seed_agent_basic_editor",
            name="Basic File Editor",
            description="A simple agent that can create or modify files based on a prompt.",
            version="1.0.0",
            author="Clarion",
            icon="Code",
        ),
        system_prompt=BASIC_EDITOR_SYSTEM_PROMPT,
        codebase_filters=FilterSet(exclude_globs=["node_modules/**", ".git/**"]),
        output_schema=OutputSchema(schema=copy.deepcopy(FILE_OPERATIONS_SCHEMA)),
        llm_config=LLMConfig(
            provider=Provider.openai.value,
            model="gpt-4o",
            parameters={"temperature": 0.7},
            configId=config_id,
        ),
    )
