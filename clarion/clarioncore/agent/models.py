from __future__ import annotations

from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, field_validator


_ROOT_PATHS = {"", ".", "/", "\\", "./", ".\\", "../", "..\\"}


# ---------- Enums ----------


class FileAction(str, Enum):
    """Allowed file-change actions."""

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


# ---------- Agent definition ----------


class FilterSet(BaseModel):
    """
    Include/exclude glob rules applied to a codebase.
    - Exclude patterns always win over include patterns.
    - An empty include list means "everything not excluded".
    """

    model_config = ConfigDict(extra="ignore")

    include_globs: List[str] = Field(default_factory=list)
    exclude_globs: List[str] = Field(default_factory=list)
    content_regex_include: str = Field(
        "", description="Keep only files whose text matches this regex (empty = off)"
    )
    max_total_files: int = Field(0, ge=0, description="0 means no cap")


class LLMConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    provider: str = ""
    model: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)
    config_id: str = Field("", alias="configId")

    @field_validator("parameters", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class OutputSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: Dict[str, Any] = Field(default_factory=dict, alias="schema")

    @field_validator("schema_", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class AgentProfile(BaseModel):
    id: str = ""
    name: str = ""
    description: str = ""
    version: str = ""
    author: str = ""
    icon: str = ""


class UserVariableDef(BaseModel):
    name: str
    description: str = ""
    required: bool = False


class Agent(BaseModel):
    """A persisted agent: prompt, filters, output schema and LLM reference."""

    model_config = ConfigDict(extra="ignore")

    profile: AgentProfile = Field(default_factory=AgentProfile)
    system_prompt: str = ""
    codebase_filters: FilterSet = Field(default_factory=FilterSet)
    output_schema: OutputSchema = Field(default_factory=OutputSchema)
    user_variables: List[UserVariableDef] = Field(default_factory=list)
    llm_config: LLMConfig = Field(default_factory=LLMConfig)


# ---------- Run request ----------


class AgentRunRequest(BaseModel):
    """One invocation of an agent. Never persisted by the core."""

    model_config = ConfigDict(extra="ignore")

    system_instruction: str = ""
    prompt: str = ""
    output_schema: Dict[str, Any] = Field(default_factory=dict)
    llm_config: LLMConfig = Field(default_factory=LLMConfig)

    @field_validator("output_schema", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_agent(cls, agent: Agent, prompt: str) -> "AgentRunRequest":
        return cls(
            system_instruction=agent.system_prompt,
            prompt=prompt,
            output_schema=(
                {"schema": agent.output_schema.schema_}
                if agent.output_schema.schema_
                else {}
            ),
            llm_config=agent.llm_config,
        )


# ---------- Structured output ----------


class FileChange(BaseModel):
    """A single file modification produced by the model. Consumed once by the applier."""

    model_config = ConfigDict(extra="ignore")

    action: FileAction
    path: str = Field(..., description="Path relative to the project root")
    original_content: Optional[str] = None
    new_content: Optional[str] = None

    @field_validator("path")
    @classmethod
    def path_cannot_be_root(cls, v: str) -> str:
        if v.strip() in _ROOT_PATHS:
            raise ValueError("path must not point to the project root")
        return v


class AgentRunOutput(BaseModel):
    summary: str = ""
    file_changes: List[FileChange] = Field(default_factory=list)
    raw_output: Dict[str, Any] = Field(default_factory=dict)
