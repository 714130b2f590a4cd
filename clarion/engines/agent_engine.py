from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from clarion.clarioncore.agent.models import Agent, AgentRunRequest, FileChange, FilterSet
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    CredentialResolver,
)
from clarion.clarioncore.ai_clients.prompt import (
    build_chat_messages,
    build_prompt_json,
    build_prompt_markdown,
)
from clarion.clarioncore.ai_clients.protocols.protocol_files import ApplyChangesResult
from clarion.clarioncore.ai_clients.providers.registry import ProviderRegistry
from clarion.clarioncore.codebase.files import (
    apply_file_changes,
    read_codebase_files,
    read_files,
)
from clarion.clarioncore.codebase.filters import apply_filter, get_file_statuses
from clarion.clarioncore.codebase.loader import CodebaseLoader, LocalFSLoader
from clarion.clarioncore.codebase.models import Codebase
from clarion.clarioncore.codebase.tree import FileTreeNode, build_file_tree
from clarion.clarioncore.errors import ProviderNotImplementedError
from clarion.clarioncore.tokencounter.counter import (
    TokenCounterService,
    format_codebase_for_count,
)

logger = logging.getLogger(__name__)


@dataclass
class PreparedPrompt:
    markdown_prompt: str
    json_prompt: str

    def to_dict(self) -> Dict[str, str]:
        return {"markdownPrompt": self.markdown_prompt, "jsonPrompt": self.json_prompt}


class AgentEngine:
    """
    Everything the HTTP layer needs for one request, minus the transport:
    load -> filter -> build prompt -> generate, plus token estimates and
    applying the model's file changes.
    """

    def __init__(
        self,
        providers: ProviderRegistry,
        token_counter: TokenCounterService,
        credentials: CredentialResolver,
        loader: Optional[CodebaseLoader] = None,
    ):
        self.providers = providers
        self.token_counter = token_counter
        self.credentials = credentials
        self.loader = loader or LocalFSLoader()

    # ---- codebase ----
    def load_directory(self, path: str) -> List[FileTreeNode]:
        if not path:
            raise ValueError("Path cannot be empty")
        return build_file_tree(self.loader.load_codebase_structure(path))

    def load_codebase(self, path: str, filter_set: Optional[FilterSet] = None) -> Codebase:
        return apply_filter(self.loader.load_codebase(path), filter_set)

    def preview_filter(
        self,
        file_paths: Sequence[str],
        include_globs: Sequence[str] = (),
        exclude_globs: Sequence[str] = (),
    ) -> Dict[str, str]:
        return get_file_statuses(file_paths, include_globs, exclude_globs)

    def read_files(self, paths: Sequence[str]) -> Dict[str, str]:
        return read_files(paths)

    # ---- runs ----
    def run(
        self,
        request: AgentRunRequest,
        project_root: str,
        codebase_paths: Sequence[str] = (),
    ) -> Dict[str, Any]:
        logger.info(
            "Agent run initiated using provider=%s model=%s",
            request.llm_config.provider,
            request.llm_config.model,
        )
        provider = self.providers.get(request.llm_config.provider)
        content = read_codebase_files(project_root, codebase_paths)
        messages = build_chat_messages(request, content)
        return provider.generate(messages, request, self.credentials)

    def prepare_prompt(
        self,
        request: AgentRunRequest,
        project_root: str,
        codebase_paths: Sequence[str] = (),
    ) -> PreparedPrompt:
        """Markdown view plus the exact wire payload a live run would send."""
        content = read_codebase_files(project_root, codebase_paths)
        messages = build_chat_messages(request, content)
        provider = self.providers.get(request.llm_config.provider)
        try:
            payload = json.dumps(
                provider.build_payload(request, messages), indent=2, ensure_ascii=False
            )
        except ProviderNotImplementedError:
            logger.info(
                "%s has no wire payload yet; showing the prompt JSON instead",
                request.llm_config.provider,
            )
            payload = build_prompt_json(request, content)
        return PreparedPrompt(
            markdown_prompt=build_prompt_markdown(request, content),
            json_prompt=payload,
        )

    def count_tokens(
        self,
        agent: Agent,
        user_prompt: str,
        project_root: str,
        codebase_paths: Sequence[str] = (),
    ) -> int:
        content = read_codebase_files(project_root, codebase_paths)
        return self.token_counter.count(agent, user_prompt, format_codebase_for_count(content))

    # ---- output ----
    def apply_changes(
        self,
        root_path: str,
        changes: Sequence[Union[FileChange, Mapping[str, Any]]],
    ) -> ApplyChangesResult:
        return apply_file_changes(root_path, changes)
