# errors.py
from __future__ import annotations
from typing import Any, Optional


class ClarionError(Exception):
    """Base class for every error raised by the Clarion core."""


# ---------------------- configuration ----------------------


class ConfigurationError(ClarionError, ValueError):
    """Missing credential, unknown config id, bad agent configuration."""


class UnsupportedProviderError(ConfigurationError):
    def __init__(self, name: str):
        self.provider = name
        super().__init__(
            f"unsupported LLM provider: {name}. Please check your agent configuration."
        )


class SchemaShapeError(ConfigurationError):
    """The output schema is not a JSON-schema-like mapping."""


# ---------------------- providers ----------------------


class ProviderNotImplementedError(ClarionError, NotImplementedError):
    def __init__(self, name: str):
        self.provider = name
        super().__init__(f"provider '{name}' is not yet implemented")


class ProviderError(ClarionError):
    """Network or protocol failure while talking to an LLM provider."""


class ProviderHTTPError(ProviderError):
    def __init__(self, provider: str, status_code: int, body: str):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} API error ({status_code}): {body}")


class ProviderResponseError(ProviderError):
    """The provider answered, but not in the shape we expect."""


class StructuredOutputParseError(ProviderError):
    def __init__(self, message: str, raw_text: str):
        self.raw_text = raw_text
        super().__init__(f"{message}. Raw content: {raw_text}")


# ---------------------- filesystem ----------------------


class CodebaseLoadError(ClarionError):
    def __init__(self, root: str, cause: BaseException):
        self.root = root
        super().__init__(f"failed to load codebase at {root}: {cause}")


class FilterError(ClarionError, ValueError):
    pass


class FileChangeError(ClarionError):
    def __init__(
        self,
        path: str,
        action: str,
        reason: Any,
        result: Optional[Any] = None,
    ):
        self.path = path
        self.action = action
        self.reason = reason
        # partial ApplyChangesResult, when raised from a batch
        self.result = result
        super().__init__(f"Failed to apply change for {path} ({action}): {reason}")
