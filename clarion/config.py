from __future__ import annotations
import os
import pathlib
from typing import Optional

try:  # py311+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # py310
    import tomli as tomllib  # type: ignore[no-redef]

from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    # http layer (served by an external transport, kept here for bootstrap)
    backend_port: int = 2077

    log_level: str = "INFO"
    log_file: Optional[str] = None  # optional file handler on top of console

    # default OpenAI credential, used when no stored LLM config is available
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None  # None ⇒ default public API

    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # tokenizer model used when an agent does not name one
    tokenizer_default_model: str = "gpt-4o"

    # ignore unexpected keys in TOML/env
    model_config = ConfigDict(extra="ignore")

    @classmethod
    def load(cls, cwd: Optional[pathlib.Path] = None) -> "Settings":
        """
        Load config in order of precedence:
          1) defaults (this model)
          2) ~/.clarion/config.toml
          3) ./.clarion.toml
          4) environment variables (CLARION_* preferred; also accept unprefixed for convenience)
        """
        data: dict = {}

        toml_paths = [
            pathlib.Path(os.path.expanduser("~/.clarion/config.toml")),
            (cwd or pathlib.Path.cwd()) / ".clarion.toml",
        ]
        for p in toml_paths:
            if p.exists():
                try:
                    with p.open("rb") as f:
                        data.update(tomllib.load(f) or {})
                except tomllib.TOMLDecodeError as e:
                    raise RuntimeError(f"Failed to parse TOML at {p}: {e}") from e

        def env(*names: str) -> Optional[str]:
            for n in names:
                v = os.getenv(n)
                if v is not None:
                    return v
            return None

        env_overrides = {
            "backend_port": env("CLARION_BACKEND_PORT", "BACKEND_PORT"),
            "log_level": env("CLARION_LOG_LEVEL", "LOG_LEVEL"),
            "log_file": env("CLARION_LOG_FILE", "LOG_FILE"),
            "openai_api_key": env("CLARION_OPENAI_API_KEY", "OPENAI_API_KEY"),
            "openai_base_url": env("CLARION_OPENAI_BASE_URL", "OPENAI_BASE_URL"),
            "openrouter_base_url": env(
                "CLARION_OPENROUTER_BASE_URL", "OPENROUTER_BASE_URL"
            ),
            "tokenizer_default_model": env("CLARION_TOKENIZER_MODEL"),
        }

        # merge; env wins over files
        data.update({k: v for k, v in env_overrides.items() if v is not None})

        # Let Pydantic validate & coerce types
        return cls(**data)
