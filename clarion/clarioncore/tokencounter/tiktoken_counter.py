from __future__ import annotations
from functools import lru_cache

import tiktoken
from tiktoken import Encoding

DEFAULT_MODEL = "gpt-4o"
FALLBACK_ENCODING = "cl100k_base"


@lru_cache(maxsize=32)
def encoding_for(model_name: str) -> Encoding:
    try:
        return tiktoken.encoding_for_model(model_name)
    except KeyError:
        return tiktoken.get_encoding(FALLBACK_ENCODING)


class TiktokenCounter:
    """Exact BPE count for OpenAI-family models (also a good proxy for OpenRouter)."""

    def __init__(self, default_model: str = DEFAULT_MODEL):
        self.default_model = default_model

    def count(self, model_name: str, content: str, *, config_id: str = "") -> int:
        enc = encoding_for(model_name or self.default_model)
        return len(enc.encode(content, disallowed_special=()))
