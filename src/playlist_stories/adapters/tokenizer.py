"""tiktoken-backed token counting for the budgeted stages."""

from __future__ import annotations

from functools import lru_cache

import tiktoken

from playlist_stories.core.token_budget import TokenCounter

DEFAULT_TOKENIZER_MODEL = "gpt-4-turbo"


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def build_token_counter(model: str = DEFAULT_TOKENIZER_MODEL) -> TokenCounter:
    """Return a deterministic ``word -> token count`` function for ``model``."""
    encoding = _encoding_for(model)

    def _count(word: str) -> int:
        return len(encoding.encode_ordinary(word))

    return _count
