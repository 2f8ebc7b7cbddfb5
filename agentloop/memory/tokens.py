from functools import lru_cache

import tiktoken


@lru_cache(maxsize=None)
def _encoding(name: str) -> "tiktoken.Encoding":
    return tiktoken.get_encoding(name)


def count_tokens(text: str, encoding: str = "cl100k_base") -> int:
    """Number of BPE tokens in `text` under the given tiktoken encoding."""
    return len(_encoding(encoding).encode(text, disallowed_special=()))
