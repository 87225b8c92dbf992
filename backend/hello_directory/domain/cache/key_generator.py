"""
Cache key generation.

Keys are derived from the first call argument with all whitespace runs
collapsed, so that ``"  John   Doe "`` and ``"John Doe"`` share an entry.
The result depends only on the argument text, which keeps keys stable
across restarts and across processes sharing a distributed store.
"""

from typing import Any, Protocol

from ...constants import DEFAULT_CACHE_KEY


def normalize_space(text: str) -> str:
    """Collapse every run of whitespace to one space and trim both ends."""
    return " ".join(text.split())


class KeyGenerator(Protocol):
    """Derives a cache key from the arguments of a cached call."""

    def generate(self, *args: Any) -> str: ...


class SanitisedKeyGenerator:
    """Key generator over the first argument with normalized whitespace."""

    def __init__(self, default_key: str = DEFAULT_CACHE_KEY):
        self.default_key = default_key

    def generate(self, *args: Any) -> str:
        if not args:
            return self.default_key
        first = args[0]
        text = "null" if first is None else str(first)
        return normalize_space(text)
