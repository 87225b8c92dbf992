"""
Greeting Service

Builds the greeting for an optional name, served through the
``helloCache`` namespace.
"""

from typing import Optional

import structlog

from ..constants import HELLO_CACHE
from ..domain.cache.domain_services import CachedOperation
from ..domain.cache.key_generator import normalize_space

logger = structlog.get_logger()

DEFAULT_GREETING_NAME = "World"


def build_greeting(name: Optional[str]) -> str:
    """Greeting text for ``name``; blank or missing names greet the world."""
    normalized = normalize_space(name) if name is not None else ""
    return f"Hello, {normalized or DEFAULT_GREETING_NAME}!"


class HelloService:
    """Cached greeting operation."""

    def __init__(self, cached_operation: CachedOperation):
        self.cached_operation = cached_operation
        self.hello = cached_operation.cached(HELLO_CACHE)(self._generate)

    def _generate(self, name: Optional[str] = None) -> str:
        logger.info("Generating greeting", name=name)
        return build_greeting(name)
