"""Repository layer for data access.

This layer abstracts external dependencies (Redis, generative backends)
behind protocol-based interfaces. The repositories are protocol-based
(structural typing), not inheritance-based.
"""

from textcache.protocols import CacheStore, TextGenerator

from .chat_completion_generator import ChatCompletionGenerator
from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStore",
    "TextGenerator",
    "ChatCompletionGenerator",
    "RedisCacheRepository",
]
