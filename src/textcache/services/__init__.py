"""Service layer for business logic.

This layer contains the core orchestration and the pure helpers it uses.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .prompt_builder import Prompt, PromptBuilder, resolve_operation
from .rate_limiter import TokenBucketRateLimiter
from .text_service import TextService

__all__ = [
    "Prompt",
    "PromptBuilder",
    "TextService",
    "TokenBucketRateLimiter",
    "resolve_operation",
]
