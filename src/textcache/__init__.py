"""Text Cache - caching front-end for LLM text operations.

Serves translate, format and summarize requests. Translations are
memoized by (keyword, context) in Redis; everything else goes straight
to an OpenAI-compatible chat completions backend.

Layers:
    - protocols: Interface contracts (CacheStore, TextGenerator)
    - repositories: Data access implementations (Redis, chat completions)
    - services: Business logic (rate limiter, prompt builder, orchestrator)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from textcache.api.app import create_app

    app = create_app()
    ```
"""

from textcache.config import PromptTemplates, Settings, get_settings
from textcache.dto import OperationQuery, ResultResponse
from textcache.entities import CacheEntryEntity, Operation, OperationRequest
from textcache.handlers import OperationHandler
from textcache.metrics import Metrics
from textcache.protocols import CacheStore, TextGenerator
from textcache.repositories import ChatCompletionGenerator, RedisCacheRepository
from textcache.services import PromptBuilder, TextService, TokenBucketRateLimiter

__all__ = [
    # Configuration
    "Settings",
    "PromptTemplates",
    "get_settings",
    # Protocols (interfaces)
    "CacheStore",
    "TextGenerator",
    # Services (business logic)
    "TextService",
    "PromptBuilder",
    "TokenBucketRateLimiter",
    "Metrics",
    # Handlers (HTTP)
    "OperationHandler",
    # Repositories (data access)
    "RedisCacheRepository",
    "ChatCompletionGenerator",
    # Entities (domain models)
    "CacheEntryEntity",
    "Operation",
    "OperationRequest",
    # DTOs (API contracts)
    "OperationQuery",
    "ResultResponse",
]
