"""Request orchestration for text operations.

This service runs the cache-aside pipeline for every operation:
validate, look up the cache, generate on a miss, persist, respond.
"""

import asyncio

from textcache.config import Settings
from textcache.entities import CacheEntryEntity, OperationRequest
from textcache.errors import (
    BadRequestError,
    EmptyGenerationError,
    GenerationUnavailableError,
    StorageError,
    TextCacheError,
)
from textcache.logging_config import get_logger
from textcache.metrics import Metrics
from textcache.protocols import CacheStore, TextGenerator
from textcache.services.prompt_builder import PromptBuilder

logger = get_logger(__name__)


class TextService:
    """Cache-aside orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: Redis in production, an in-memory double in tests
    - TextGenerator: any chat-completions backend, a stub in tests

    Pipeline per request:
        validate -> cache lookup (translate only) -> hit: respond
                                                  -> miss: build prompt -> generate
                                                     -> validate -> persist -> respond

    A lookup failure is fatal to the request; an insert failure is logged
    and the generated text is still returned. Concurrent misses for the
    same key may both generate and both insert; the first stored record
    wins on later lookups.

    Example:
        ```python
        service = TextService.create(
            settings=settings,
            repository=RedisCacheRepository.create(settings),
            generator=ChatCompletionGenerator.create(settings),
            metrics=Metrics(),
        )
        result = await service.process(
            OperationRequest(Operation.TRANSLATE, keyword="hello", context="greeting")
        )
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        generator: TextGenerator,
        prompt_builder: PromptBuilder,
        metrics: Metrics,
        max_param_length: int = 1024,
        generation_timeout: float | None = None,
        storage_timeout: float | None = None,
    ) -> None:
        """Initialize the text service.

        Args:
            repository: Cache storage backend (required).
            generator: Generative backend (required).
            prompt_builder: Renders operation templates (required).
            metrics: Request and cache-hit counters (required).
            max_param_length: Maximum characters for keyword and context.
            generation_timeout: Upper bound in seconds for one backend call.
            storage_timeout: Upper bound in seconds for one cache lookup or insert.
        """
        self._repository = repository
        self._generator = generator
        self._prompts = prompt_builder
        self._metrics = metrics
        self._max_param_length = max_param_length
        self._generation_timeout = generation_timeout
        self._storage_timeout = storage_timeout

    @classmethod
    def create(
        cls,
        settings: Settings,
        repository: CacheStore,
        generator: TextGenerator,
        metrics: Metrics,
    ) -> "TextService":
        """Factory method to create TextService from settings.

        Args:
            settings: Application settings (templates, limits, timeouts)
            repository: Cache storage backend
            generator: Generative backend
            metrics: Request and cache-hit counters

        Returns:
            Configured TextService instance
        """
        return cls(
            repository=repository,
            generator=generator,
            prompt_builder=PromptBuilder(settings.prompts),
            metrics=metrics,
            max_param_length=settings.max_param_length,
            generation_timeout=settings.llm_timeout,
            storage_timeout=settings.storage_timeout,
        )

    def validate(self, request: OperationRequest) -> None:
        """Check request parameters before any storage or backend call.

        Raises:
            BadRequestError: Missing keyword, or keyword/context too long
        """
        if not request.keyword:
            raise BadRequestError("Missing required parameter: keyword")

        if (
            len(request.keyword) > self._max_param_length
            or len(request.context) > self._max_param_length
        ):
            raise BadRequestError(
                f"Input length exceeds limit ({self._max_param_length} characters)",
                {"max_length": self._max_param_length},
            )

    async def process(self, request: OperationRequest) -> str:
        """Serve one operation request.

        Args:
            request: The validated-or-not operation request

        Returns:
            The result text (never empty)

        Raises:
            BadRequestError: Invalid parameters
            StorageError: Cache lookup failed
            GenerationUnavailableError: Backend unreachable or timed out
            EmptyGenerationError: Backend produced no text
        """
        self.validate(request)
        operation = request.operation.value
        log = logger.bind(operation=operation, keyword=request.keyword, context=request.context)

        if request.operation.is_cached:
            cached = await self._lookup(request, log)
            if cached is not None:
                log.info("Cache hit")
                self._metrics.record_cache_hit(operation)
                return cached.result
            log.info("Cache miss, querying generative backend")

        self._metrics.record_request(operation)
        result = await self._generate(request, log)

        if request.operation.is_cached:
            await self._persist(request, result, log)

        return result

    async def _storage_call(self, awaitable, action: str):
        """Await a store call, converting a timeout into StorageError."""
        if self._storage_timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self._storage_timeout)
        except asyncio.TimeoutError as e:
            raise StorageError(
                f"Cache {action} timed out", {"timeout": self._storage_timeout}
            ) from e

    async def _lookup(self, request: OperationRequest, log) -> CacheEntryEntity | None:
        try:
            return await self._storage_call(
                self._repository.lookup(request.keyword, request.context), "lookup"
            )
        except StorageError as e:
            log.error("Cache lookup failed", error=str(e))
            raise

    async def _generate(self, request: OperationRequest, log) -> str:
        prompt = self._prompts.build(request.operation, request.keyword, request.context)

        try:
            if self._generation_timeout is None:
                result = await self._generator.generate(prompt.system, *prompt.texts)
            else:
                result = await asyncio.wait_for(
                    self._generator.generate(prompt.system, *prompt.texts),
                    timeout=self._generation_timeout,
                )
        except asyncio.TimeoutError as e:
            log.error("Generation timed out", timeout=self._generation_timeout)
            raise GenerationUnavailableError(
                "Generative backend timed out", {"timeout": self._generation_timeout}
            ) from e
        except TextCacheError as e:
            log.error("Generation failed", error=str(e), code=e.code)
            raise

        if not result:
            log.error("Generative backend returned an empty result")
            raise EmptyGenerationError()

        return result

    async def _persist(self, request: OperationRequest, result: str, log) -> None:
        entry = CacheEntryEntity(keyword=request.keyword, context=request.context, result=result)
        try:
            await self._storage_call(self._repository.insert(entry), "insert")
        except StorageError as e:
            # Degrades to a slower next request, never to a failed one
            log.error("Failed to cache result", error=str(e))
            return
        log.info("Cached result")

    async def is_healthy(self) -> dict[str, bool]:
        """Check storage and backend reachability.

        Returns:
            Dict with ``cache_healthy`` and ``generator_healthy`` flags
        """
        cache_healthy, generator_healthy = await asyncio.gather(
            self._repository.health_check(),
            self._generator.is_available(),
        )
        return {"cache_healthy": cache_healthy, "generator_healthy": generator_healthy}
