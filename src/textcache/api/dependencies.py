"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from textcache.config import Settings
from textcache.handlers import OperationHandler
from textcache.logging_config import get_logger
from textcache.metrics import Metrics
from textcache.protocols import CacheStore, TextGenerator
from textcache.repositories import ChatCompletionGenerator, RedisCacheRepository
from textcache.services import TextService

logger = get_logger(__name__)


def get_handler(request: Request) -> OperationHandler:
    """Dependency injection for OperationHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The OperationHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "operation_handler", None)
    if handler is None:
        raise RuntimeError("OperationHandler not initialized. Check lifespan setup.")
    return handler


def build_lifespan(
    settings: Settings,
    metrics: Metrics,
    repository: CacheStore | None = None,
    generator: TextGenerator | None = None,
):
    """Create the lifespan context manager for one app instance.

    Repository and generator default to the production implementations
    built from ``settings``; tests pass in-memory doubles instead.

    Args:
        settings: Immutable configuration snapshot
        metrics: Counters shared with the metrics listener
        repository: Optional CacheStore override
        generator: Optional TextGenerator override

    Returns:
        An async context manager factory suitable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initializes all layers and stores them in app.state.

        1. Repository and generator (I/O resources)
        2. Service (business logic) - app.state.text_service
        3. Handler (HTTP endpoints) - app.state.operation_handler

        Cleanup closes the repository and generator connections.
        """
        repo = repository or RedisCacheRepository.create(settings)
        gen = generator or ChatCompletionGenerator.create(settings)

        text_service = TextService.create(
            settings=settings,
            repository=repo,
            generator=gen,
            metrics=metrics,
        )
        operation_handler = OperationHandler(text_service=text_service)

        app.state.text_service = text_service
        app.state.operation_handler = operation_handler
        app.state.repository = repo
        app.state.generator = gen

        logger.info(
            "Text service initialized",
            model=gen.model_name,
            rate_limit_enabled=settings.rate_limit_enabled,
        )

        try:
            yield
        finally:
            del app.state.operation_handler
            del app.state.text_service
            del app.state.repository
            del app.state.generator
            await gen.close()
            await repo.close()
            logger.info("Text service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[OperationHandler, Depends(get_handler)]