from typing import Annotated, Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from textcache.api.dependencies import HandlerDep, build_lifespan
from textcache.api.middleware import RateLimitMiddleware, RequestSizeMiddleware
from textcache.config import Settings, get_settings
from textcache.dto import ApiQuery, HealthCheckResponse, OperationQuery, ResultResponse
from textcache.metrics import Metrics
from textcache.protocols import CacheStore, TextGenerator
from textcache.services import TokenBucketRateLimiter

API_VERSION = "0.1.0"


def create_app(
    settings: Settings | None = None,
    *,
    repository: CacheStore | None = None,
    generator: TextGenerator | None = None,
    metrics: Metrics | None = None,
    rate_limiter: TokenBucketRateLimiter | None = None,
) -> FastAPI:
    """Build the HTTP application.

    Args:
        settings: Configuration snapshot. Defaults to the environment.
        repository: CacheStore override (tests).
        generator: TextGenerator override (tests).
        metrics: Counters; a fresh registry is created when omitted.
        rate_limiter: Limiter override; built from settings when omitted.

    Returns:
        Configured FastAPI application. ``app.state.metrics`` holds the
        counters so the metrics listener can serve the same registry.
    """
    settings = settings or get_settings()
    metrics = metrics or Metrics()

    app = FastAPI(
        title="Text Cache API",
        description="Caching front-end for LLM translate, format and summarize requests",
        version=API_VERSION,
        lifespan=build_lifespan(settings, metrics, repository=repository, generator=generator),
    )
    app.state.settings = settings
    app.state.metrics = metrics

    # Starlette runs the last added middleware first: rate limit, then size guard
    app.add_middleware(
        RequestSizeMiddleware,  # type: ignore[arg-type]
        max_url_length=settings.max_url_length,
    )
    if settings.rate_limit_enabled:
        limiter = rate_limiter or TokenBucketRateLimiter(
            rate=settings.rate_limit_rate,
            burst=settings.rate_limit_burst,
            ttl=settings.rate_limit_ttl,
        )
        app.state.rate_limiter = limiter
        app.add_middleware(
            RateLimitMiddleware,  # type: ignore[arg-type]
            limiter=limiter,
            identity_header=settings.rate_limit_identity_header,
        )
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Text Cache API",
            "version": API_VERSION,
            "endpoints": {
                "translate": "/translate?keyword=&context=",
                "format": "/format?keyword=",
                "summarize": "/summarize?keyword=",
                "api": "/api?operation=&keyword=&context=",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/translate", response_model=ResultResponse)
    async def translate(
        handler: HandlerDep, query: Annotated[OperationQuery, Query()]
    ) -> ResultResponse:
        """Translate ``keyword``, optionally disambiguated by ``context``. Cached."""
        return await handler.translate(query)

    @app.get("/format", response_model=ResultResponse)
    async def format_text(
        handler: HandlerDep, query: Annotated[OperationQuery, Query()]
    ) -> ResultResponse:
        """Reformat ``keyword``. Not cached."""
        return await handler.format(query)

    @app.get("/summarize", response_model=ResultResponse)
    async def summarize(
        handler: HandlerDep, query: Annotated[OperationQuery, Query()]
    ) -> ResultResponse:
        """Summarize ``keyword``. Not cached."""
        return await handler.summarize(query)

    @app.get("/api", response_model=ResultResponse)
    async def api(handler: HandlerDep, query: Annotated[ApiQuery, Query()]) -> ResultResponse:
        """Single endpoint selecting the operation with ``operation``."""
        return await handler.run(query.operation, query)

    return app
