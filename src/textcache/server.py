"""Process entry point: API listener plus metrics listener."""

import asyncio

import uvicorn
from fastapi import FastAPI

from textcache.api.app import create_app
from textcache.config import Settings, get_settings
from textcache.lifecycle import ManagedServer, ShutdownCoordinator
from textcache.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def build_servers(settings: Settings, app: FastAPI) -> list[ManagedServer]:
    """Create the API and metrics listeners for ``app``."""
    api_config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        timeout_graceful_shutdown=settings.shutdown_grace_period,
        log_config=None,
    )
    metrics_config = uvicorn.Config(
        app.state.metrics.asgi_app(),
        host=settings.api_host,
        port=settings.metrics_port,
        timeout_graceful_shutdown=settings.shutdown_grace_period,
        log_config=None,
        lifespan="off",
    )
    return [ManagedServer(api_config), ManagedServer(metrics_config)]


def main() -> None:
    """Run the service until SIGINT/SIGTERM."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)

    if not settings.llm_api_key:
        logger.error("LLM_API_KEY is required")
        raise SystemExit(1)

    app = create_app(settings)
    servers = build_servers(settings, app)
    logger.info(
        "Starting Text Cache API",
        api=f"{settings.api_host}:{settings.api_port}",
        metrics=f"{settings.api_host}:{settings.metrics_port}",
        model=settings.llm_model,
        redis_url=settings.redis_url,
    )

    coordinator = ShutdownCoordinator(servers, grace_period=settings.shutdown_grace_period)
    asyncio.run(coordinator.run())


if __name__ == "__main__":
    main()
