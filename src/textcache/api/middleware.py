"""Request guards that run before any handler logic.

- RateLimitMiddleware: per-identity token bucket admission (429)
- RequestSizeMiddleware: rejects oversized request targets (400)
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from textcache.errors import BadRequestError, RateLimitedError, TextCacheError
from textcache.logging_config import get_logger
from textcache.services import TokenBucketRateLimiter

logger = get_logger(__name__)


def error_response(error: TextCacheError) -> JSONResponse:
    """Render a service error the same way HTTPException detail bodies look."""
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.to_response().model_dump()},
    )


def client_identity(request: Request, header_name: str = "") -> str:
    """Derive the rate limit identity for a request.

    The configured header is read by its canonical name, so
    ``X-Real-IP`` matches whatever casing the proxy sent. Without a
    configured header, or when the header is absent or blank, the
    connection address is used. A request with no connection information
    maps to the empty identity.

    Args:
        request: The incoming request
        header_name: Trusted header carrying the client address, or ""

    Returns:
        Identity string (possibly empty)
    """
    if header_name:
        value = request.headers.get(header_name)
        if value:
            # Proxies append to X-Forwarded-For style headers; the first hop is the client
            first_hop = value.split(",")[0].strip()
            if first_hop:
                return first_hop

    return request.client.host if request.client else ""


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests from identities that exhausted their bucket."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: TokenBucketRateLimiter,
        identity_header: str = "",
        exempt_paths: tuple[str, ...] = ("/health",),
    ) -> None:
        super().__init__(app)
        self._limiter = limiter
        self._identity_header = identity_header
        self._exempt_paths = exempt_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        identity = client_identity(request, self._identity_header)
        if not self._limiter.admit(identity):
            logger.warning("Request rejected by rate limiter", identity=identity, path=request.url.path)
            return error_response(RateLimitedError())

        return await call_next(request)


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose target (path plus query) is too long."""

    def __init__(self, app: ASGIApp, max_url_length: int) -> None:
        super().__init__(app)
        self._max_url_length = max_url_length

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        target_length = len(request.url.path)
        if request.url.query:
            target_length += len(request.url.query) + 1

        if target_length > self._max_url_length:
            logger.warning("Request target too long", length=target_length, path=request.url.path)
            return error_response(
                BadRequestError(
                    f"Input length exceeds limit ({self._max_url_length} characters)",
                    {"max_length": self._max_url_length},
                )
            )

        return await call_next(request)
