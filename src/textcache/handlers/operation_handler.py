"""HTTP handlers for text operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error bodies.
"""

from fastapi import HTTPException

from textcache.dto import HealthCheckResponse, OperationQuery, ResultResponse
from textcache.entities import Operation, OperationRequest
from textcache.errors import TextCacheError
from textcache.services import TextService, resolve_operation


def to_http_exception(error: TextCacheError) -> HTTPException:
    """Map a service error to an HTTPException with an ErrorResponse body."""
    return HTTPException(
        status_code=error.status_code,
        detail=error.to_response().model_dump(),
    )


class OperationHandler:
    """HTTP handlers for text operations.

    This handler delegates business logic to TextService and maps its
    error taxonomy onto HTTP status codes:
    - BadRequestError / InvalidOperationError -> 400
    - StorageError (lookup) / EmptyGenerationError -> 500
    - GenerationUnavailableError -> 503
    """

    def __init__(self, text_service: TextService) -> None:
        """Initialize the operation handler.

        Args:
            text_service: The text service for business logic (required).
        """
        self._service = text_service

    async def run(self, operation: Operation | str, query: OperationQuery) -> ResultResponse:
        """Handle one operation request.

        Args:
            operation: Operation or operation name
            query: The query parameters DTO

        Returns:
            ResultResponse with the result text

        Raises:
            HTTPException: Mapped from the service's error taxonomy
        """
        try:
            resolved = resolve_operation(operation)
            request = OperationRequest(
                operation=resolved,
                keyword=query.keyword,
                # Context only disambiguates translations
                context=query.context if resolved is Operation.TRANSLATE else "",
            )
            result = await self._service.process(request)
        except TextCacheError as e:
            raise to_http_exception(e) from e

        return ResultResponse(result=result)

    async def translate(self, query: OperationQuery) -> ResultResponse:
        """Handle GET /translate requests."""
        return await self.run(Operation.TRANSLATE, query)

    async def format(self, query: OperationQuery) -> ResultResponse:
        """Handle GET /format requests."""
        return await self.run(Operation.FORMAT, query)

    async def summarize(self, query: OperationQuery) -> ResultResponse:
        """Handle GET /summarize requests."""
        return await self.run(Operation.SUMMARIZE, query)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            HealthCheckResponse with storage and backend reachability
        """
        health = await self._service.is_healthy()
        is_healthy = health["cache_healthy"] and health["generator_healthy"]

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=health["cache_healthy"],
            generator_healthy=health["generator_healthy"],
        )
