"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
Internal domain logic should use entities from the entities package.
"""

from textcache.errors import ErrorResponse

from .requests import ApiQuery, OperationQuery
from .responses import HealthCheckResponse, ResultResponse

__all__ = [
    "ApiQuery",
    "OperationQuery",
    "ResultResponse",
    "HealthCheckResponse",
    "ErrorResponse",
]
