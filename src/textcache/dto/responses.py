"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ResultResponse(BaseModel):
    """Response DTO for every text operation."""

    result: str = Field(..., description="The generated or cached text", min_length=1)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    generator_healthy: bool = Field(
        ...,
        description="Whether the generative backend is reachable",
    )
