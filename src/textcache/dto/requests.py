"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class OperationQuery(BaseModel):
    """Query parameters shared by every operation endpoint.

    Emptiness and length are checked by the service so that a missing
    keyword is reported as 400 rather than a schema error.
    """

    keyword: str = Field("", description="The text to translate, format or summarize")
    context: str = Field(
        "",
        description="Sentence the keyword was taken from (translate only)",
    )


class ApiQuery(OperationQuery):
    """Query parameters for the single endpoint with an operation selector."""

    operation: str = Field("", description="One of: translate, format, summarize")
