"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Details about a failed query: HTTP status or backend error code."""

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    code: str | None = None
    reason: str
