from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service status indicator. `ok` means the relay process is up and responding.",
        examples=["ok"],
    )
    message: str = Field(examples=["Server is running"])
    timestamp: str = Field(
        description="Current server time (ISO-8601, UTC).",
        examples=["2024-01-01T00:00:00+00:00"],
    )


class ErrorBody(BaseModel):
    message: str
    type: str | None = None


class ErrorEnvelope(BaseModel):
    """Vendor-independent error response."""

    error: ErrorBody

    @classmethod
    def build(cls, *, message: str, error_type: str | None = None) -> dict:
        return cls(error=ErrorBody(message=message, type=error_type)).model_dump(exclude_none=True)


class NotFoundBody(BaseModel):
    message: str
    availableEndpoints: list[str]  # noqa: N815 - wire name


class NotFoundEnvelope(BaseModel):
    error: NotFoundBody
