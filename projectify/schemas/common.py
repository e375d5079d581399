"""
Shared Pydantic v2 building blocks.

Every response is wrapped in an envelope carrying `success` and an
optional human-readable `message`. JSON keys are camelCase on the wire;
Python attributes stay snake_case (populate_by_name=True accepts both).
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every schema that crosses the HTTP boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel):
    """Success envelope. Subclasses add the payload field."""

    success: bool = True
    message: str | None = None


class FieldError(CamelModel):
    """One field-level validation failure."""

    field: str
    message: str


class ErrorResponse(CamelModel):
    """
    Failure envelope rendered by the exception handlers.

    `error` is a short machine-readable code (e.g. "not_found").
    `errors` is only present for request validation failures.
    """

    success: bool = False
    message: str
    error: str
    errors: list[FieldError] | None = Field(default=None)


class HealthEnvelope(Envelope):
    """Liveness report for GET /health."""

    status: str = "OK"
    environment: str
    uptime: float = Field(..., description="Seconds since the process started.")
    timestamp: datetime.datetime
    port: int
