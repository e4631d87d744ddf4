"""Pydantic models shared across API responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str = Field(..., min_length=8, max_length=128)
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    model_config = ConfigDict(extra="forbid")

    error: ErrorDetail


class WebhookAck(BaseModel):
    """Acknowledgement returned to webhook providers.

    Providers redeliver anything that is not a 2xx, so processing problems
    are reported in ``error`` rather than through the status code.
    """

    received: bool = True
    error: str | None = None
    order_id: str | None = None
    status: str | None = None
