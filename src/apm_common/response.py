"""Unified API error body.

Success responses are the endpoint's own payload ({"trade": ...}, {"markets": ...}).
Failures always use this shape:
{
    "code": 3001,             // AppError code
    "error": "Market not found: ...",
    "details": { ... },       // null unless the error carries extras
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    code: int
    error: str
    details: dict[str, Any] | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def error_response(
    code: int,
    message: str,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    resp = ErrorResponse(code=code, error=message, details=details)
    if request_id:
        resp.request_id = request_id
    return resp
