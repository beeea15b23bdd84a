# This file defines shared schema pieces reused by multiple API endpoints.
# It exists so error payloads stay consistent and can be referenced in OpenAPI responses.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime
