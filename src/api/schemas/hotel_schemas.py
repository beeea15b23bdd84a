# This file defines request and response schemas for hotel filter and change endpoints.
# It exists to keep the filter result shape and the change notification payload explicit.
# Filter results stay a plain array of hotel id objects so existing consumers keep working.
# Change payloads mirror the before/after document snapshots emitted by the document store.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HotelIdRow(BaseModel):
    hotel_id: str


class ServiceFilterRequest(BaseModel):
    services: list[str] = Field(default_factory=list)


class HotelChangeEvent(BaseModel):
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class HotelChangeAccepted(BaseModel):
    hotel_id: str
    change: str
    accepted: bool = True
