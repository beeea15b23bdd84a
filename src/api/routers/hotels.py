# This file defines hotel filter and change-notification endpoints under the versioned API path.
# It exists so clients can ask which hotels offer every requested service.
# The change endpoint lets the document store trigger push create/update/delete events.
# Change events are processed after the response is sent; their failures are only logged.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from src.api.dependencies import get_change_dispatcher, get_hotel_service
from src.api.schemas.common import ErrorResponse
from src.api.schemas.hotel_schemas import (
    HotelChangeAccepted,
    HotelChangeEvent,
    HotelIdRow,
    ServiceFilterRequest,
)
from src.api.services.hotel_service import HotelService
from src.sync.dispatcher import ChangeDispatcher, classify_change

router = APIRouter(prefix="/hotels", tags=["hotels"])
HotelServiceDep = Annotated[HotelService, Depends(get_hotel_service)]
DispatcherDep = Annotated[ChangeDispatcher, Depends(get_change_dispatcher)]

FILTER_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    422: {"model": ErrorResponse, "description": "No services provided or store not configured."},
    500: {"model": ErrorResponse, "description": "Relational store failure."},
}


@router.get("/filter", response_model=list[HotelIdRow], responses=FILTER_ERROR_RESPONSES)
def filter_hotels(
    service: HotelServiceDep,
    services: list[str] = Query(default=[]),
) -> list[dict[str, str]]:
    return service.find_hotels_with_services(services)


@router.post("/filter", response_model=list[HotelIdRow], responses=FILTER_ERROR_RESPONSES)
def filter_hotels_payload(
    payload: ServiceFilterRequest,
    service: HotelServiceDep,
) -> list[dict[str, str]]:
    return service.find_hotels_with_services(payload.services)


@router.post("/{hotel_id}/changes", response_model=HotelChangeAccepted, status_code=202)
def hotel_changed(
    hotel_id: str,
    event: HotelChangeEvent,
    background_tasks: BackgroundTasks,
    dispatcher: DispatcherDep,
) -> dict[str, object]:
    change = classify_change(event.before, event.after)
    background_tasks.add_task(dispatcher.on_change, hotel_id, event.before, event.after)
    return {"hotel_id": hotel_id, "change": change.value, "accepted": True}
