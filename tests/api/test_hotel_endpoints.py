# This file tests the hotel filter and change-notification endpoints.
# It exists to lock down the plain-array filter response and the error mapping for sync failures.
# Filter requests run through the real service and resolver on top of a fake store.
# Change notifications must be accepted immediately and handed to the dispatcher.

from __future__ import annotations

from src.api.app import create_app
from src.api.dependencies import get_hotel_service
from src.api.services.hotel_service import HotelService
from src.sync.errors import BackendError, ConfigurationError
from src.sync.service_filter import ServiceFilterResolver
from tests.api.support import (
    FakeFilterStore,
    RecordingDispatcher,
    api_test_client,
    build_test_config,
)

FILTER_ROWS = [
    {"hotel_id": "H1", "service_name": "pool"},
    {"hotel_id": "H1", "service_name": "wifi"},
    {"hotel_id": "H2", "service_name": "wifi"},
    {"hotel_id": "H3", "service_name": "pool"},
    {"hotel_id": "H3", "service_name": "spa"},
    {"hotel_id": "H3", "service_name": "wifi"},
]


def _hotel_service(store: FakeFilterStore) -> HotelService:
    return HotelService(config=build_test_config(), resolver=ServiceFilterResolver(db=store))


def test_filter_get_returns_hotels_offering_all_services() -> None:
    store = FakeFilterStore(FILTER_ROWS)
    with api_test_client(hotel_service=_hotel_service(store)) as client:
        response = client.get("/api/v1/hotels/filter", params=[("services", "wifi"), ("services", "pool")])

    assert response.status_code == 200
    assert response.json() == [{"hotel_id": "H1"}, {"hotel_id": "H3"}]
    assert store.queries == [{"names": ["wifi", "pool"]}]


def test_filter_get_passes_service_names_unchanged() -> None:
    rows = [{"hotel_id": "H7", "service_name": "bed, breakfast"}, {"hotel_id": "H7", "service_name": " wifi"}]
    store = FakeFilterStore(rows)
    with api_test_client(hotel_service=_hotel_service(store)) as client:
        response = client.get(
            "/api/v1/hotels/filter",
            params=[("services", "bed, breakfast"), ("services", " wifi")],
        )

    assert response.status_code == 200
    assert response.json() == [{"hotel_id": "H7"}]
    assert store.queries == [{"names": ["bed, breakfast", " wifi"]}]


def test_filter_post_returns_plain_array() -> None:
    store = FakeFilterStore(FILTER_ROWS)
    with api_test_client(hotel_service=_hotel_service(store)) as client:
        response = client.post("/api/v1/hotels/filter", json={"services": ["wifi"]})

    assert response.status_code == 200
    assert response.json() == [{"hotel_id": "H1"}, {"hotel_id": "H2"}, {"hotel_id": "H3"}]


def test_filter_without_services_is_invalid_input() -> None:
    store = FakeFilterStore(FILTER_ROWS)
    with api_test_client(hotel_service=_hotel_service(store)) as client:
        get_response = client.get("/api/v1/hotels/filter")
        post_response = client.post("/api/v1/hotels/filter", json={"services": [" "]})

    for response in (get_response, post_response):
        assert response.status_code == 422
        payload = response.json()
        assert payload["error_code"] == "INVALID_INPUT"
        assert payload["message"] == "No services provided"
        assert payload["request_id"]
    assert store.queries == []


def test_filter_without_store_configuration_is_configuration_error() -> None:
    def missing_store() -> HotelService:
        raise ConfigurationError("SYNC_STORE_URL is not set", details={"missing": ["SYNC_STORE_URL"]})

    with api_test_client() as client:
        client.app.dependency_overrides[get_hotel_service] = missing_store
        response = client.get("/api/v1/hotels/filter", params={"services": "wifi"})

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "CONFIGURATION_ERROR"
    assert payload["details"] == {"missing": ["SYNC_STORE_URL"]}


def test_filter_store_failure_hides_trace_by_default() -> None:
    store = FakeFilterStore(error=BackendError("Store query failed", trace="OperationalError: no such table"))
    with api_test_client(hotel_service=_hotel_service(store)) as client:
        response = client.get("/api/v1/hotels/filter", params={"services": "wifi"})

    assert response.status_code == 500
    payload = response.json()
    assert payload["error_code"] == "BACKEND_ERROR"
    assert payload["details"] is None


def test_filter_store_failure_exposes_trace_when_enabled() -> None:
    config = build_test_config(expose_error_trace=True)
    app = create_app(config)
    store = FakeFilterStore(error=BackendError("Store query failed", trace="OperationalError: no such table"))
    with api_test_client(app=app, config=config, hotel_service=_hotel_service(store)) as client:
        response = client.get("/api/v1/hotels/filter", params={"services": "wifi"})

    assert response.status_code == 500
    assert response.json()["details"] == {"trace": "OperationalError: no such table"}


def test_change_notification_is_accepted_and_dispatched() -> None:
    dispatcher = RecordingDispatcher()
    event = {"before": {"services": ["wifi"]}, "after": {"services": ["wifi", "spa"]}}
    with api_test_client(dispatcher=dispatcher) as client:
        response = client.post("/api/v1/hotels/H1/changes", json=event)

    assert response.status_code == 202
    assert response.json() == {"hotel_id": "H1", "change": "update", "accepted": True}
    assert dispatcher.events == [("H1", event["before"], event["after"])]


def test_delete_notification_without_after_document() -> None:
    dispatcher = RecordingDispatcher()
    with api_test_client(dispatcher=dispatcher) as client:
        response = client.post("/api/v1/hotels/H9/changes", json={"before": {"services": []}})

    assert response.status_code == 202
    assert response.json()["change"] == "delete"
    assert dispatcher.events == [("H9", {"services": []}, None)]


def test_malformed_change_payload_uses_shared_error_body() -> None:
    dispatcher = RecordingDispatcher()
    with api_test_client(dispatcher=dispatcher) as client:
        response = client.post("/api/v1/hotels/H1/changes", json={"after": "not-a-document"})

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "VALIDATION_ERROR"
    assert payload["request_id"] == response.headers["x-request-id"]
    assert dispatcher.events == []


def test_unknown_hotel_route_uses_shared_error_body() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/hotels/H1/services")

    assert response.status_code in {404, 405}
    payload = response.json()
    assert payload["error_code"] == "HTTP_ERROR"
    assert set(payload) == {"error_code", "message", "details", "request_id", "timestamp"}
