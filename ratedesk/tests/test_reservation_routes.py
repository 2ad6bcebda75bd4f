from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

import ratedesk.api.routes.reports as reports_routes
import ratedesk.api.routes.reservations as reservation_routes
from ratedesk.api import deps
from ratedesk.db.base import get_supabase
from ratedesk.tests.fakes import FakeSupabaseClient

reservations_test_app = FastAPI()
reservations_test_app.include_router(reservation_routes.router)
reservations_test_app.include_router(reports_routes.router)

BASE = "/v1.0/properties/prop-1"


def _override_current_user():
    return {"id": "user-1", "email": "maria@example.com"}


def _fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient(
        {
            "property_snapshots": [
                {
                    "property_id": "prop-1",
                    "rooms": [
                        {"id": "r101", "number": "101", "type": "Deluxe", "base_price": 2500},
                        {
                            "id": "r102",
                            "number": "102",
                            "type": "Deluxe",
                            "base_price": 2500,
                            "daily_rates": {
                                "2024-03-10": {"price": 2500, "stop_sale": True},
                                "2024-03-20": {"price": 2500, "min_stay": 3},
                            },
                        },
                    ],
                    "reservations": [
                        {
                            "id": "res-1",
                            "room_id": "r101",
                            "guest_name": "Ada Lovelace",
                            "check_in": "2024-03-01",
                            "check_out": "2024-03-04",
                            "amount": 7500,
                        }
                    ],
                    "version": 1,
                }
            ]
        }
    )


def _use(client: FakeSupabaseClient):
    reservations_test_app.dependency_overrides[deps.check_property_access] = _override_current_user
    reservations_test_app.dependency_overrides[get_supabase] = lambda: client


def _stored_reservations(fake: FakeSupabaseClient) -> list[dict]:
    return fake.tables["property_snapshots"][0]["reservations"]


def test_create_reservation_prices_the_stay():
    fake = _fake_client()
    _use(fake)
    try:
        with TestClient(reservations_test_app) as client:
            response = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r101",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-04",
                    "check_out": "2024-03-06",
                    "board_type": "Bed & Breakfast",
                },
            )

        assert response.status_code == 201
        body = response.json()
        assert body["version"] == 2
        assert body["reservation"]["amount"] == 5000 + 2 * 250
        assert body["reservation"]["status"] == "confirmed"
        assert len(_stored_reservations(fake)) == 2
    finally:
        reservations_test_app.dependency_overrides = {}


def test_create_reservation_keeps_explicit_amount():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            response = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r102",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-01",
                    "check_out": "2024-03-02",
                    "amount": 1999,
                },
            )
        assert response.status_code == 201
        assert response.json()["reservation"]["amount"] == 1999
    finally:
        reservations_test_app.dependency_overrides = {}


def test_create_overlapping_reservation_conflicts():
    fake = _fake_client()
    _use(fake)
    try:
        with TestClient(reservations_test_app) as client:
            response = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r101",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-03",
                    "check_out": "2024-03-05",
                },
            )

        assert response.status_code == 409
        assert response.json()["detail"] == {
            "message": "Room already booked for these dates.",
            "code": "room-occupied",
        }
        assert fake.tables["property_snapshots"][0]["version"] == 1
    finally:
        reservations_test_app.dependency_overrides = {}


def test_create_on_stop_sale_and_restricted_dates():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            stop_sale = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r102",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-09",
                    "check_out": "2024-03-11",
                },
            )
            min_stay = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r102",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-20",
                    "check_out": "2024-03-22",
                },
            )

        assert stop_sale.status_code == 409
        assert stop_sale.json()["detail"]["code"] == "stop-sale"
        assert min_stay.status_code == 409
        assert min_stay.json()["detail"]["kind"] == "min-stay"
    finally:
        reservations_test_app.dependency_overrides = {}


def test_create_with_reversed_dates_is_unprocessable():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            response = client.post(
                f"{BASE}/reservations",
                json={
                    "room_id": "r101",
                    "guest_name": "Grace Hopper",
                    "check_in": "2024-03-06",
                    "check_out": "2024-03-06",
                },
            )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid-range"
    finally:
        reservations_test_app.dependency_overrides = {}


def test_edit_notes_and_extend_stay():
    fake = _fake_client()
    _use(fake)
    try:
        with TestClient(reservations_test_app) as client:
            notes = client.patch(f"{BASE}/reservations/res-1", json={"notes": "Late arrival"})
            extended = client.patch(f"{BASE}/reservations/res-1", json={"check_out": "2024-03-05"})

        assert notes.status_code == 200
        assert notes.json()["reservation"]["notes"] == "Late arrival"
        assert extended.status_code == 200
        assert extended.json()["reservation"]["check_out"] == "2024-03-05"
        assert extended.json()["reservation"]["notes"] == "Late arrival"
        assert extended.json()["version"] == 3
    finally:
        reservations_test_app.dependency_overrides = {}


def test_move_reservation_and_snap_back_on_conflict():
    fake = _fake_client()
    _use(fake)
    try:
        with TestClient(reservations_test_app) as client:
            moved = client.post(
                f"{BASE}/reservations/res-1/move",
                json={"room_id": "r102", "check_in": "2024-03-02"},
            )
            blocked = client.post(
                f"{BASE}/reservations/res-1/move",
                json={"room_id": "r102", "check_in": "2024-03-08"},
            )
            missing = client.post(
                f"{BASE}/reservations/nope/move",
                json={"room_id": "r102", "check_in": "2024-03-08"},
            )

        assert moved.status_code == 200
        assert moved.json()["reservation"]["check_out"] == "2024-03-05"
        assert blocked.status_code == 409
        assert blocked.json()["detail"]["code"] == "stop-sale"
        assert missing.status_code == 404
        stored = _stored_reservations(fake)[0]
        assert (stored["room_id"], stored["check_in"]) == ("r102", "2024-03-02")
    finally:
        reservations_test_app.dependency_overrides = {}


def test_status_changes_follow_the_lifecycle():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            checked_in = client.post(f"{BASE}/reservations/res-1/status", json={"action": "check-in"})
            cancelled = client.post(f"{BASE}/reservations/res-1/status", json={"action": "cancel"})
            listed = client.get(f"{BASE}/reservations", params={"status": "checked-in"})

        assert checked_in.status_code == 200
        assert checked_in.json()["reservation"]["status"] == "checked-in"
        assert cancelled.status_code == 422
        assert cancelled.json()["detail"]["code"] == "invalid-transition"
        assert [item["id"] for item in listed.json()["items"]] == ["res-1"]
    finally:
        reservations_test_app.dependency_overrides = {}


def test_cancelled_stay_frees_the_room():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            before = client.get(
                f"{BASE}/availability", params={"check_in": "2024-03-02", "check_out": "2024-03-03"}
            )
            client.post(f"{BASE}/reservations/res-1/status", json={"action": "cancel"})
            after = client.get(
                f"{BASE}/availability", params={"check_in": "2024-03-02", "check_out": "2024-03-03"}
            )

        assert [room["id"] for room in before.json()] == ["r102"]
        assert [room["id"] for room in after.json()] == ["r101", "r102"]
    finally:
        reservations_test_app.dependency_overrides = {}


def test_quote_by_channel():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            response = client.post(
                f"{BASE}/quote",
                json={
                    "room_id": "r101",
                    "check_in": "2024-03-01",
                    "check_out": "2024-03-03",
                    "source": "Agency",
                },
            )

        assert response.status_code == 200
        body = response.json()
        assert body["nights"] == 2
        assert body["total"] == 4250
        assert body["source"] == "Agency"
    finally:
        reservations_test_app.dependency_overrides = {}


def test_report_summary():
    _use(_fake_client())
    try:
        with TestClient(reservations_test_app) as client:
            response = client.get(
                f"{BASE}/reports/summary",
                params={"start": "2024-03-01", "end": "2024-03-03", "room_type": "Deluxe"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["revenue"] == 7500
        assert body["occupancy_rate"] == 50.0
        assert body["arrivals"] == 1
    finally:
        reservations_test_app.dependency_overrides = {}


def test_edit_cancelled_stay_with_reversed_dates_is_unprocessable():
    fake = _fake_client()
    _use(fake)
    try:
        with TestClient(reservations_test_app) as client:
            client.post(f"{BASE}/reservations/res-1/status", json={"action": "cancel"})
            response = client.patch(
                f"{BASE}/reservations/res-1", json={"check_out": "2024-02-27"}
            )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid-range"
        stored = _stored_reservations(fake)[0]
        assert (stored["status"], stored["check_out"]) == ("cancelled", "2024-03-04")
        assert fake.tables["property_snapshots"][0]["version"] == 2
    finally:
        reservations_test_app.dependency_overrides = {}
