"""
API tests for /bookings
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import timedelta
from decimal import Decimal

from utils.timezone import get_operational_date


TODAY = get_operational_date()


def iso(days):
    return (TODAY + timedelta(days=days)).isoformat()


def money(value):
    return Decimal(str(value))


@pytest.fixture
def rooms(client):
    created = []
    for name in ("Brishti Bilash", "Purnota", "Tent"):
        response = client.post("/rooms", json={"name": name, "capacity": 4, "category": "Cottage"})
        assert response.status_code == 201
        created.append(response.json()["id"])
    return created


def single_body(room_id, check_in, check_out, booking_no="BK-001", **overrides):
    body = {
        "booking_no": booking_no,
        "guest_name": "Rahim Uddin",
        "guest_phone": "01712345678",
        "guest_email": "rahim@example.com",
        "room_id": room_id,
        "check_in": check_in,
        "check_out": check_out,
        "price": 5000,
        "advance": 2000,
        "vat_applicable": True,
    }
    body.update(overrides)
    return body


def multi_body(stays, booking_no="BK-M01", **overrides):
    body = {
        "booking_no": booking_no,
        "guest_name": "Karim Ahmed",
        "guest_phone": "01812345678",
        "rooms": [
            {"room_id": r, "check_in_date": i, "check_out_date": o, "price_per_night": p}
            for r, i, o, p in stays
        ],
        "advance": 3000,
        "vat_applicable": True,
    }
    body.update(overrides)
    return body


class TestCreate:

    def test_create_single_room_booking(self, client, rooms, staff_headers):
        response = client.post("/bookings", json=single_body(rooms[0], iso(10), iso(12)), headers=staff_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["kind"] == "single"
        assert data["status"] == "Confirmed"
        assert data["room_name"] == "Brishti Bilash"
        assert money(data["vat_amount"]) == Decimal("125")
        assert money(data["checkout_payable"]) == Decimal("3125")
        assert money(data["revenue"]) == Decimal("2000")
        assert money(data["pending_amount"]) == Decimal("3000")
        assert data["rooms"] == []

    def test_create_multi_room_booking(self, client, rooms):
        response = client.post("/bookings", json=multi_body([
            (rooms[0], iso(1), iso(2), 5000),
            (rooms[1], iso(2), iso(3), 5500),
        ]))

        assert response.status_code == 201
        data = response.json()
        assert data["kind"] == "multi"
        assert data["room_id"] is None
        assert data["total_rooms"] == 2
        assert money(data["price"]) == Decimal("10500")
        assert money(data["vat_amount"]) == Decimal("263")
        assert [stay["room_name"] for stay in data["rooms"]] == ["Brishti Bilash", "Purnota"]
        assert data["room_name"] == "Brishti Bilash, Purnota"

    def test_conflict_returns_409_naming_the_blocking_guest(self, client, rooms):
        assert client.post("/bookings", json=single_body(rooms[0], iso(1), iso(3), booking_no="BK-1")).status_code == 201

        response = client.post("/bookings", json=single_body(
            rooms[0], iso(2), iso(4), booking_no="BK-2", guest_name="Someone Else"
        ))

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert "Rahim Uddin" in detail
        assert "BK-1" in detail

    def test_back_to_back_is_accepted(self, client, rooms):
        assert client.post("/bookings", json=single_body(rooms[0], iso(1), iso(2), booking_no="BK-1")).status_code == 201
        assert client.post("/bookings", json=single_body(rooms[0], iso(2), iso(3), booking_no="BK-2")).status_code == 201

    def test_sibling_overlap_is_a_bad_request(self, client, rooms):
        response = client.post("/bookings", json=multi_body([
            (rooms[0], iso(1), iso(3), 5000),
            (rooms[0], iso(2), iso(4), 5000),
        ]))
        assert response.status_code == 400

    @pytest.mark.parametrize("overrides", [
        {"check_out": None},
        {"guest_phone": "12345"},
        {"guest_email": "not-an-email"},
        {"guest_email": "a@b..c"},
        {"price": None},
        {"advance": -1},
        {"check_in_time": "25:00"},
    ])
    def test_invalid_single_booking_is_rejected(self, client, rooms, overrides):
        body = single_body(rooms[0], iso(1), iso(3))
        body.update(overrides)
        assert client.post("/bookings", json=body).status_code == 422

    def test_check_out_must_follow_check_in(self, client, rooms):
        response = client.post("/bookings", json=single_body(rooms[0], iso(3), iso(3)))
        assert response.status_code == 422

    def test_room_id_and_rooms_are_exclusive(self, client, rooms):
        body = single_body(rooms[0], iso(1), iso(3))
        body["rooms"] = [{"room_id": rooms[1], "check_in_date": iso(1), "check_out_date": iso(2), "price_per_night": 100}]
        assert client.post("/bookings", json=body).status_code == 422

    def test_room_stay_dates_are_validated(self, client, rooms):
        response = client.post("/bookings", json=multi_body([(rooms[0], iso(2), iso(1), 5000)]))
        assert response.status_code == 422

    def test_multi_room_dates_span_the_stays(self, client, rooms):
        response = client.post("/bookings", json=multi_body([
            (rooms[0], iso(3), iso(5), 5000),
            (rooms[1], iso(1), iso(2), 5500),
        ]))

        assert response.status_code == 201
        assert response.json()["check_in"] == iso(1)
        assert response.json()["check_out"] == iso(5)

    @pytest.mark.parametrize("dates", [
        {"check_in": iso(300)},
        {"check_out": iso(300)},
        {"check_in": iso(1), "check_out": iso(3)},
    ])
    def test_multi_room_dates_must_match_the_stays(self, client, rooms, dates):
        body = multi_body([(rooms[0], iso(1), iso(2), 5000)])
        body.update(dates)
        assert client.post("/bookings", json=body).status_code == 422

    def test_multi_room_refund_is_tiered_on_the_first_stay(self, client, rooms):
        body = multi_body([(rooms[0], iso(1), iso(2), 5000)], check_in=iso(1), check_out=iso(2))
        booking_id = client.post("/bookings", json=body).json()["id"]

        quote = client.get(f"/bookings/{booking_id}/refund-quote").json()

        assert quote["days_until_check_in"] == 1
        assert money(quote["refund_amount"]) == Decimal("0")

    def test_unknown_room_is_404(self, client, rooms):
        response = client.post("/bookings", json=single_body(9999, iso(1), iso(3)))
        assert response.status_code == 404


class TestReadAndList:

    @pytest.fixture(autouse=True)
    def _bookings(self, client, rooms):
        client.post("/bookings", json=single_body(rooms[0], iso(5), iso(6), booking_no="BK-EARLY"))
        client.post("/bookings", json=single_body(rooms[1], iso(20), iso(22), booking_no="BK-LATE", guest_name="Nadia Islam"))
        client.post("/bookings", json=multi_body([(rooms[2], iso(10), iso(11), 2000)], booking_no="BK-MULTI"))

    def test_list_is_ordered_by_check_in_descending(self, client):
        response = client.get("/bookings")

        assert response.status_code == 200
        assert [b["booking_no"] for b in response.json()] == ["BK-LATE", "BK-MULTI", "BK-EARLY"]

    def test_search_by_guest_name(self, client):
        response = client.get("/bookings", params={"search": "nadia"})
        assert [b["booking_no"] for b in response.json()] == ["BK-LATE"]

    def test_search_by_room_name_of_room_stay(self, client):
        response = client.get("/bookings", params={"search": "Tent"})
        assert [b["booking_no"] for b in response.json()] == ["BK-MULTI"]

    def test_filter_by_status(self, client):
        booking_id = client.get("/bookings/by-number/BK-EARLY").json()["id"]
        client.post(f"/bookings/{booking_id}/cancel", json={"custom_refund_amount": 0})

        response = client.get("/bookings", params={"status": "Cancelled"})
        assert [b["booking_no"] for b in response.json()] == ["BK-EARLY"]

    def test_filter_by_check_in_range(self, client):
        response = client.get("/bookings", params={"date_from": iso(6), "date_to": iso(15)})
        assert [b["booking_no"] for b in response.json()] == ["BK-MULTI"]

    def test_invalid_range(self, client):
        assert client.get("/bookings", params={"date_from": iso(6), "date_to": iso(1)}).status_code == 400

    def test_get_by_id_and_number(self, client):
        by_number = client.get("/bookings/by-number/BK-LATE")
        assert by_number.status_code == 200

        by_id = client.get(f"/bookings/{by_number.json()['id']}")
        assert by_id.json()["booking_no"] == "BK-LATE"

    def test_missing_booking(self, client):
        assert client.get("/bookings/9999").status_code == 404
        assert client.get("/bookings/by-number/NOPE").status_code == 404


class TestLifecycle:

    @pytest.fixture
    def booking_id(self, client, rooms):
        response = client.post("/bookings", json=single_body(rooms[0], iso(10), iso(12)))
        assert response.status_code == 201
        return response.json()["id"]

    def test_patch_only_edits_display_fields(self, client, booking_id):
        response = client.patch(f"/bookings/{booking_id}", json={"remarks": "Honeymoon", "check_out_time": "11:00"})

        assert response.status_code == 200
        assert response.json()["remarks"] == "Honeymoon"
        assert response.json()["check_out_time"] == "11:00"

    def test_patch_cannot_change_status(self, client, booking_id):
        response = client.patch(f"/bookings/{booking_id}", json={"status": "Paid"})

        assert response.status_code == 422
        assert client.get(f"/bookings/{booking_id}").json()["status"] == "Confirmed"

    def test_checkout(self, client, booking_id):
        response = client.post(f"/bookings/{booking_id}/checkout", json={"extra_income": 300, "discount": 100})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Checked-out"
        assert money(data["advance"]) == Decimal("5000")
        assert money(data["checkout_payable"]) == 0
        assert money(data["revenue"]) == Decimal("5325")

    def test_checkout_without_body(self, client, booking_id):
        response = client.post(f"/bookings/{booking_id}/checkout")
        assert response.status_code == 200
        assert money(response.json()["revenue"]) == Decimal("5125")

    def test_refund_quote_preview(self, client, booking_id):
        response = client.get(f"/bookings/{booking_id}/refund-quote")

        assert response.status_code == 200
        data = response.json()
        assert money(data["refund_amount"]) == Decimal("1700")
        assert data["days_until_check_in"] == 10
        assert data["is_custom"] is False
        assert client.get(f"/bookings/{booking_id}").json()["status"] == "Confirmed"

    def test_cancel_applies_policy(self, client, booking_id):
        response = client.post(f"/bookings/{booking_id}/cancel")

        assert response.status_code == 200
        data = response.json()
        assert money(data["refund"]["refund_amount"]) == Decimal("1700")
        assert data["refund"]["policy_description"] == "85% refund - Cancelled 7 days before check-in"
        assert data["booking"]["status"] == "Cancelled"
        assert money(data["booking"]["revenue"]) == Decimal("300")
        assert money(data["booking"]["vat_amount"]) == 0

    def test_cancel_with_custom_refund(self, client, booking_id):
        response = client.post(f"/bookings/{booking_id}/cancel", json={"custom_refund_amount": 1200})

        data = response.json()
        assert data["refund"]["policy_description"] == "Custom"
        assert data["refund"]["is_custom"] is True
        assert money(data["booking"]["advance"]) == Decimal("800")

    def test_cancelled_booking_cannot_be_checked_out(self, client, booking_id):
        client.post(f"/bookings/{booking_id}/cancel")

        assert client.post(f"/bookings/{booking_id}/checkout").status_code == 409
        assert client.post(f"/bookings/{booking_id}/cancel").status_code == 409
        assert client.get(f"/bookings/{booking_id}/refund-quote").status_code == 409

    def test_cancelled_booking_frees_the_room(self, client, rooms, booking_id):
        client.post(f"/bookings/{booking_id}/cancel")

        response = client.post("/bookings", json=single_body(rooms[0], iso(10), iso(12), booking_no="BK-002"))
        assert response.status_code == 201

    def test_delete_requires_admin(self, client, booking_id, staff_headers, admin_headers):
        assert client.delete(f"/bookings/{booking_id}").status_code == 403
        assert client.delete(f"/bookings/{booking_id}", headers=staff_headers).status_code == 403

        assert client.delete(f"/bookings/{booking_id}", headers=admin_headers).status_code == 204
        assert client.get(f"/bookings/{booking_id}").status_code == 404

    def test_admin_email_is_case_insensitive(self, client, booking_id):
        response = client.delete(f"/bookings/{booking_id}", headers={"X-Operator-Email": "Admin@Resort.TEST"})
        assert response.status_code == 204


def test_refund_policy(client):
    response = client.get("/bookings/refund-policy")

    assert response.status_code == 200
    data = response.json()
    assert [tier["name"] for tier in data["tiers"]] == ["No refund", "72-0 Hours", "7-3 Days", "7+ Days"]
    assert "CANCELLATION & REFUND POLICY" in data["text"]
