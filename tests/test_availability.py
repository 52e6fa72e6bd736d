"""
Tests for the availability ledger.
"""

from datetime import date

import pytest
from sqlalchemy import text

from conftest import API
from schooltrips.availability.schemas import AvailabilityEntry
from schooltrips.availability.service import AvailabilityLedger
from schooltrips.exceptions import CapacityExceededError, NotFoundError
from schooltrips.models import AvailabilitySlot

JUNE_1 = date(2025, 6, 1)
JUNE_8 = date(2025, 6, 8)
JUNE_15 = date(2025, 6, 15)


@pytest.fixture
def ledger(db_session):
    return AvailabilityLedger(db_session)


# ── Upserts ──────────────────────────────────────────────────

class TestUpsert:
    def test_upsert_twice_keeps_one_record(self, ledger, db_session, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 40)
        slot = ledger.upsert(paris_trip.id, JUNE_1, 50, is_available=False)

        assert db_session.query(AvailabilitySlot).count() == 1
        assert slot.total_capacity == 50
        assert slot.is_available is False

    def test_upsert_preserves_booked_count(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 40)
        ledger.decrement_capacity(paris_trip.id, JUNE_1, 12)
        slot = ledger.upsert(paris_trip.id, JUNE_1, 30)
        assert slot.booked_count == 12

    def test_upsert_does_not_validate_against_bookings(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 40)
        ledger.decrement_capacity(paris_trip.id, JUNE_1, 30)
        slot = ledger.upsert(paris_trip.id, JUNE_1, 10)
        assert slot.booked_count > slot.total_capacity

    def test_bulk_upsert_closes_zero_capacity_dates(self, ledger, paris_trip):
        result = ledger.bulk_upsert(paris_trip.id, [
            AvailabilityEntry(date=JUNE_1, capacity=40),
            AvailabilityEntry(date=JUNE_8, capacity=0),
        ])
        assert result.upserted == 2
        assert result.failed == 0

        slots = ledger.get_for_trip(paris_trip.id)
        assert [(s.date, s.is_available) for s in slots] == [(JUNE_1, True), (JUNE_8, False)]


    def test_upsert_unknown_trip_is_not_found(self, ledger, db_session):
        with pytest.raises(NotFoundError):
            ledger.upsert(99999, JUNE_1, 10)
        assert db_session.query(AvailabilitySlot).count() == 0

    def test_bulk_upsert_unknown_trip_is_not_found(self, ledger, db_session):
        with pytest.raises(NotFoundError):
            ledger.bulk_upsert(99999, [AvailabilityEntry(date=JUNE_1, capacity=10)])
        assert db_session.query(AvailabilitySlot).count() == 0

    def test_bulk_upsert_reports_rejected_insert_per_entry(self, ledger, db_session, paris_trip, monkeypatch):
        db_session.execute(text("PRAGMA foreign_keys=ON"))
        try:
            monkeypatch.setattr(ledger, "_require_trip", lambda trip_id: None)
            result = ledger.bulk_upsert(99999, [
                AvailabilityEntry(date=JUNE_1, capacity=10),
                AvailabilityEntry(date=JUNE_8, capacity=10),
            ])
        finally:
            db_session.execute(text("PRAGMA foreign_keys=OFF"))

        assert result.upserted == 0
        assert result.failed == 2
        assert len(result.errors) == 2

# ── Queries ──────────────────────────────────────────────────

class TestQueries:
    @pytest.fixture(autouse=True)
    def slots(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_15, 40)
        ledger.upsert(paris_trip.id, JUNE_1, 40)
        ledger.upsert(paris_trip.id, JUNE_8, 40, is_available=False)

    def test_sorted_by_date(self, ledger, paris_trip):
        assert [s.date for s in ledger.get_for_trip(paris_trip.id)] == [JUNE_1, JUNE_8, JUNE_15]

    def test_range_filter_is_inclusive(self, ledger, paris_trip):
        slots = ledger.get_for_trip(paris_trip.id, JUNE_8, JUNE_15)
        assert [s.date for s in slots] == [JUNE_8, JUNE_15]

    def test_available_dates_skip_closed(self, ledger, paris_trip):
        slots = ledger.get_available_dates(paris_trip.id, JUNE_1, JUNE_15)
        assert [s.date for s in slots] == [JUNE_1, JUNE_15]

    def test_other_trip_has_no_slots(self, ledger):
        assert ledger.get_for_trip(999) == []


# ── Capacity Consumption ─────────────────────────────────────

class TestCapacity:
    def test_decrement_capacity_increments_booked_count(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 10)
        ledger.decrement_capacity(paris_trip.id, JUNE_1, 4)
        slot = ledger.decrement_capacity(paris_trip.id, JUNE_1, 4)
        assert slot.booked_count == 8

    def test_decrement_capacity_missing_slot_returns_none(self, ledger, paris_trip):
        assert ledger.decrement_capacity(paris_trip.id, JUNE_1, 4) is None

    def test_consume_within_capacity(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 22)
        assert ledger.consume_capacity(paris_trip.id, JUNE_1, 22) == 22
        assert ledger.get_slot(paris_trip.id, JUNE_1).booked_count == 22

    def test_consume_beyond_capacity_fails_and_changes_nothing(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 20)
        ledger.consume_capacity(paris_trip.id, JUNE_1, 15)
        with pytest.raises(CapacityExceededError, match="remaining 5"):
            ledger.consume_capacity(paris_trip.id, JUNE_1, 6)
        assert ledger.get_slot(paris_trip.id, JUNE_1).booked_count == 15

    def test_consume_closed_date_fails(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 20, is_available=False)
        with pytest.raises(CapacityExceededError, match="not available"):
            ledger.consume_capacity(paris_trip.id, JUNE_1, 1)

    def test_consume_without_slot_is_a_no_op(self, ledger, paris_trip):
        assert ledger.consume_capacity(paris_trip.id, JUNE_1, 30) == 0

    def test_release_never_goes_negative(self, ledger, paris_trip):
        ledger.upsert(paris_trip.id, JUNE_1, 20)
        ledger.consume_capacity(paris_trip.id, JUNE_1, 5)
        ledger.release_capacity(paris_trip.id, JUNE_1, 3)
        assert ledger.get_slot(paris_trip.id, JUNE_1).booked_count == 2
        ledger.release_capacity(paris_trip.id, JUNE_1, 10)
        assert ledger.get_slot(paris_trip.id, JUNE_1).booked_count == 0


# ── HTTP ─────────────────────────────────────────────────────

class TestAvailabilityApi:
    def test_admin_upsert_and_read(self, client, admin_headers, school_headers, paris_trip):
        url = f"{API}/availability/trips/{paris_trip.id}"
        response = client.post(url, json={"date": "2025-06-01", "capacity": 40}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["total_capacity"] == 40
        assert response.json()["booked_count"] == 0

        response = client.get(url, params={"from": "2025-05-01", "to": "2025-06-30"}, headers=school_headers)
        assert response.status_code == 200
        assert [s["date"] for s in response.json()] == ["2025-06-01"]

    def test_bulk_and_available_dates(self, client, admin_headers, school_headers, paris_trip):
        url = f"{API}/availability/trips/{paris_trip.id}"
        response = client.post(f"{url}/bulk", json={"dates": [
            {"date": "2025-06-01", "capacity": 40},
            {"date": "2025-06-08", "capacity": 0},
            {"date": "2025-06-15", "capacity": 25},
        ]}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["upserted"] == 3

        response = client.get(f"{url}/available-dates", params={"from": "2025-06-01", "to": "2025-06-30"},
                              headers=school_headers)
        assert [s["date"] for s in response.json()] == ["2025-06-01", "2025-06-15"]

    def test_available_dates_requires_range(self, client, school_headers, paris_trip):
        response = client.get(f"{API}/availability/trips/{paris_trip.id}/available-dates", headers=school_headers)
        assert response.status_code == 422

    def test_clients_cannot_edit_capacity(self, client, school_headers, paris_trip):
        response = client.post(f"{API}/availability/trips/{paris_trip.id}",
                               json={"date": "2025-06-01", "capacity": 40}, headers=school_headers)
        assert response.status_code == 403

    def test_requires_authentication(self, client, paris_trip):
        response = client.get(f"{API}/availability/trips/{paris_trip.id}")
        assert response.status_code == 401

    def test_unknown_trip_returns_not_found(self, client, admin_headers):
        url = f"{API}/availability/trips/99999"
        response = client.post(url, json={"date": "2025-06-01", "capacity": 40}, headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Trip not found"

        response = client.post(f"{url}/bulk", json={"dates": [{"date": "2025-06-01", "capacity": 40}]},
                               headers=admin_headers)
        assert response.status_code == 404
