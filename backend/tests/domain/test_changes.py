from dataclasses import replace
from datetime import datetime

from seatbook.domain.changes import changed_fields, has_changes, snapshot
from seatbook.domain.reservation import Reservation
from seatbook.domain.seats import SeatSet


def _reservation() -> Reservation:
    return Reservation(
        id="r-1",
        customer_name="Zhang San",
        contact_info="13800138000",
        reservation_time=datetime(2026, 3, 1, 19, 30, 0),
        number_of_guests=2,
        selected_seats=SeatSet([(1, 2), (1, 3)]),
    )


def test_reordered_seats_are_not_a_change() -> None:
    original = _reservation()
    snap = snapshot(original)
    current = replace(original, selected_seats=SeatSet([(1, 3), (1, 2)]))
    assert has_changes(snap, current) is False


def test_guest_count_change_detected() -> None:
    original = _reservation()
    snap = snapshot(original)
    current = replace(original, number_of_guests=3)
    assert has_changes(snap, current) is True
    assert changed_fields(snap, current) == ["number_of_guests"]


def test_seconds_within_same_minute_ignored() -> None:
    original = _reservation()
    snap = snapshot(original)
    current = replace(original, reservation_time=datetime(2026, 3, 1, 19, 30, 30))
    assert has_changes(snap, current) is False


def test_different_minute_is_a_change() -> None:
    original = _reservation()
    snap = snapshot(original)
    current = replace(original, reservation_time=datetime(2026, 3, 1, 19, 31, 5))
    assert has_changes(snap, current) is True
    assert changed_fields(snap, current) == ["reservation_time"]


def test_text_fields_compared_exactly() -> None:
    original = _reservation()
    snap = snapshot(original)
    assert has_changes(snap, replace(original, customer_name="Zhang San ")) is True
    assert has_changes(snap, replace(original, contact_info="13800138001")) is True


def test_seat_membership_change_detected() -> None:
    original = _reservation()
    snap = snapshot(original)
    current = replace(original, selected_seats=SeatSet([(1, 2), (1, 4)]))
    assert changed_fields(snap, current) == ["selected_seats"]


def test_missing_snapshot_is_always_dirty() -> None:
    assert has_changes(None, _reservation()) is True


def test_snapshot_is_independent_of_later_edits() -> None:
    original = _reservation()
    snap = snapshot(original)
    original.selected_seats = original.selected_seats.toggle((1, 4))
    original.customer_name = "Li Si"
    assert snap.selected_seats == SeatSet([(1, 2), (1, 3)])
    assert snap.customer_name == "Zhang San"
    assert changed_fields(snap, original) == ["customer_name", "selected_seats"]
