from datetime import datetime

from seatbook.domain.reservation import Reservation, ReservationPatch
from seatbook.domain.seats import SeatSet
from seatbook.schemas import ReservationRead


def _reservation(when: datetime) -> Reservation:
    return Reservation(
        id="r1",
        customer_name="Zhang San",
        contact_info="13800138000",
        reservation_time=when,
        number_of_guests=2,
        selected_seats=SeatSet([(1, 2), (1, 3)]),
    )


def test_upcoming_until_reservation_time_passes() -> None:
    reservation = _reservation(datetime(2026, 3, 1, 19, 30))
    assert reservation.is_upcoming(datetime(2026, 3, 1, 19, 29)) is True
    assert reservation.is_upcoming(datetime(2026, 3, 1, 19, 30)) is False
    assert reservation.is_upcoming(datetime(2026, 3, 2, 9, 0)) is False


def test_upcoming_defaults_to_current_time() -> None:
    assert _reservation(datetime(2000, 1, 1)).is_upcoming() is False
    assert _reservation(datetime(2999, 1, 1)).is_upcoming() is True


def test_read_model_carries_upcoming_flag() -> None:
    reservation = _reservation(datetime(2026, 3, 1, 10, 30))
    before = ReservationRead.from_domain(reservation=reservation, now=datetime(2026, 3, 1, 10, 0))
    after = ReservationRead.from_domain(reservation=reservation, now=datetime(2026, 3, 1, 11, 0))
    assert before.upcoming is True
    assert after.upcoming is False
    assert before.seats_label == "T1-S2, T1-S3"


def test_patch_keeps_unset_fields() -> None:
    reservation = _reservation(datetime(2026, 3, 1, 19, 30))
    patched = ReservationPatch(number_of_guests=3, selected_seats=SeatSet([(1, 1), (1, 2), (1, 3)])).apply(reservation)
    assert patched.customer_name == "Zhang San"
    assert patched.number_of_guests == 3
    assert patched.selected_seats.as_pairs() == [(1, 1), (1, 2), (1, 3)]
    assert reservation.number_of_guests == 2
