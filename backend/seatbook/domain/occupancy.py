from __future__ import annotations

from typing import Iterable, Optional

from .reservation import Reservation
from .seats import Seat, SeatLike, SeatSet


def occupied_seats(
    reservations: Iterable[Reservation],
    exclude_reservation_id: Optional[str] = None,
) -> SeatSet:
    """
    Union of the seats held by every reservation except the excluded one.
    The excluded id is the reservation being edited, so it can keep its own seats.
    """
    claimed: list[Seat] = []
    for reservation in reservations:
        if exclude_reservation_id is not None and reservation.id == exclude_reservation_id:
            continue
        claimed.extend(reservation.selected_seats)
    return SeatSet(claimed)


def is_seat_occupied(
    reservations: Iterable[Reservation],
    seat: SeatLike,
    exclude_reservation_id: Optional[str] = None,
) -> bool:
    return seat in occupied_seats(reservations, exclude_reservation_id)


def find_conflicts(
    reservations: Iterable[Reservation],
    seats: SeatSet,
    exclude_reservation_id: Optional[str] = None,
) -> SeatSet:
    return seats & occupied_seats(reservations, exclude_reservation_id)
