from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from .seats import SeatSet


class EditableReservation(Protocol):
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int
    selected_seats: SeatSet


@dataclass(frozen=True)
class ReservationSnapshot:
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int
    selected_seats: SeatSet


def snapshot(reservation: EditableReservation) -> ReservationSnapshot:
    # SeatSet is immutable, so holding the reference is a by-value copy
    return ReservationSnapshot(
        customer_name=reservation.customer_name,
        contact_info=reservation.contact_info,
        reservation_time=reservation.reservation_time,
        number_of_guests=reservation.number_of_guests,
        selected_seats=SeatSet(reservation.selected_seats),
    )


def same_minute(a: datetime, b: datetime) -> bool:
    return a.replace(second=0, microsecond=0) == b.replace(second=0, microsecond=0)


def changed_fields(original: ReservationSnapshot, current: EditableReservation) -> list[str]:
    changed: list[str] = []
    if current.customer_name != original.customer_name:
        changed.append("customer_name")
    if current.contact_info != original.contact_info:
        changed.append("contact_info")
    if not same_minute(current.reservation_time, original.reservation_time):
        changed.append("reservation_time")
    if current.number_of_guests != original.number_of_guests:
        changed.append("number_of_guests")
    if not original.selected_seats.equals(SeatSet(current.selected_seats)):
        changed.append("selected_seats")
    return changed


def has_changes(original: Optional[ReservationSnapshot], current: EditableReservation) -> bool:
    """A missing snapshot means nothing was saved yet, which always counts as dirty."""
    if original is None:
        return True
    return bool(changed_fields(original, current))
