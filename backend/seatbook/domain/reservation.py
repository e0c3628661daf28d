from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Optional

from .seats import SeatSet


@dataclass
class Reservation:
    id: str
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int
    selected_seats: SeatSet = field(default_factory=SeatSet)
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        """True while the reservation time (naive UTC) is still ahead of `now`."""
        if now is None:
            now = datetime.now(timezone.utc).replace(tzinfo=None)
        return self.reservation_time > now


@dataclass(frozen=True)
class ReservationPatch:
    """Fields to change on update; None means keep the stored value."""

    customer_name: Optional[str] = None
    contact_info: Optional[str] = None
    reservation_time: Optional[datetime] = None
    number_of_guests: Optional[int] = None
    selected_seats: Optional[SeatSet] = None

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def apply(self, reservation: Reservation) -> Reservation:
        return replace(reservation, **self.as_dict())
