from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .reservation import Reservation, ReservationPatch
from .seats import SeatSet


class ReservationRepository(Protocol):
    """
    Store of active reservations. Each call is atomic. `add` and `update` re-check
    seat occupancy at commit time and raise SeatConflictError when another
    reservation already holds one of the seats.
    """

    async def list_active(self) -> Sequence[Reservation]: ...

    async def get(self, reservation_id: str) -> Reservation | None: ...

    async def add(
        self,
        *,
        customer_name: str,
        contact_info: str,
        reservation_time: datetime,
        number_of_guests: int,
        selected_seats: SeatSet,
    ) -> Reservation: ...

    async def update(
        self,
        reservation_id: str,
        patch: ReservationPatch,
        *,
        expected_version: int | None = None,
    ) -> Reservation: ...

    async def remove(self, reservation_id: str) -> None: ...
