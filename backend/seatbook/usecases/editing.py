from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..domain.changes import ReservationSnapshot, changed_fields, has_changes, snapshot
from ..domain.errors import ReservationNotFoundError
from ..domain.repositories import ReservationRepository
from ..domain.reservation import Reservation, ReservationPatch
from ..domain.seats import SeatSet
from . import reservations as reservation_usecase


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class ReservationDraft:
    """
    In-progress values of the add/edit form.

    `original` is the snapshot taken when editing began; a new reservation has
    none and is therefore always dirty.
    """

    customer_name: str = ""
    contact_info: str = ""
    reservation_time: datetime = field(default_factory=_utc_now_naive)
    number_of_guests: int = 1
    selected_seats: SeatSet = field(default_factory=SeatSet)
    reservation_id: Optional[str] = None
    version: Optional[int] = None
    original: Optional[ReservationSnapshot] = None

    @classmethod
    def new(cls, *, reservation_time: Optional[datetime] = None) -> "ReservationDraft":
        draft = cls()
        if reservation_time is not None:
            draft.reservation_time = reservation_time
        return draft

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ReservationDraft":
        return cls(
            customer_name=reservation.customer_name,
            contact_info=reservation.contact_info,
            reservation_time=reservation.reservation_time,
            number_of_guests=reservation.number_of_guests,
            selected_seats=reservation.selected_seats,
            reservation_id=reservation.id,
            version=reservation.version,
            original=snapshot(reservation),
        )

    @property
    def is_editing(self) -> bool:
        return self.reservation_id is not None

    @property
    def has_changes(self) -> bool:
        return has_changes(self.original, self)

    def changed_fields(self) -> List[str]:
        if self.original is None:
            return []
        return changed_fields(self.original, self)

    def apply_selection(self, seats: SeatSet) -> None:
        self.selected_seats = seats

    def discard(self) -> None:
        """Restore the values captured when editing began."""
        if self.original is None:
            return
        self.customer_name = self.original.customer_name
        self.contact_info = self.original.contact_info
        self.reservation_time = self.original.reservation_time
        self.number_of_guests = self.original.number_of_guests
        self.selected_seats = self.original.selected_seats

    def to_patch(self) -> ReservationPatch:
        return ReservationPatch(
            customer_name=self.customer_name,
            contact_info=self.contact_info,
            reservation_time=self.reservation_time,
            number_of_guests=self.number_of_guests,
            selected_seats=self.selected_seats,
        )

    async def save(
        self,
        res_repo: ReservationRepository,
        *,
        max_party_size: int = reservation_usecase.DEFAULT_MAX_PARTY_SIZE,
    ) -> Reservation:
        if self.reservation_id is None:
            saved = await reservation_usecase.create_reservation(
                res_repo,
                customer_name=self.customer_name,
                contact_info=self.contact_info,
                reservation_time=self.reservation_time,
                number_of_guests=self.number_of_guests,
                selected_seats=self.selected_seats,
                max_party_size=max_party_size,
            )
        else:
            saved, _ = await reservation_usecase.update_reservation(
                res_repo,
                reservation_id=self.reservation_id,
                patch=self.to_patch(),
                expected_version=self.version,
                max_party_size=max_party_size,
            )
        self.reservation_id = saved.id
        self.version = saved.version
        self.original = snapshot(saved)
        return saved


async def load_draft(res_repo: ReservationRepository, reservation_id: str) -> ReservationDraft:
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)
    return ReservationDraft.from_reservation(reservation)
