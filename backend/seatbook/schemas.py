from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from .domain.grid import SeatView
from .domain.reservation import Reservation
from .domain.seats import SEATS_PER_TABLE, TABLE_COUNT, SeatSet
from .domain.selection import SelectionSession, SelectionState
from .utils.time import restaurant_tz, utc_naive_to_local


class SeatRef(BaseModel):
    table: int = Field(ge=1, le=TABLE_COUNT)
    seat: int = Field(ge=1, le=SEATS_PER_TABLE)

    def as_pair(self) -> tuple[int, int]:
        return (self.table, self.seat)


def seat_refs(seats: SeatSet) -> List[SeatRef]:
    return [SeatRef(table=t, seat=s) for t, s in seats.as_pairs()]


def to_seat_set(refs: Optional[List[SeatRef]]) -> Optional[SeatSet]:
    if refs is None:
        return None
    return SeatSet(ref.as_pair() for ref in refs)


class SeatStatus(BaseModel):
    table: int
    seat: int
    occupied: bool
    selected: bool

    @classmethod
    def from_view(cls, view: SeatView) -> "SeatStatus":
        return cls(table=view.table, seat=view.seat, occupied=view.occupied, selected=view.selected)


class SelectionOpen(BaseModel):
    target: int = Field(ge=1)
    preselected: Optional[List[SeatRef]] = None
    reservation_id: Optional[str] = None


class SelectionRead(BaseModel):
    selection_id: str
    target: int
    state: SelectionState
    selected: List[SeatRef]
    remaining: int
    can_confirm: bool
    prompt: str
    seats: List[SeatStatus]

    @classmethod
    def from_session(cls, *, selection_id: str, session: SelectionSession) -> "SelectionRead":
        return cls(
            selection_id=selection_id,
            target=session.target,
            state=session.state,
            selected=seat_refs(session.selected),
            remaining=session.remaining,
            can_confirm=session.can_confirm,
            prompt=session.prompt,
            seats=[SeatStatus.from_view(v) for v in session.seat_map()],
        )


class SelectionConfirmed(BaseModel):
    selection_id: str
    seats: List[SeatRef]
    label: str


class ReservationCreate(BaseModel):
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int = Field(ge=1)
    selected_seats: List[SeatRef]


class ReservationUpdate(BaseModel):
    customer_name: Optional[str] = None
    contact_info: Optional[str] = None
    reservation_time: Optional[datetime] = None
    number_of_guests: Optional[int] = Field(default=None, ge=1)
    selected_seats: Optional[List[SeatRef]] = None
    version: Optional[int] = Field(default=None, ge=1)


class ReservationDraftIn(BaseModel):
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int = Field(ge=1)
    selected_seats: List[SeatRef]


class ReservationChanges(BaseModel):
    reservation_id: str
    has_changes: bool
    changed_fields: List[str]


class ReservationRead(BaseModel):
    reservation_id: str
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int
    selected_seats: List[SeatRef]
    seats_label: str
    upcoming: bool
    version: int

    @field_serializer("reservation_time")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.astimezone(restaurant_tz()).isoformat()

    @classmethod
    def from_domain(cls, *, reservation: Reservation, now: Optional[datetime] = None) -> "ReservationRead":
        return cls(
            reservation_id=reservation.id,
            customer_name=reservation.customer_name,
            contact_info=reservation.contact_info,
            reservation_time=utc_naive_to_local(reservation.reservation_time),
            number_of_guests=reservation.number_of_guests,
            selected_seats=seat_refs(reservation.selected_seats),
            seats_label=reservation.selected_seats.label,
            upcoming=reservation.is_upcoming(now),
            version=reservation.version,
        )
