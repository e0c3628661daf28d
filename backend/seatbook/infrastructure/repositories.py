from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import ReservationNotFoundError, SeatConflictError, VersionConflictError
from ..domain.occupancy import find_conflicts
from ..domain.repositories import ReservationRepository
from ..domain.reservation import Reservation, ReservationPatch
from ..domain.seats import Seat, SeatSet
from ..models import SEAT_CLAIM_CONSTRAINT, ReservationModel, ReservationSeatModel


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _check_version(reservation_id: str, current: int, expected: Optional[int]) -> None:
    if expected is not None and current != expected:
        raise VersionConflictError(f"reservation {reservation_id} is at version {current}, not {expected}")


class InMemoryReservationRepository(ReservationRepository):
    """Process-local store; each call applies completely or not at all."""

    def __init__(self, reservations: Optional[Sequence[Reservation]] = None) -> None:
        self._items: Dict[str, Reservation] = {}
        for reservation in reservations or ():
            self._items[reservation.id] = reservation

    async def list_active(self) -> List[Reservation]:
        return list(self._items.values())

    async def get(self, reservation_id: str) -> Reservation | None:
        return self._items.get(reservation_id)

    async def add(
        self,
        *,
        customer_name: str,
        contact_info: str,
        reservation_time: datetime,
        number_of_guests: int,
        selected_seats: SeatSet,
    ) -> Reservation:
        conflicts = find_conflicts(self._items.values(), selected_seats)
        if conflicts:
            raise SeatConflictError(conflicts)
        now = _utc_now_naive()
        reservation = Reservation(
            id=str(uuid.uuid4()),
            customer_name=customer_name,
            contact_info=contact_info,
            reservation_time=reservation_time,
            number_of_guests=number_of_guests,
            selected_seats=selected_seats,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self._items[reservation.id] = reservation
        return reservation

    async def update(
        self,
        reservation_id: str,
        patch: ReservationPatch,
        *,
        expected_version: int | None = None,
    ) -> Reservation:
        current = self._items.get(reservation_id)
        if current is None:
            raise ReservationNotFoundError(reservation_id)
        _check_version(reservation_id, current.version, expected_version)
        if patch.selected_seats is not None:
            conflicts = find_conflicts(self._items.values(), patch.selected_seats, reservation_id)
            if conflicts:
                raise SeatConflictError(conflicts)
        updated = replace(
            patch.apply(current),
            version=current.version + 1,
            updated_at=_utc_now_naive(),
        )
        self._items[reservation_id] = updated
        return updated

    async def remove(self, reservation_id: str) -> None:
        if self._items.pop(reservation_id, None) is None:
            raise ReservationNotFoundError(reservation_id)


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_active(self) -> List[Reservation]:
        rows = await self.session.scalars(select(ReservationModel).order_by(ReservationModel.reservation_time))
        return [_to_domain(row) for row in rows.all()]

    async def get(self, reservation_id: str) -> Reservation | None:
        row = await self._get_row(reservation_id)
        return _to_domain(row) if row is not None else None

    async def add(
        self,
        *,
        customer_name: str,
        contact_info: str,
        reservation_time: datetime,
        number_of_guests: int,
        selected_seats: SeatSet,
    ) -> Reservation:
        await self._ensure_free(selected_seats, exclude_reservation_id=None)
        now = _utc_now_naive()
        row = ReservationModel(
            id=str(uuid.uuid4()),
            customer_name=customer_name,
            contact_info=contact_info,
            reservation_time=reservation_time,
            number_of_guests=number_of_guests,
            version=1,
            created_at=now,
            updated_at=now,
            seats=[ReservationSeatModel(table_no=s.table, seat_no=s.seat) for s in selected_seats],
        )
        self.session.add(row)
        await self._flush(selected_seats)
        return _to_domain(row)

    async def update(
        self,
        reservation_id: str,
        patch: ReservationPatch,
        *,
        expected_version: int | None = None,
    ) -> Reservation:
        row = await self._get_row(reservation_id, for_update=True)
        if row is None:
            raise ReservationNotFoundError(reservation_id)
        _check_version(reservation_id, row.version, expected_version)

        if patch.customer_name is not None:
            row.customer_name = patch.customer_name
        if patch.contact_info is not None:
            row.contact_info = patch.contact_info
        if patch.reservation_time is not None:
            row.reservation_time = patch.reservation_time
        if patch.number_of_guests is not None:
            row.number_of_guests = patch.number_of_guests
        if patch.selected_seats is not None:
            await self._ensure_free(patch.selected_seats, exclude_reservation_id=reservation_id)
            _replace_seats(row, patch.selected_seats)

        row.version += 1
        row.updated_at = _utc_now_naive()
        await self._flush(patch.selected_seats or SeatSet())
        return _to_domain(row)

    async def remove(self, reservation_id: str) -> None:
        row = await self._get_row(reservation_id, for_update=True)
        if row is None:
            raise ReservationNotFoundError(reservation_id)
        await self.session.delete(row)
        await self.session.flush()

    async def _get_row(self, reservation_id: str, *, for_update: bool = False) -> ReservationModel | None:
        stmt = select(ReservationModel).where(ReservationModel.id == reservation_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.session.scalar(stmt)

    async def _ensure_free(self, seats: SeatSet, *, exclude_reservation_id: Optional[str]) -> None:
        stmt = select(ReservationSeatModel.table_no, ReservationSeatModel.seat_no).with_for_update()
        if exclude_reservation_id is not None:
            stmt = stmt.where(ReservationSeatModel.reservation_id != exclude_reservation_id)
        rows = await self.session.execute(stmt)
        claimed = SeatSet((table_no, seat_no) for table_no, seat_no in rows.all())
        conflicts = seats & claimed
        if conflicts:
            raise SeatConflictError(conflicts)

    async def _flush(self, seats: SeatSet) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if not _is_seat_claim_violation(exc):
                raise
            # a concurrent writer claimed a seat between the check and the flush
            raise SeatConflictError(seats) from exc


def _is_seat_claim_violation(exc: IntegrityError) -> bool:
    # MySQL names the violated key; SQLite lists the constrained columns instead
    message = str(exc.orig)
    if SEAT_CLAIM_CONSTRAINT in message:
        return True
    return "UNIQUE constraint failed: reservation_seats.table_no, reservation_seats.seat_no" in message


def _replace_seats(row: ReservationModel, seats: SeatSet) -> None:
    # keep rows for seats that stay so the unique seat claim is never re-inserted
    wanted = set(seats)
    row.seats = [s for s in row.seats if Seat(s.table_no, s.seat_no) in wanted]
    held = {Seat(s.table_no, s.seat_no) for s in row.seats}
    for seat in seats:
        if seat not in held:
            row.seats.append(ReservationSeatModel(table_no=seat.table, seat_no=seat.seat))


def _to_domain(row: ReservationModel) -> Reservation:
    return Reservation(
        id=row.id,
        customer_name=row.customer_name,
        contact_info=row.contact_info,
        reservation_time=row.reservation_time,
        number_of_guests=row.number_of_guests,
        selected_seats=SeatSet((s.table_no, s.seat_no) for s in row.seats),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
