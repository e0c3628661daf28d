import re
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_session
from ..domain.errors import (
    DomainError,
    ReservationNotFoundError,
    SeatConflictError,
    SeatCountMismatchError,
    ValidationError,
    VersionConflictError,
)
from ..domain.reservation import Reservation, ReservationPatch
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import (
    ReservationChanges,
    ReservationCreate,
    ReservationDraftIn,
    ReservationRead,
    ReservationUpdate,
    to_seat_set,
)
from ..usecases import editing as editing_usecase
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import AuditAction, emit_audit_log
from ..utils.time import to_utc_naive

router = APIRouter(prefix="/reservations", tags=["reservations"])

_UNPROCESSABLE = 422
_ETAG_VERSION = re.compile(r'^(?:W/)?"(\d+)"$')


def _extract_version(if_match: Optional[str], payload: Optional[ReservationUpdate]) -> int:
    """If-Match wins over the body; one of them must carry a positive version."""
    if if_match is not None:
        match = _ETAG_VERSION.match(if_match.strip())
        if match is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid If-Match header")
        version = int(match.group(1))
    elif payload is not None and payload.version is not None:
        version = payload.version
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="version required (If-Match or body)")
    if version < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="version must be >= 1")
    return version


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="reservation_time must have timezone")
    return to_utc_naive(dt)


def _domain_http_error(exc: DomainError) -> HTTPException:
    if isinstance(exc, ReservationNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    if isinstance(exc, SeatConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "seats no longer available", "seats": [str(s) for s in exc.seats]},
        )
    if isinstance(exc, VersionConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="version mismatch")
    if isinstance(exc, SeatCountMismatchError):
        return HTTPException(
            status_code=_UNPROCESSABLE,
            detail={"message": str(exc), "have": exc.have, "want": exc.want},
        )
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=_UNPROCESSABLE,
            detail={"field": exc.field, "message": str(exc)},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _audit_or_500(
    action: AuditAction,
    reservation: Reservation,
    changed_fields: Optional[List[str]] = None,
) -> None:
    try:
        emit_audit_log(
            action=action,
            reservation_id=reservation.id,
            number_of_guests=reservation.number_of_guests,
            seats=reservation.selected_seats,
            version=reservation.version,
            changed_fields=changed_fields,
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")


@router.post("", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    reservation_time = _utc(payload.reservation_time)
    async with session.begin():
        try:
            reservation = await reservation_usecase.create_reservation(
                res_repo,
                customer_name=payload.customer_name,
                contact_info=payload.contact_info,
                reservation_time=reservation_time,
                number_of_guests=payload.number_of_guests,
                selected_seats=to_seat_set(payload.selected_seats),
                max_party_size=settings.max_party_size,
            )
        except DomainError as exc:
            raise _domain_http_error(exc)

    _audit_or_500("reservation.created", reservation)
    return ReservationRead.from_domain(reservation=reservation)


@router.get("", response_model=List[ReservationRead])
async def list_reservations(
    customer_name: Optional[str] = Query(default=None, description="case-insensitive name filter"),
    session: AsyncSession = Depends(get_session),
) -> list[ReservationRead]:
    res_repo = SqlAlchemyReservationRepository(session)
    rows = await reservation_usecase.list_reservations(res_repo, customer_name=customer_name)
    return [ReservationRead.from_domain(reservation=r) for r in rows]


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_session),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    reservation = await reservation_usecase.get_reservation(res_repo, reservation_id=reservation_id)
    if reservation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return ReservationRead.from_domain(reservation=reservation)


@router.patch("/{reservation_id}", response_model=ReservationRead)
async def update_reservation(
    payload: ReservationUpdate,
    reservation_id: str = Path(..., min_length=1),
    if_match: Optional[str] = Header(default=None, alias="If-Match"),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> ReservationRead:
    version = _extract_version(if_match, payload)
    patch = ReservationPatch(
        customer_name=payload.customer_name,
        contact_info=payload.contact_info,
        reservation_time=_utc(payload.reservation_time) if payload.reservation_time is not None else None,
        number_of_guests=payload.number_of_guests,
        selected_seats=to_seat_set(payload.selected_seats),
    )
    res_repo = SqlAlchemyReservationRepository(session)
    async with session.begin():
        try:
            updated, changed = await reservation_usecase.update_reservation(
                res_repo,
                reservation_id=reservation_id,
                patch=patch,
                expected_version=version,
                max_party_size=settings.max_party_size,
            )
        except DomainError as exc:
            raise _domain_http_error(exc)

    _audit_or_500("reservation.updated", updated, changed_fields=changed)
    return ReservationRead.from_domain(reservation=updated)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_session),
) -> Response:
    res_repo = SqlAlchemyReservationRepository(session)
    async with session.begin():
        try:
            removed = await reservation_usecase.delete_reservation(res_repo, reservation_id=reservation_id)
        except DomainError as exc:
            raise _domain_http_error(exc)

    _audit_or_500("reservation.deleted", removed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{reservation_id}/changes", response_model=ReservationChanges)
async def check_changes(
    payload: ReservationDraftIn,
    reservation_id: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_session),
) -> ReservationChanges:
    """Report whether the edited form values differ from the stored reservation."""
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        draft = await editing_usecase.load_draft(res_repo, reservation_id)
    except DomainError as exc:
        raise _domain_http_error(exc)

    draft.customer_name = payload.customer_name
    draft.contact_info = payload.contact_info
    draft.reservation_time = _utc(payload.reservation_time)
    draft.number_of_guests = payload.number_of_guests
    draft.apply_selection(to_seat_set(payload.selected_seats))
    return ReservationChanges(
        reservation_id=reservation_id,
        has_changes=draft.has_changes,
        changed_fields=draft.changed_fields(),
    )
