from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_selection_registry, get_session
from ..domain.errors import (
    ReservationNotFoundError,
    SeatCountMismatchError,
    SelectionClosedError,
    SelectionNotFoundError,
)
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import SeatRef, SeatStatus, SelectionConfirmed, SelectionOpen, SelectionRead, seat_refs, to_seat_set
from ..usecases import selection as selection_usecase
from ..usecases.selection import SelectionRegistry
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="", tags=["seats"])


@router.get("/seats", response_model=List[SeatStatus])
async def list_seats(
    exclude_reservation_id: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[SeatStatus]:
    res_repo = SqlAlchemyReservationRepository(session)
    views = await selection_usecase.current_seat_map(res_repo, exclude_reservation_id=exclude_reservation_id)
    return [SeatStatus.from_view(v) for v in views]


@router.post("/selections", response_model=SelectionRead, status_code=status.HTTP_201_CREATED)
async def open_selection(
    payload: SelectionOpen,
    session: AsyncSession = Depends(get_session),
    registry: SelectionRegistry = Depends(get_selection_registry),
) -> SelectionRead:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        selection = await selection_usecase.open_selection(
            res_repo,
            target=payload.target,
            preselected=to_seat_set(payload.preselected),
            reservation_id=payload.reservation_id,
        )
    except ReservationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    selection_id = registry.register(selection)
    return SelectionRead.from_session(selection_id=selection_id, session=selection)


@router.get("/selections/{selection_id}", response_model=SelectionRead)
async def get_selection(
    selection_id: str,
    registry: SelectionRegistry = Depends(get_selection_registry),
) -> SelectionRead:
    try:
        selection = registry.get(selection_id)
    except SelectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="selection not found")
    return SelectionRead.from_session(selection_id=selection_id, session=selection)


@router.post("/selections/{selection_id}/toggle", response_model=SelectionRead)
async def toggle_seat(
    selection_id: str,
    payload: SeatRef,
    registry: SelectionRegistry = Depends(get_selection_registry),
) -> SelectionRead:
    # occupied and over-capacity toggles are no-ops and still answer 200
    try:
        selection = registry.get(selection_id)
        selection.toggle(payload.as_pair())
    except SelectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="selection not found")
    except SelectionClosedError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="selection closed")
    return SelectionRead.from_session(selection_id=selection_id, session=selection)


@router.post("/selections/{selection_id}/confirm", response_model=SelectionConfirmed)
async def confirm_selection(
    selection_id: str,
    registry: SelectionRegistry = Depends(get_selection_registry),
) -> SelectionConfirmed:
    try:
        seats = registry.confirm(selection_id)
    except SelectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="selection not found")
    except SeatCountMismatchError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "have": exc.have, "want": exc.want},
        )

    try:
        emit_audit_log(
            action="selection.confirmed",
            reservation_id=None,
            number_of_guests=len(seats),
            seats=seats,
            extra={"selection_id": selection_id},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return SelectionConfirmed(selection_id=selection_id, seats=seat_refs(seats), label=seats.label)


@router.delete("/selections/{selection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_selection(
    selection_id: str,
    registry: SelectionRegistry = Depends(get_selection_registry),
) -> Response:
    try:
        registry.abandon(selection_id)
    except SelectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="selection not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
