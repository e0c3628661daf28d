from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ..domain.errors import ReservationNotFoundError, SelectionNotFoundError
from ..domain.grid import GRID, SeatView
from ..domain.occupancy import occupied_seats
from ..domain.repositories import ReservationRepository
from ..domain.seats import SeatLike, SeatSet
from ..domain.selection import SelectionSession

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TTL_SECONDS = 15 * 60
DEFAULT_MAX_OPEN_SELECTIONS = 1000


async def open_selection(
    res_repo: ReservationRepository,
    *,
    target: int,
    preselected: Optional[Iterable[SeatLike]] = None,
    reservation_id: Optional[str] = None,
) -> SelectionSession:
    """
    Open a seat-picking session against the current reservations.

    When editing, the edited reservation's own seats do not count as occupied,
    and they become the pre-selection unless the caller supplies one.
    """
    reservations = await res_repo.list_active()
    if reservation_id is not None and preselected is None:
        editing = next((r for r in reservations if r.id == reservation_id), None)
        if editing is None:
            raise ReservationNotFoundError(reservation_id)
        preselected = editing.selected_seats
    occupied = occupied_seats(reservations, reservation_id)
    session = SelectionSession.open(target, occupied, preselected)
    logger.debug(
        "selection opened target=%d occupied=%d preselected=%s",
        target,
        len(occupied),
        session.selected.label or "-",
    )
    return session


async def current_seat_map(
    res_repo: ReservationRepository,
    *,
    exclude_reservation_id: Optional[str] = None,
) -> List[SeatView]:
    reservations = await res_repo.list_active()
    return GRID.seat_map(occupied_seats(reservations, exclude_reservation_id))


@dataclass
class _OpenSelection:
    session: SelectionSession
    touched_at: float


class SelectionRegistry:
    """
    Open selection sessions keyed by id, for callers that cannot hold the session object.

    A session that sits untouched for `idle_ttl` seconds is abandoned and
    forgotten, and once `max_open` sessions are held the least recently used
    one makes room for a new one.
    """

    def __init__(
        self,
        *,
        idle_ttl: float = DEFAULT_IDLE_TTL_SECONDS,
        max_open: int = DEFAULT_MAX_OPEN_SELECTIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_open < 1:
            raise ValueError("max_open must be >= 1")
        self._idle_ttl = idle_ttl
        self._max_open = max_open
        self._clock = clock
        # insertion order doubles as least-recently-used order
        self._open: Dict[str, _OpenSelection] = {}

    def register(self, session: SelectionSession) -> str:
        now = self._clock()
        self._expire(now)
        while len(self._open) >= self._max_open:
            oldest = next(iter(self._open))
            self._drop(oldest, "evicted")
        selection_id = uuid.uuid4().hex
        self._open[selection_id] = _OpenSelection(session, now)
        return selection_id

    def get(self, selection_id: str) -> SelectionSession:
        now = self._clock()
        self._expire(now)
        entry = self._open.pop(selection_id, None)
        if entry is None:
            raise SelectionNotFoundError(selection_id)
        entry.touched_at = now
        self._open[selection_id] = entry
        return entry.session

    def confirm(self, selection_id: str) -> SeatSet:
        # a failed confirm keeps the session registered so the user can keep toggling
        seats = self.get(selection_id).confirm()
        del self._open[selection_id]
        return seats

    def abandon(self, selection_id: str) -> None:
        self.get(selection_id).abandon()
        del self._open[selection_id]

    def _expire(self, now: float) -> None:
        for selection_id, entry in list(self._open.items()):
            if now - entry.touched_at < self._idle_ttl:
                break
            self._drop(selection_id, "expired")

    def _drop(self, selection_id: str, reason: str) -> None:
        entry = self._open.pop(selection_id)
        entry.session.abandon()
        logger.info("selection %s %s", selection_id, reason)

    def __len__(self) -> int:
        return len(self._open)
