from __future__ import annotations

import logging
from enum import StrEnum
from typing import Iterable, Optional

from .errors import SeatCountMismatchError, SelectionClosedError
from .grid import GRID, Grid, SeatView
from .seats import Seat, SeatLike, SeatSet

logger = logging.getLogger(__name__)


class SelectionState(StrEnum):
    SELECTING = "selecting"
    READY = "ready"
    CONFIRMED = "confirmed"
    ABANDONED = "abandoned"


class SelectionSession:
    """
    Interactive pick of exactly `target` seats out of the grid.

    Occupancy is fixed when the session opens and is not re-checked while the
    user toggles; exclusivity across sessions is enforced when the reservation
    is written.
    """

    def __init__(self, target: int, occupied: SeatSet, selected: SeatSet, grid: Grid = GRID) -> None:
        self._target = target
        self._occupied = occupied
        self._selected = selected
        self._grid = grid
        self._closed: Optional[SelectionState] = None

    @classmethod
    def open(
        cls,
        target: int,
        occupied: SeatSet,
        preselected: Optional[Iterable[SeatLike]] = None,
        *,
        grid: Grid = GRID,
    ) -> "SelectionSession":
        if target < 1:
            raise ValueError("target must be >= 1")
        available = grid.universe() - occupied
        requested = SeatSet(preselected or ())
        kept = available & requested
        if len(kept) > target:
            # party shrank since the last pick; keep the first seats in canonical order
            kept = SeatSet(list(kept)[:target])
        dropped = requested - kept
        if dropped:
            logger.debug("dropped preselected seats on open: %s", dropped.label)
        return cls(target, occupied, kept, grid)

    @property
    def target(self) -> int:
        return self._target

    @property
    def selected(self) -> SeatSet:
        return self._selected

    @property
    def occupied(self) -> SeatSet:
        return self._occupied

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def remaining(self) -> int:
        return self._target - len(self._selected)

    @property
    def can_confirm(self) -> bool:
        return self._closed is None and len(self._selected) == self._target

    @property
    def state(self) -> SelectionState:
        if self._closed is not None:
            return self._closed
        if len(self._selected) == self._target:
            return SelectionState.READY
        return SelectionState.SELECTING

    @property
    def prompt(self) -> str:
        if self.remaining > 0:
            return f"Select {self.remaining} more seat(s)"
        return "Confirm"

    def toggle(self, seat: SeatLike) -> bool:
        """Toggle one seat. Returns False when the toggle is a defined no-op."""
        self._ensure_open()
        target = Seat.of(seat)
        if target in self._occupied:
            return False
        if target in self._selected:
            self._selected = self._selected.toggle(target)
            return True
        if len(self._selected) >= self._target:
            return False
        self._selected = self._selected.toggle(target)
        return True

    def confirm(self) -> SeatSet:
        self._ensure_open()
        if len(self._selected) != self._target:
            raise SeatCountMismatchError(have=len(self._selected), want=self._target)
        self._closed = SelectionState.CONFIRMED
        return self._selected

    def abandon(self) -> None:
        if self._closed is None:
            self._closed = SelectionState.ABANDONED

    def seat_map(self) -> list[SeatView]:
        return self._grid.seat_map(self._occupied, self._selected)

    def _ensure_open(self) -> None:
        if self._closed is not None:
            raise SelectionClosedError(f"selection already {self._closed.value}")
