from __future__ import annotations

from typing import Iterable


class DomainError(Exception):
    """Base class for recoverable reservation/seat errors."""


class InvalidSeatError(DomainError):
    def __init__(self, table: int, seat: int) -> None:
        super().__init__(f"seat T{table}-S{seat} is outside the grid")
        self.table = table
        self.seat = seat


class SeatCountMismatchError(DomainError):
    def __init__(self, have: int, want: int) -> None:
        super().__init__(f"selected {have} seat(s), party needs {want}")
        self.have = have
        self.want = want


class SelectionClosedError(DomainError):
    pass


class ValidationError(DomainError):
    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} is invalid")
        self.field = field


class ReservationNotFoundError(DomainError):
    def __init__(self, reservation_id: str) -> None:
        super().__init__(f"reservation {reservation_id} not found")
        self.reservation_id = reservation_id


class SeatConflictError(DomainError):
    """Raised at commit time when another reservation already holds a seat."""

    def __init__(self, seats: Iterable[object]) -> None:
        self.seats = list(seats)
        super().__init__("seats no longer available: " + ", ".join(str(s) for s in self.seats))


class VersionConflictError(DomainError):
    pass


class SelectionNotFoundError(DomainError):
    def __init__(self, selection_id: str) -> None:
        super().__init__(f"selection {selection_id} not found")
        self.selection_id = selection_id
