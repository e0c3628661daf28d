from __future__ import annotations

from dataclasses import dataclass

from .seats import SEATS_PER_TABLE, TABLE_COUNT, Seat, SeatLike, SeatSet


@dataclass(frozen=True)
class Table:
    number: int
    seats: tuple[Seat, ...]


@dataclass(frozen=True)
class SeatView:
    """Per-session render flags for one seat; never persisted."""

    table: int
    seat: int
    occupied: bool
    selected: bool


class Grid:
    """Fixed restaurant layout: TABLE_COUNT tables of SEATS_PER_TABLE seats."""

    def __init__(self) -> None:
        self._tables = tuple(
            Table(
                number=table_no,
                seats=tuple(Seat(table_no, seat_no) for seat_no in range(1, SEATS_PER_TABLE + 1)),
            )
            for table_no in range(1, TABLE_COUNT + 1)
        )
        self._seats = tuple(seat for table in self._tables for seat in table.seats)
        self._universe = SeatSet(self._seats)

    def all_seats(self) -> tuple[Seat, ...]:
        return self._seats

    def tables(self) -> tuple[Table, ...]:
        return self._tables

    def universe(self) -> SeatSet:
        return self._universe

    def contains(self, seat: SeatLike) -> bool:
        return seat in self._universe

    def seat_map(self, occupied: SeatSet, selected: SeatSet | None = None) -> list[SeatView]:
        chosen = selected or SeatSet()
        return [
            SeatView(
                table=seat.table,
                seat=seat.seat,
                occupied=seat in occupied,
                selected=seat in chosen,
            )
            for seat in self._seats
        ]

    def __len__(self) -> int:
        return len(self._seats)


GRID = Grid()
