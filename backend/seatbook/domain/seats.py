from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple, Union

from .errors import InvalidSeatError

TABLE_COUNT = 10
SEATS_PER_TABLE = 4

SeatLike = Union["Seat", Tuple[int, int]]


@dataclass(frozen=True, order=True)
class Seat:
    """A seat addressed by (table, seat); the pair is its identity."""

    table: int
    seat: int

    def __post_init__(self) -> None:
        if not (1 <= self.table <= TABLE_COUNT and 1 <= self.seat <= SEATS_PER_TABLE):
            raise InvalidSeatError(self.table, self.seat)

    @classmethod
    def of(cls, value: SeatLike) -> "Seat":
        if isinstance(value, Seat):
            return value
        table, seat = value
        return cls(int(table), int(seat))

    @property
    def label(self) -> str:
        return f"T{self.table}-S{self.seat}"

    def __str__(self) -> str:
        return self.label


class SeatSet:
    """
    Immutable seat collection with order-independent identity.

    Seats are kept sorted by (table, seat) with duplicates dropped, so equality,
    hashing, iteration and display all follow the canonical ordering.
    """

    __slots__ = ("_seats",)

    def __init__(self, seats: Iterable[SeatLike] = ()) -> None:
        self._seats: tuple[Seat, ...] = tuple(sorted({Seat.of(s) for s in seats}))

    @classmethod
    def _from_canonical(cls, seats: Iterable[Seat]) -> "SeatSet":
        new = cls.__new__(cls)
        new._seats = tuple(sorted(set(seats)))
        return new

    def contains(self, seat: SeatLike) -> bool:
        return Seat.of(seat) in self._seats

    def equals(self, other: "SeatSet") -> bool:
        return self._seats == other._seats

    def toggle(self, seat: SeatLike) -> "SeatSet":
        target = Seat.of(seat)
        if target in self._seats:
            return SeatSet._from_canonical(s for s in self._seats if s != target)
        return SeatSet._from_canonical((*self._seats, target))

    def union(self, other: Iterable[SeatLike]) -> "SeatSet":
        return SeatSet((*self._seats, *other))

    def intersection(self, other: Iterable[SeatLike]) -> "SeatSet":
        keep = {Seat.of(s) for s in other}
        return SeatSet._from_canonical(s for s in self._seats if s in keep)

    def difference(self, other: Iterable[SeatLike]) -> "SeatSet":
        drop = {Seat.of(s) for s in other}
        return SeatSet._from_canonical(s for s in self._seats if s not in drop)

    __or__ = union
    __and__ = intersection
    __sub__ = difference

    def as_pairs(self) -> list[tuple[int, int]]:
        return [(s.table, s.seat) for s in self._seats]

    @property
    def label(self) -> str:
        return ", ".join(s.label for s in self._seats)

    def key(self) -> str:
        return ",".join(f"{s.table}-{s.seat}" for s in self._seats)

    def __contains__(self, seat: object) -> bool:
        if isinstance(seat, (Seat, tuple)):
            try:
                return self.contains(seat)
            except (InvalidSeatError, TypeError, ValueError):
                return False
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SeatSet):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._seats)

    def __len__(self) -> int:
        return len(self._seats)

    def __iter__(self) -> Iterator[Seat]:
        return iter(self._seats)

    def __bool__(self) -> bool:
        return bool(self._seats)

    def __repr__(self) -> str:
        return f"SeatSet([{self.label}])"
