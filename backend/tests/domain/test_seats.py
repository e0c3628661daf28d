import itertools
import random

import pytest
from seatbook.domain.errors import InvalidSeatError
from seatbook.domain.seats import Seat, SeatSet


def test_seat_identity_is_the_pair() -> None:
    assert Seat(1, 2) == Seat(1, 2)
    assert hash(Seat(1, 2)) == hash(Seat(1, 2))
    assert Seat(1, 2) != Seat(2, 1)
    assert Seat(1, 4) < Seat(2, 1)


@pytest.mark.parametrize("table,seat", [(0, 1), (11, 1), (1, 0), (1, 5)])
def test_seat_outside_grid_rejected(table: int, seat: int) -> None:
    with pytest.raises(InvalidSeatError):
        Seat(table, seat)


def test_seat_label() -> None:
    assert Seat(3, 4).label == "T3-S4"
    assert str(Seat(3, 4)) == "T3-S4"


def test_equality_ignores_order_for_every_permutation() -> None:
    seats = [(1, 2), (1, 3), (4, 1), (2, 2)]
    base = SeatSet(seats)
    for perm in itertools.permutations(seats):
        other = SeatSet(perm)
        assert base.equals(other)
        assert base == other
        assert hash(base) == hash(other)


def test_duplicates_suppressed() -> None:
    seats = SeatSet([(1, 2), (1, 2), Seat(1, 2)])
    assert len(seats) == 1
    assert seats.as_pairs() == [(1, 2)]


def test_iteration_and_label_use_canonical_order() -> None:
    seats = SeatSet([(2, 1), (1, 3), (1, 2)])
    assert list(seats) == [Seat(1, 2), Seat(1, 3), Seat(2, 1)]
    assert seats.label == "T1-S2, T1-S3, T2-S1"
    assert seats.key() == "1-2,1-3,2-1"


def test_contains_accepts_pairs_and_seats() -> None:
    seats = SeatSet([(5, 1)])
    assert seats.contains((5, 1))
    assert Seat(5, 1) in seats
    assert (5, 2) not in seats
    assert (99, 1) not in seats
    assert "5-1" not in seats


def test_toggle_is_pure() -> None:
    original = SeatSet([(1, 1)])
    added = original.toggle((1, 2))
    removed = original.toggle((1, 1))
    assert original.as_pairs() == [(1, 1)]
    assert added.as_pairs() == [(1, 1), (1, 2)]
    assert len(removed) == 0


def test_toggle_twice_restores_set() -> None:
    rng = random.Random(7)
    universe = [Seat(t, s) for t in range(1, 11) for s in range(1, 5)]
    for _ in range(50):
        start = SeatSet(rng.sample(universe, rng.randint(0, 10)))
        seat = rng.choice(universe)
        assert start.toggle(seat).toggle(seat) == start


def test_set_operations() -> None:
    a = SeatSet([(1, 1), (1, 2), (2, 1)])
    b = SeatSet([(1, 2), (3, 3)])
    assert (a | b).as_pairs() == [(1, 1), (1, 2), (2, 1), (3, 3)]
    assert (a & b).as_pairs() == [(1, 2)]
    assert (a - b).as_pairs() == [(1, 1), (2, 1)]


def test_usable_as_dict_key() -> None:
    cache = {SeatSet([(1, 2), (1, 3)]): "booked"}
    assert cache[SeatSet([(1, 3), (1, 2)])] == "booked"


def test_not_equal_to_other_types() -> None:
    assert SeatSet([(1, 1)]) != [(1, 1)]
