from datetime import datetime

import pytest
from seatbook.domain.errors import ReservationNotFoundError, SeatCountMismatchError, SelectionNotFoundError
from seatbook.domain.reservation import Reservation
from seatbook.domain.seats import SeatSet
from seatbook.domain.selection import SelectionSession, SelectionState
from seatbook.infrastructure.repositories import InMemoryReservationRepository
from seatbook.usecases import selection as uc


def _reservation(reservation_id: str, seats: list[tuple[int, int]]) -> Reservation:
    return Reservation(
        id=reservation_id,
        customer_name="Guest",
        contact_info="555-0100",
        reservation_time=datetime(2026, 7, 1, 19, 0),
        number_of_guests=len(seats),
        selected_seats=SeatSet(seats),
    )


@pytest.mark.asyncio
async def test_new_selection_sees_every_reservation_as_occupied() -> None:
    repo = InMemoryReservationRepository([_reservation("a", [(1, 2), (1, 3)])])
    session = await uc.open_selection(repo, target=2)
    assert session.occupied == SeatSet([(1, 2), (1, 3)])
    assert session.toggle((1, 2)) is False


@pytest.mark.asyncio
async def test_edit_selection_keeps_own_seats_selectable_and_preselected() -> None:
    repo = InMemoryReservationRepository([_reservation("a", [(1, 2), (1, 3)]), _reservation("b", [(4, 4)])])
    session = await uc.open_selection(repo, target=3, reservation_id="a")
    assert session.occupied == SeatSet([(4, 4)])
    assert session.selected == SeatSet([(1, 2), (1, 3)])
    assert session.toggle((1, 4)) is True
    assert session.confirm() == SeatSet([(1, 2), (1, 3), (1, 4)])


@pytest.mark.asyncio
async def test_explicit_preselection_wins_over_stored_seats() -> None:
    repo = InMemoryReservationRepository([_reservation("a", [(1, 2), (1, 3)]), _reservation("b", [(4, 4)])])
    session = await uc.open_selection(repo, target=2, preselected=[(4, 4), (5, 1)], reservation_id="a")
    assert session.selected == SeatSet([(5, 1)])


@pytest.mark.asyncio
async def test_edit_selection_for_unknown_reservation() -> None:
    repo = InMemoryReservationRepository()
    with pytest.raises(ReservationNotFoundError):
        await uc.open_selection(repo, target=1, reservation_id="missing")


@pytest.mark.asyncio
async def test_current_seat_map_marks_occupied() -> None:
    repo = InMemoryReservationRepository([_reservation("a", [(10, 4)])])
    views = await uc.current_seat_map(repo)
    assert [(v.table, v.seat) for v in views if v.occupied] == [(10, 4)]
    views = await uc.current_seat_map(repo, exclude_reservation_id="a")
    assert not any(v.occupied for v in views)


@pytest.mark.asyncio
async def test_registry_confirm_and_abandon() -> None:
    repo = InMemoryReservationRepository()
    registry = uc.SelectionRegistry()

    selection_id = registry.register(await uc.open_selection(repo, target=1))
    registry.get(selection_id).toggle((6, 1))
    assert registry.confirm(selection_id) == SeatSet([(6, 1)])
    assert len(registry) == 0
    with pytest.raises(SelectionNotFoundError):
        registry.get(selection_id)

    other_id = registry.register(await uc.open_selection(repo, target=1))
    session = registry.get(other_id)
    registry.abandon(other_id)
    assert session.state == SelectionState.ABANDONED
    with pytest.raises(SelectionNotFoundError):
        registry.abandon(other_id)


def test_registry_failed_confirm_keeps_session() -> None:
    registry = uc.SelectionRegistry()
    selection_id = registry.register(SelectionSession.open(2, SeatSet()))
    with pytest.raises(SeatCountMismatchError):
        registry.confirm(selection_id)
    assert registry.get(selection_id).state == SelectionState.SELECTING


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_registry_expires_idle_sessions() -> None:
    clock = FakeClock()
    registry = uc.SelectionRegistry(idle_ttl=60, clock=clock)
    stale_id = registry.register(SelectionSession.open(2, SeatSet()))
    stale = registry.get(stale_id)

    clock.now = 30
    fresh_id = registry.register(SelectionSession.open(2, SeatSet()))
    clock.now = 61
    registry.get(fresh_id)

    assert len(registry) == 1
    assert stale.state == SelectionState.ABANDONED
    with pytest.raises(SelectionNotFoundError):
        registry.get(stale_id)


def test_registry_use_keeps_session_alive() -> None:
    clock = FakeClock()
    registry = uc.SelectionRegistry(idle_ttl=60, clock=clock)
    selection_id = registry.register(SelectionSession.open(1, SeatSet()))

    for step in (50, 100, 150):
        clock.now = step
        registry.get(selection_id).toggle((3, 3))

    # toggled on, off, on again
    assert registry.confirm(selection_id) == SeatSet([(3, 3)])


def test_registry_cap_evicts_least_recently_used() -> None:
    clock = FakeClock()
    registry = uc.SelectionRegistry(max_open=3, clock=clock)
    ids = [registry.register(SelectionSession.open(1, SeatSet())) for _ in range(3)]
    registry.get(ids[0])

    newest = registry.register(SelectionSession.open(1, SeatSet()))

    assert len(registry) == 3
    with pytest.raises(SelectionNotFoundError):
        registry.get(ids[1])
    registry.get(ids[0])
    registry.get(newest)


@pytest.mark.asyncio
async def test_registry_stays_bounded_when_clients_never_finish() -> None:
    repo = InMemoryReservationRepository()
    registry = uc.SelectionRegistry(max_open=100)
    for _ in range(5000):
        registry.register(await uc.open_selection(repo, target=2))
    assert len(registry) == 100
