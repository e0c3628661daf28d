import logging
from datetime import datetime
from typing import List, Optional

from ..domain.changes import changed_fields, snapshot
from ..domain.errors import ReservationNotFoundError
from ..domain.repositories import ReservationRepository
from ..domain.reservation import Reservation, ReservationPatch
from ..domain.seats import SeatSet
from ..domain.services import ReservationInput, validate_reservation

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTY_SIZE = 20


async def create_reservation(
    res_repo: ReservationRepository,
    *,
    customer_name: str,
    contact_info: str,
    reservation_time: datetime,
    number_of_guests: int,
    selected_seats: SeatSet,
    max_party_size: int = DEFAULT_MAX_PARTY_SIZE,
) -> Reservation:
    validate_reservation(
        ReservationInput(
            customer_name=customer_name,
            contact_info=contact_info,
            reservation_time=reservation_time,
            number_of_guests=number_of_guests,
            selected_seats=selected_seats,
        ),
        max_party_size=max_party_size,
    )
    reservation = await res_repo.add(
        customer_name=customer_name,
        contact_info=contact_info,
        reservation_time=reservation_time,
        number_of_guests=number_of_guests,
        selected_seats=selected_seats,
    )
    logger.info("reservation %s created with seats %s", reservation.id, reservation.selected_seats.label)
    return reservation


async def update_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: str,
    patch: ReservationPatch,
    expected_version: Optional[int] = None,
    max_party_size: int = DEFAULT_MAX_PARTY_SIZE,
) -> tuple[Reservation, List[str]]:
    """
    Validate the merged result before writing so a rejected update leaves the
    stored reservation untouched. Returns the updated reservation and the
    names of the fields that actually changed.
    """
    current = await res_repo.get(reservation_id)
    if current is None:
        raise ReservationNotFoundError(reservation_id)

    merged = patch.apply(current)
    validate_reservation(
        ReservationInput(
            customer_name=merged.customer_name,
            contact_info=merged.contact_info,
            reservation_time=merged.reservation_time,
            number_of_guests=merged.number_of_guests,
            selected_seats=merged.selected_seats,
        ),
        max_party_size=max_party_size,
    )
    changed = changed_fields(snapshot(current), merged)
    updated = await res_repo.update(reservation_id, patch, expected_version=expected_version)
    logger.info("reservation %s updated (%s)", reservation_id, ", ".join(changed) or "no changes")
    return updated, changed


async def delete_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: str,
) -> Reservation:
    current = await res_repo.get(reservation_id)
    if current is None:
        raise ReservationNotFoundError(reservation_id)
    await res_repo.remove(reservation_id)
    logger.info("reservation %s deleted, released %s", reservation_id, current.selected_seats.label)
    return current


async def list_reservations(
    res_repo: ReservationRepository,
    *,
    customer_name: Optional[str] = None,
) -> List[Reservation]:
    rows = await res_repo.list_active()
    if customer_name:
        needle = customer_name.casefold()
        rows = [r for r in rows if needle in r.customer_name.casefold()]
    return sorted(rows, key=lambda r: r.reservation_time)


async def get_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: str,
) -> Reservation | None:
    return await res_repo.get(reservation_id)
