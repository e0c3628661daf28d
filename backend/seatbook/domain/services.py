from dataclasses import dataclass
from datetime import datetime

from .errors import SeatCountMismatchError, ValidationError
from .seats import SeatSet


@dataclass(frozen=True)
class ReservationInput:
    customer_name: str
    contact_info: str
    reservation_time: datetime
    number_of_guests: int
    selected_seats: SeatSet


def validate_reservation(data: ReservationInput, *, max_party_size: int) -> None:
    """
    Pure validation run before any write: required text fields, party size range,
    and exactly one seat per guest. Raises domain errors otherwise.
    """
    if not data.customer_name.strip():
        raise ValidationError("customer_name", "Please enter customer name.")
    if not data.contact_info.strip():
        raise ValidationError("contact_info", "Please enter contact information.")
    if not 1 <= data.number_of_guests <= max_party_size:
        raise ValidationError("number_of_guests", f"number_of_guests must be between 1 and {max_party_size}")
    if len(data.selected_seats) != data.number_of_guests:
        raise SeatCountMismatchError(have=len(data.selected_seats), want=data.number_of_guests)
