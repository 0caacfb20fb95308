from datetime import datetime
from typing import NoReturn, Optional

from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.errors import BookingNotFoundError, InvalidStateTransitionError


def raise_for_lost_race(
    *, current: Optional[Booking], target: BookingStatus, now: datetime
) -> NoReturn:
    """
    A conditional update matched zero rows: another writer changed the booking
    between our read and our write. Report the error that matches the state it
    was left in (expired, already confirmed, already cancelled...).
    """
    if current is None:
        raise BookingNotFoundError()
    current.ensure_can_transition(target=target, now=now)
    raise InvalidStateTransitionError(f'Booking {current.booking_code} changed concurrently')
