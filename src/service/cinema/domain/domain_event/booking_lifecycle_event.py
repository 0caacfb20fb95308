"""
Booking lifecycle events

Handed to the notification dispatcher after the state change has committed.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

import attrs

from src.service.cinema.domain.entity.booking_entity import Booking


class BookingLifecycleEventType(StrEnum):
    CONFIRMED = 'booking.confirmed'
    CANCELLED = 'booking.cancelled'
    EXPIRED = 'booking.expired'


@attrs.define(frozen=True)
class BookingLifecycleEvent:
    event_type: BookingLifecycleEventType
    booking_id: int
    booking_code: str
    user_id: int
    showtime_id: int
    final_amount: Decimal
    occurred_at: datetime

    @classmethod
    def from_booking(
        cls, *, event_type: BookingLifecycleEventType, booking: Booking, occurred_at: datetime
    ) -> 'BookingLifecycleEvent':
        assert booking.id is not None
        return cls(
            event_type=event_type,
            booking_id=booking.id,
            booking_code=booking.booking_code,
            user_id=booking.user_id,
            showtime_id=booking.showtime_id,
            final_amount=booking.final_amount,
            occurred_at=occurred_at,
        )
