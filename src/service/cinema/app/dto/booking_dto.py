"""Booking DTOs returned by reservation, lifecycle and query use cases."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import attrs

from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus, PaymentMethod


@attrs.define(frozen=True)
class BookingView:
    """
    Booking as the caller should see it.

    `status` is the effective status: a pending hold past reserved_until reads
    as expired even before the reaper has written it.
    """

    booking_id: int
    booking_code: str
    user_id: int
    showtime_id: int
    status: BookingStatus
    reserved_until: Optional[datetime]
    seat_ids: List[int]
    total_seats: int
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    promotion_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking: Booking, *, now: datetime) -> 'BookingView':
        assert booking.id is not None
        return cls(
            booking_id=booking.id,
            booking_code=booking.booking_code,
            user_id=booking.user_id,
            showtime_id=booking.showtime_id,
            status=booking.effective_status(now=now),
            reserved_until=booking.reserved_until,
            seat_ids=booking.seat_ids,
            total_seats=booking.total_seats,
            total_amount=booking.total_amount,
            discount_amount=booking.discount_amount,
            final_amount=booking.final_amount,
            promotion_id=booking.promotion_id,
            payment_method=booking.payment_method,
            created_at=booking.created_at,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
        )


@attrs.define(frozen=True)
class CouponResult:
    booking_id: int
    code: str
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    applied: bool
