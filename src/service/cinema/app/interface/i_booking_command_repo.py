"""
Booking Command Repository Interface

Every status change is a conditional update on the current status, so callers
learn from the boolean result whether they won a race against another writer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List

from src.platform.exception.exceptions import CustomBaseError
from src.service.cinema.domain.entity.booking_entity import Booking, PaymentMethod


class SeatClaimConflictError(CustomBaseError):
    """A concurrent transaction claimed one of the seats first (unique index violation)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create_hold(self, *, booking: Booking) -> Booking:
        """
        Insert a pending booking and one active booking_seat row per seat

        Returns:
            Booking with database ids populated

        Raises:
            SeatClaimConflictError: another active claim exists for one of the seats
        """
        pass

    @abstractmethod
    async def expire_overdue_holds_on_seats(
        self, *, showtime_id: int, seat_ids: List[int], now: datetime
    ) -> List[int]:
        """
        Expire elapsed pending bookings that still claim any of the given seats

        Returns:
            IDs of bookings this call moved to expired
        """
        pass

    @abstractmethod
    async def mark_confirmed(
        self, *, booking_id: int, now: datetime, payment_method: PaymentMethod
    ) -> bool:
        """pending (not elapsed) → confirmed"""
        pass

    @abstractmethod
    async def mark_cancelled(self, *, booking_id: int, now: datetime) -> bool:
        """confirmed, or pending (not elapsed) → cancelled; releases the seats"""
        pass

    @abstractmethod
    async def mark_expired(self, *, booking_id: int, now: datetime) -> bool:
        """pending with elapsed reserved_until → expired; releases the seats"""
        pass

    @abstractmethod
    async def apply_discount(
        self,
        *,
        booking_id: int,
        promotion_id: int,
        discount_amount: Decimal,
        final_amount: Decimal,
        now: datetime,
    ) -> bool:
        """Write coupon totals while the booking is pending, unexpired and has no coupon yet"""
        pass
