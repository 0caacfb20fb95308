from datetime import datetime, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import List, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.domain.errors import (
    ExpiredReservationError,
    InvalidStateTransitionError,
    UnauthorizedAccessError,
    ValidationError,
)
from src.service.cinema.domain.value_object.money import ZERO, sum_money, to_money
from src.service.cinema.domain.value_object.request_context import RequestContext


class BookingStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'


class PaymentMethod(StrEnum):
    CARD = 'card'
    CASH = 'cash'


# Statuses whose seat claims count toward occupancy (pending only until reserved_until)
SEAT_HOLDING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.EXPIRED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.EXPIRED: frozenset(),
}

_TRANSITION_VERBS = {
    BookingStatus.CONFIRMED: 'confirm',
    BookingStatus.CANCELLED: 'cancel',
    BookingStatus.EXPIRED: 'expire',
}


@attrs.define(frozen=True)
class BookingSeat:
    seat_id: int
    price: Decimal
    showtime_id: int
    booking_id: Optional[int] = None
    id: Optional[int] = None
    is_active: bool = True


@attrs.define
class Booking:
    user_id: int
    showtime_id: int
    booking_code: str
    total_seats: int
    total_amount: Decimal
    reserved_until: Optional[datetime]
    seats: List[BookingSeat] = attrs.field(factory=list)
    discount_amount: Decimal = ZERO
    final_amount: Decimal = ZERO
    status: BookingStatus = BookingStatus.PENDING
    id: Optional[int] = None
    promotion_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create_hold(
        cls,
        *,
        user_id: int,
        showtime: Showtime,
        seats: List[Seat],
        booking_code: str,
        now: datetime,
        hold_duration: timedelta,
    ) -> 'Booking':
        if not seats:
            raise ValidationError('At least one seat is required')

        booking_seats = [
            BookingSeat(
                seat_id=seat.id,
                price=seat.price_for(showtime.base_price),
                showtime_id=showtime.id,
            )
            for seat in seats
        ]
        total_amount = sum_money(seat.price for seat in booking_seats)

        return cls(
            user_id=user_id,
            showtime_id=showtime.id,
            booking_code=booking_code,
            total_seats=len(booking_seats),
            total_amount=total_amount,
            discount_amount=ZERO,
            final_amount=total_amount,
            reserved_until=now + hold_duration,
            seats=booking_seats,
            status=BookingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def seat_ids(self) -> List[int]:
        return [seat.seat_id for seat in self.seats]

    def is_hold_elapsed(self, *, now: datetime) -> bool:
        return (
            self.status == BookingStatus.PENDING
            and self.reserved_until is not None
            and self.reserved_until <= now
        )

    def effective_status(self, *, now: datetime) -> BookingStatus:
        """Status as readers should see it: an elapsed hold is already expired."""
        if self.is_hold_elapsed(now=now):
            return BookingStatus.EXPIRED
        return self.status

    def ensure_accessible_by(self, context: RequestContext) -> None:
        if context.is_staff or context.user_id == self.user_id:
            return
        raise UnauthorizedAccessError()

    def ensure_pending(self, *, now: datetime) -> None:
        current = self.effective_status(now=now)
        if current == BookingStatus.EXPIRED:
            raise ExpiredReservationError(f'Booking {self.booking_code} hold has expired')
        if current != BookingStatus.PENDING:
            raise InvalidStateTransitionError(f'Booking is {current}, expected pending')

    def ensure_can_transition(self, *, target: BookingStatus, now: datetime) -> None:
        current = self.effective_status(now=now)

        if current == BookingStatus.EXPIRED and target != BookingStatus.EXPIRED:
            raise ExpiredReservationError(f'Booking {self.booking_code} hold has expired')

        if target in ALLOWED_TRANSITIONS[current]:
            return

        if current == target:
            raise InvalidStateTransitionError(f'Booking is already {current}')
        raise InvalidStateTransitionError(
            f'Cannot {_TRANSITION_VERBS.get(target, target)} a {current} booking'
        )

    def confirm(self, *, now: datetime, payment_method: PaymentMethod) -> 'Booking':
        self.ensure_can_transition(target=BookingStatus.CONFIRMED, now=now)
        return attrs.evolve(
            self,
            status=BookingStatus.CONFIRMED,
            payment_method=payment_method,
            confirmed_at=now,
            updated_at=now,
        )

    def cancel(self, *, now: datetime) -> 'Booking':
        self.ensure_can_transition(target=BookingStatus.CANCELLED, now=now)
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            seats=[attrs.evolve(seat, is_active=False) for seat in self.seats],
            cancelled_at=now,
            updated_at=now,
        )

    def expire(self, *, now: datetime) -> 'Booking':
        if not self.is_hold_elapsed(now=now):
            raise InvalidStateTransitionError(f'Cannot expire a {self.status} booking')
        return attrs.evolve(
            self,
            status=BookingStatus.EXPIRED,
            seats=[attrs.evolve(seat, is_active=False) for seat in self.seats],
            updated_at=now,
        )

    def apply_discount(
        self, *, promotion_id: int, discount_amount: Decimal, now: datetime
    ) -> 'Booking':
        self.ensure_pending(now=now)
        discount = to_money(min(discount_amount, self.total_amount))
        return attrs.evolve(
            self,
            promotion_id=promotion_id,
            discount_amount=discount,
            final_amount=final_amount_for(self.total_amount, discount),
            updated_at=now,
        )


def final_amount_for(total_amount: Decimal, discount_amount: Decimal) -> Decimal:
    return to_money(max(ZERO, total_amount - discount_amount))
