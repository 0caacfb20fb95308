"""
Unit tests for the Booking entity state machine

Test Coverage:
1. Hold creation (pricing, totals, deadline)
2. Allowed transitions and their side effects
3. Rejected transitions and the error each one raises
4. Effective status of an elapsed hold
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from src.service.cinema.domain.entity.booking_entity import (
    Booking,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema.domain.entity.seat_entity import Seat, SeatType
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.domain.errors import (
    ExpiredReservationError,
    InvalidStateTransitionError,
    UnauthorizedAccessError,
    ValidationError,
)
from src.service.cinema.domain.value_object.request_context import RequestContext, UserRole


pytestmark = pytest.mark.unit

NOW = datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)
HOLD = timedelta(minutes=10)


def _showtime() -> Showtime:
    return Showtime(
        id=1,
        movie_id=501,
        room_id=1,
        show_date=date(2025, 3, 5),
        show_time=time(20, 0),
        base_price=Decimal('10.00'),
    )


def _seats() -> list[Seat]:
    return [
        Seat(id=1, room_id=1, row_label='A', seat_number=1),
        Seat(id=2, room_id=1, row_label='A', seat_number=2),
        Seat(
            id=3,
            room_id=1,
            row_label='B',
            seat_number=1,
            seat_type=SeatType.VIP,
            price_multiplier=Decimal('1.50'),
        ),
    ]


def _hold() -> Booking:
    booking = Booking.create_hold(
        user_id=7,
        showtime=_showtime(),
        seats=_seats(),
        booking_code='K7Q2M9XA',
        now=NOW,
        hold_duration=HOLD,
    )
    booking.id = 42
    return booking


class TestCreateHold:
    def test_prices_each_seat_from_base_price_and_multiplier(self):
        booking = _hold()

        assert [seat.price for seat in booking.seats] == [
            Decimal('10.00'),
            Decimal('10.00'),
            Decimal('15.00'),
        ]
        assert booking.total_seats == 3
        assert booking.total_amount == Decimal('35.00')
        assert booking.final_amount == Decimal('35.00')
        assert booking.discount_amount == Decimal('0.00')

    def test_hold_is_pending_until_deadline(self):
        booking = _hold()

        assert booking.status == BookingStatus.PENDING
        assert booking.reserved_until == NOW + HOLD
        assert all(seat.is_active for seat in booking.seats)

    def test_requires_at_least_one_seat(self):
        with pytest.raises(ValidationError):
            Booking.create_hold(
                user_id=7,
                showtime=_showtime(),
                seats=[],
                booking_code='K7Q2M9XA',
                now=NOW,
                hold_duration=HOLD,
            )


class TestTransitions:
    def test_confirm_pending_hold(self):
        confirmed = _hold().confirm(
            now=NOW + timedelta(minutes=5), payment_method=PaymentMethod.CARD
        )

        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.payment_method == PaymentMethod.CARD
        assert confirmed.confirmed_at == NOW + timedelta(minutes=5)

    def test_cancel_releases_seats(self):
        cancelled = _hold().cancel(now=NOW)

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.cancelled_at == NOW
        assert not any(seat.is_active for seat in cancelled.seats)

    def test_cancel_confirmed_booking(self):
        confirmed = _hold().confirm(now=NOW, payment_method=PaymentMethod.CASH)

        cancelled = confirmed.cancel(now=NOW + timedelta(hours=1))

        assert cancelled.status == BookingStatus.CANCELLED

    def test_expire_only_after_deadline(self):
        booking = _hold()

        with pytest.raises(InvalidStateTransitionError):
            booking.expire(now=NOW + HOLD - timedelta(seconds=1))

        expired = booking.expire(now=NOW + HOLD)
        assert expired.status == BookingStatus.EXPIRED
        assert not any(seat.is_active for seat in expired.seats)

    def test_confirm_at_deadline_is_expired(self):
        # reserved_until itself is already past the hold
        with pytest.raises(ExpiredReservationError):
            _hold().confirm(now=NOW + HOLD, payment_method=PaymentMethod.CARD)

    def test_second_cancel_is_rejected(self):
        cancelled = _hold().cancel(now=NOW)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            cancelled.cancel(now=NOW)

        assert 'already cancelled' in exc_info.value.message

    def test_confirm_twice_is_rejected(self):
        confirmed = _hold().confirm(now=NOW, payment_method=PaymentMethod.CARD)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            confirmed.confirm(now=NOW, payment_method=PaymentMethod.CARD)

        assert 'already confirmed' in exc_info.value.message

    def test_cancelled_booking_cannot_be_confirmed(self):
        cancelled = _hold().cancel(now=NOW)

        with pytest.raises(InvalidStateTransitionError):
            cancelled.confirm(now=NOW, payment_method=PaymentMethod.CARD)


class TestEffectiveStatus:
    def test_elapsed_hold_reads_as_expired(self):
        booking = _hold()

        assert booking.effective_status(now=NOW + HOLD - timedelta(seconds=1)) == (
            BookingStatus.PENDING
        )
        assert booking.effective_status(now=NOW + HOLD) == BookingStatus.EXPIRED

    def test_confirmed_booking_never_reads_as_expired(self):
        confirmed = _hold().confirm(now=NOW, payment_method=PaymentMethod.CARD)

        assert confirmed.effective_status(now=NOW + timedelta(days=1)) == BookingStatus.CONFIRMED


class TestAccess:
    def test_owner_and_staff_can_access(self):
        booking = _hold()

        booking.ensure_accessible_by(RequestContext(user_id=7))
        booking.ensure_accessible_by(RequestContext(user_id=99, role=UserRole.STAFF))

    def test_other_customer_cannot_access(self):
        with pytest.raises(UnauthorizedAccessError):
            _hold().ensure_accessible_by(RequestContext(user_id=8))


class TestApplyDiscount:
    def test_discount_updates_final_amount(self):
        discounted = _hold().apply_discount(
            promotion_id=3, discount_amount=Decimal('5.00'), now=NOW
        )

        assert discounted.promotion_id == 3
        assert discounted.discount_amount == Decimal('5.00')
        assert discounted.final_amount == Decimal('30.00')

    def test_discount_on_elapsed_hold_is_expired(self):
        with pytest.raises(ExpiredReservationError):
            _hold().apply_discount(promotion_id=3, discount_amount=Decimal('5.00'), now=NOW + HOLD)
