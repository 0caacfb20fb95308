"""
Integration tests for the expiry sweep against SQLite

Test Coverage:
1. Only pending holds past their deadline are expired, once
2. The background loop runs a sweep against the store
"""

import pytest

from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEventType,
)
from src.service.cinema.domain.entity.booking_entity import BookingStatus
from src.service.cinema.domain.value_object.request_context import RequestContext
from src.service.cinema.driving_adapter.background.expiry_reaper import ExpiryReaper
from test.service.cinema.fixtures import CUSTOMER_ID


pytestmark = pytest.mark.integration

CUSTOMER = RequestContext(user_id=CUSTOMER_ID)


class TestExpireOverdueBookings:
    async def test_sweep_expires_only_overdue_pending_holds(
        self, services, cinema, clock, notification_dispatcher
    ):
        # Given: one confirmed, one cancelled, one pending booking
        confirmed = await services.reserve.execute(
            context=CUSTOMER, showtime_id=cinema.showtime_id, seat_ids=cinema.seats('A1')
        )
        await services.confirm.execute(booking_id=confirmed.booking_id, context=CUSTOMER)
        cancelled = await services.reserve.execute(
            context=CUSTOMER, showtime_id=cinema.showtime_id, seat_ids=cinema.seats('A2')
        )
        await services.cancel.execute(booking_id=cancelled.booking_id, context=CUSTOMER)
        pending = await services.reserve.execute(
            context=CUSTOMER, showtime_id=cinema.showtime_id, seat_ids=cinema.seats('A3', 'A4')
        )

        # When: the sweep runs before the deadline
        assert await services.expire_overdue.execute() == 0

        # When: the sweep runs after the deadline
        clock.advance(minutes=10)
        expired_count = await services.expire_overdue.execute()

        # Then
        assert expired_count == 1
        expired = notification_dispatcher.of_type(BookingLifecycleEventType.EXPIRED)
        assert [event.booking_id for event in expired] == [pending.booking_id]

        bookings = {
            view.booking_id: view.status
            for view in await services.list_bookings.execute(context=CUSTOMER)
        }
        assert bookings == {
            confirmed.booking_id: BookingStatus.CONFIRMED,
            cancelled.booking_id: BookingStatus.CANCELLED,
            pending.booking_id: BookingStatus.EXPIRED,
        }

        seat_map = await services.seat_map.execute(showtime_id=cinema.showtime_id)
        assert seat_map.occupied_seat_ids == cinema.seats('A1')

        # A second sweep finds nothing left to do
        assert await services.expire_overdue.execute() == 0
        assert len(notification_dispatcher.of_type(BookingLifecycleEventType.EXPIRED)) == 1


class TestExpiryReaperLoop:
    async def test_run_forever_sweeps_the_store(
        self, services, cinema, clock, notification_dispatcher
    ):
        hold = await services.reserve.execute(
            context=CUSTOMER, showtime_id=cinema.showtime_id, seat_ids=cinema.seats('B1')
        )
        clock.advance(minutes=15)
        reaper = ExpiryReaper(
            expire_overdue_bookings_use_case=services.expire_overdue, interval_seconds=0
        )

        await reaper.run_forever(max_sweeps=1)

        assert reaper.is_running is False
        current = await services.get_booking.get_booking(
            booking_id=hold.booking_id, context=CUSTOMER
        )
        assert current.status == BookingStatus.EXPIRED
        assert await services.expire.execute(booking_id=hold.booking_id) is False
        assert len(notification_dispatcher.of_type(BookingLifecycleEventType.EXPIRED)) == 1
