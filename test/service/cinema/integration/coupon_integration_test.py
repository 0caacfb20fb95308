"""
Integration tests for coupon validation and application against SQLite

Test Coverage:
1. 2x1 on a three seat booking halves the subtotal and counts one usage
2. Validation quotes without writing anything
3. One coupon per booking; usage caps across customers
4. Rejections for the wrong movie and for an elapsed hold
5. Listing of the promotions usable today
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from src.service.cinema.domain.entity.booking_entity import BookingStatus
from src.service.cinema.domain.errors import (
    ExpiredReservationError,
    PromotionInvalidError,
    PromotionRejectReason,
)
from src.service.cinema.domain.value_object.request_context import RequestContext
from src.service.cinema.driven_adapter.model.booking_model import BookingModel
from src.service.cinema.driven_adapter.model.promotion_model import (
    PromotionModel,
    PromotionUsageModel,
)
from test.service.cinema.fixtures import CUSTOMER_ID, OTHER_CUSTOMER_ID


pytestmark = pytest.mark.integration

CUSTOMER = RequestContext(user_id=CUSTOMER_ID)
OTHER_CUSTOMER = RequestContext(user_id=OTHER_CUSTOMER_ID)


async def _hold(services, cinema, *labels, context=CUSTOMER):
    return await services.reserve.execute(
        context=context, showtime_id=cinema.showtime_id, seat_ids=cinema.seats(*labels)
    )


async def _uses_count(database, code: str) -> int:
    async with database.session() as session:
        result = await session.execute(
            select(PromotionModel.uses_count).where(PromotionModel.code == code)
        )
        return result.scalar_one()


class TestApplyCoupon:
    async def test_two_for_one_on_three_standard_seats(self, services, cinema, database):
        # Given: 3 standard seats at 10.00 on a Tuesday
        hold = await _hold(services, cinema, 'A1', 'A2', 'A3')
        assert hold.total_amount == Decimal('30.00')

        # When
        result = await services.apply_coupon.execute(
            booking_id=hold.booking_id, code='TUESDAY2X1', context=CUSTOMER
        )

        # Then
        assert result.applied is True
        assert result.discount_amount == Decimal('15.00')
        assert result.final_amount == Decimal('15.00')

        async with database.session() as session:
            booking = await session.get(BookingModel, hold.booking_id)
            assert booking.final_amount == Decimal('15.00')
            assert booking.promotion_id == cinema.promotion_ids['TUESDAY2X1']
            usages = await session.execute(
                select(PromotionUsageModel).where(
                    PromotionUsageModel.booking_id == hold.booking_id
                )
            )
            assert len(usages.scalars().all()) == 1
        assert await _uses_count(database, 'TUESDAY2X1') == 1

    async def test_code_is_case_insensitive(self, services, cinema):
        hold = await _hold(services, cinema, 'A1', 'A2')

        result = await services.apply_coupon.execute(
            booking_id=hold.booking_id, code=' pct20 ', context=CUSTOMER
        )

        assert result.code == 'PCT20'
        assert result.final_amount == Decimal('16.00')

    async def test_second_coupon_is_rejected(self, services, cinema, database):
        hold = await _hold(services, cinema, 'A1', 'A2', 'A3')
        await services.apply_coupon.execute(
            booking_id=hold.booking_id, code='TUESDAY2X1', context=CUSTOMER
        )

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.apply_coupon.execute(
                booking_id=hold.booking_id, code='PCT20', context=CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.ALREADY_APPLIED
        assert await _uses_count(database, 'PCT20') == 0

    async def test_single_use_coupon_is_exhausted_for_next_customer(
        self, services, cinema, database
    ):
        first = await _hold(services, cinema, 'A1')
        second = await _hold(services, cinema, 'A2', context=OTHER_CUSTOMER)
        await services.apply_coupon.execute(
            booking_id=first.booking_id, code='FIVEOFF', context=CUSTOMER
        )

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.apply_coupon.execute(
                booking_id=second.booking_id, code='FIVEOFF', context=OTHER_CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.USAGE_EXHAUSTED
        assert await _uses_count(database, 'FIVEOFF') == 1
        untouched = await services.get_booking.get_booking(
            booking_id=second.booking_id, context=OTHER_CUSTOMER
        )
        assert untouched.discount_amount == Decimal('0.00')
        assert untouched.promotion_id is None

    async def test_wrong_movie(self, services, cinema):
        hold = await _hold(services, cinema, 'A1')

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.apply_coupon.execute(
                booking_id=hold.booking_id, code='OTHERMOVIE', context=CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.WRONG_MOVIE

    async def test_unknown_code(self, services, cinema):
        hold = await _hold(services, cinema, 'A1')

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.apply_coupon.execute(
                booking_id=hold.booking_id, code='NOPE', context=CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.NOT_FOUND

    async def test_elapsed_hold_is_rejected_and_expired(self, services, cinema, clock, database):
        hold = await _hold(services, cinema, 'A1', 'A2')
        clock.advance(minutes=11)

        with pytest.raises(ExpiredReservationError):
            await services.apply_coupon.execute(
                booking_id=hold.booking_id, code='PCT20', context=CUSTOMER
            )

        assert await _uses_count(database, 'PCT20') == 0
        async with database.session() as session:
            booking = await session.get(BookingModel, hold.booking_id)
            assert booking.status == BookingStatus.EXPIRED

    async def test_confirm_keeps_discounted_amount(self, services, cinema):
        hold = await _hold(services, cinema, 'A1', 'A2', 'A3')
        await services.apply_coupon.execute(
            booking_id=hold.booking_id, code='TUESDAY2X1', context=CUSTOMER
        )

        confirmed = await services.confirm.execute(booking_id=hold.booking_id, context=CUSTOMER)

        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.total_amount == Decimal('30.00')
        assert confirmed.final_amount == Decimal('15.00')


class TestValidateCoupon:
    async def test_quote_does_not_write(self, services, cinema, database):
        hold = await _hold(services, cinema, 'A1', 'A2', 'A3')

        result = await services.validate_coupon.execute(
            code='PCT20', booking_id=hold.booking_id, context=CUSTOMER
        )

        assert result.applied is False
        assert result.discount_amount == Decimal('6.00')
        assert result.final_amount == Decimal('24.00')
        assert await _uses_count(database, 'PCT20') == 0
        current = await services.get_booking.get_booking(
            booking_id=hold.booking_id, context=CUSTOMER
        )
        assert current.final_amount == Decimal('30.00')

    async def test_percentage_is_capped(self, services, cinema):
        # 6 x 10.00 + 3 x 15.00 = 105.00; 20% is 21.00, capped at 15.00
        hold = await _hold(services, cinema, 'A1', 'A2', 'A3', 'A4', 'A5', 'A6', 'B1', 'B2', 'B3')

        result = await services.validate_coupon.execute(
            code='PCT20', booking_id=hold.booking_id, context=CUSTOMER
        )

        assert result.total_amount == Decimal('105.00')
        assert result.discount_amount == Decimal('15.00')
        assert result.final_amount == Decimal('90.00')

    async def test_two_for_one_needs_two_tickets(self, services, cinema):
        hold = await _hold(services, cinema, 'A1')

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.validate_coupon.execute(
                code='TUESDAY2X1', booking_id=hold.booking_id, context=CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.BELOW_MIN_TICKETS

    async def test_two_for_one_on_wrong_weekday(self, services, cinema, clock):
        # Hold taken late on Tuesday, quoted just after midnight while still pending
        clock.now = clock.now.replace(hour=23, minute=55)
        hold = await _hold(services, cinema, 'A1', 'A2')
        clock.advance(minutes=6)

        with pytest.raises(PromotionInvalidError) as exc_info:
            await services.validate_coupon.execute(
                code='TUESDAY2X1', booking_id=hold.booking_id, context=CUSTOMER
            )

        assert exc_info.value.reason == PromotionRejectReason.WRONG_DAY


class TestListActivePromotions:
    async def test_only_usable_promotions_soonest_expiry_first(self, services, cinema, database):
        # Given: one promotion per reason to hide it, plus one ending today
        async with database.session() as session:
            session.add_all(
                [
                    PromotionModel(
                        code='ENDSTODAY',
                        name='Last day',
                        discount_type='fixed',
                        discount_value=Decimal('1.00'),
                        valid_from=date(2025, 3, 1),
                        valid_until=date(2025, 3, 4),
                    ),
                    PromotionModel(
                        code='DISABLED',
                        name='Switched off',
                        discount_type='fixed',
                        discount_value=Decimal('1.00'),
                        valid_from=date(2000, 1, 1),
                        valid_until=date(2999, 12, 31),
                        is_active=False,
                    ),
                    PromotionModel(
                        code='ENDED',
                        name='Ended yesterday',
                        discount_type='fixed',
                        discount_value=Decimal('1.00'),
                        valid_from=date(2025, 1, 1),
                        valid_until=date(2025, 3, 3),
                    ),
                    PromotionModel(
                        code='UPCOMING',
                        name='Starts tomorrow',
                        discount_type='fixed',
                        discount_value=Decimal('1.00'),
                        valid_from=date(2025, 3, 5),
                        valid_until=date(2025, 3, 31),
                    ),
                    PromotionModel(
                        code='USEDUP',
                        name='No uses left',
                        discount_type='fixed',
                        discount_value=Decimal('1.00'),
                        valid_from=date(2000, 1, 1),
                        valid_until=date(2999, 12, 31),
                        max_uses=10,
                        uses_count=10,
                    ),
                ]
            )
            await session.commit()

        # When
        promotions = await services.list_promotions.execute()

        # Then
        assert [promotion.code for promotion in promotions] == [
            'ENDSTODAY',
            'FIVEOFF',
            'OTHERMOVIE',
            'PCT20',
            'TUESDAY2X1',
        ]

    async def test_exhausted_coupon_drops_out(self, services, cinema):
        hold = await _hold(services, cinema, 'A1')
        await services.apply_coupon.execute(
            booking_id=hold.booking_id, code='FIVEOFF', context=CUSTOMER
        )

        promotions = await services.list_promotions.execute()

        assert 'FIVEOFF' not in {promotion.code for promotion in promotions}
