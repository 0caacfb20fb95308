"""
Coupon evaluation rules.

`evaluate_coupon` is pure: callers load the promotion, the booking and the
usage counts, and decide what to persist. Checks run in a fixed order and the
first failing one determines the rejection reason.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import attrs

from src.service.cinema.domain.entity.booking_entity import Booking, final_amount_for
from src.service.cinema.domain.entity.promotion_entity import DiscountType, Promotion
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.domain.errors import PromotionInvalidError, PromotionRejectReason
from src.service.cinema.domain.value_object.money import to_money


@attrs.define(frozen=True)
class DiscountQuote:
    promotion_id: int
    code: str
    discount_type: DiscountType
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal


def compute_discount(
    *,
    discount_type: DiscountType,
    discount_value: Decimal,
    total_amount: Decimal,
    total_seats: int,
    max_discount: Optional[Decimal] = None,
) -> Decimal:
    match discount_type:
        case DiscountType.TWO_FOR_ONE:
            if total_seats < 2:
                raise PromotionInvalidError(
                    PromotionRejectReason.BELOW_MIN_TICKETS,
                    '2x1 promotions need at least 2 seats',
                )
            # Half of the whole subtotal, including the unpaired seat of an odd count
            discount = total_amount / 2
        case DiscountType.FIXED:
            discount = min(discount_value, total_amount)
        case DiscountType.PERCENTAGE:
            discount = total_amount * discount_value / Decimal(100)
            if max_discount is not None:
                discount = min(discount, max_discount)
        case _:
            raise ValueError(f'Unknown discount type: {discount_type}')

    return to_money(discount)


def evaluate_coupon(
    *,
    promotion: Optional[Promotion],
    booking: Booking,
    showtime: Showtime,
    today: date,
    user_usage_count: int = 0,
) -> DiscountQuote:
    if promotion is None:
        raise PromotionInvalidError(PromotionRejectReason.NOT_FOUND, 'Coupon does not exist')
    if not promotion.is_active:
        raise PromotionInvalidError(PromotionRejectReason.INACTIVE, 'Coupon is not active')
    if not promotion.is_within_window(today):
        raise PromotionInvalidError(
            PromotionRejectReason.OUT_OF_WINDOW,
            f'Coupon is valid from {promotion.valid_from} to {promotion.valid_until}',
        )
    if booking.total_seats < promotion.min_tickets:
        raise PromotionInvalidError(
            PromotionRejectReason.BELOW_MIN_TICKETS,
            f'Coupon needs at least {promotion.min_tickets} tickets',
        )
    if not promotion.applies_on(today):
        raise PromotionInvalidError(
            PromotionRejectReason.WRONG_DAY, 'Coupon is not valid on this day of the week'
        )
    if not promotion.applies_to_movie(showtime.movie_id):
        raise PromotionInvalidError(
            PromotionRejectReason.WRONG_MOVIE, 'Coupon does not apply to this movie'
        )
    if not promotion.has_uses_left:
        raise PromotionInvalidError(
            PromotionRejectReason.USAGE_EXHAUSTED, 'Coupon has reached its usage limit'
        )
    if (
        promotion.max_uses_per_user is not None
        and user_usage_count >= promotion.max_uses_per_user
    ):
        raise PromotionInvalidError(
            PromotionRejectReason.PER_USER_LIMIT, 'Coupon already used the maximum times'
        )
    if booking.promotion_id is not None:
        raise PromotionInvalidError(
            PromotionRejectReason.ALREADY_APPLIED, 'Booking already has a coupon applied'
        )

    discount_amount = compute_discount(
        discount_type=promotion.discount_type,
        discount_value=promotion.discount_value,
        total_amount=booking.total_amount,
        total_seats=booking.total_seats,
        max_discount=promotion.max_discount,
    )
    return DiscountQuote(
        promotion_id=promotion.id,
        code=promotion.code,
        discount_type=promotion.discount_type,
        total_amount=booking.total_amount,
        discount_amount=discount_amount,
        final_amount=final_amount_for(booking.total_amount, discount_amount),
    )
