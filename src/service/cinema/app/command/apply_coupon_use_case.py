from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.command.expire_booking_use_case import ExpireBookingUseCase
from src.service.cinema.app.dto.booking_dto import CouponResult
from src.service.cinema.domain.discount_policy import evaluate_coupon
from src.service.cinema.domain.errors import (
    BookingNotFoundError,
    ExpiredReservationError,
    PromotionInvalidError,
    PromotionRejectReason,
    ValidationError,
)
from src.service.cinema.domain.value_object.request_context import RequestContext


class ApplyCouponUseCase:
    """
    Commit a coupon's discount to a pending booking and count the usage.

    Evaluation is repeated inside the write transaction. Both writes are
    conditional: the booking must still be pending without a coupon, and the
    promotion must still have uses left; otherwise nothing is written.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        expire_booking_use_case: ExpireBookingUseCase,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.expire_booking_use_case = expire_booking_use_case
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        expire_booking_use_case: ExpireBookingUseCase = Depends(ExpireBookingUseCase.depends),
    ) -> Self:
        return cls(uow_factory=uow_factory, expire_booking_use_case=expire_booking_use_case)

    @Logger.io
    async def execute(self, *, booking_id: int, code: str, context: RequestContext) -> CouponResult:
        now = self.clock()
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
            if booking is None:
                raise BookingNotFoundError()
            booking.ensure_accessible_by(context)

            if not booking.is_hold_elapsed(now=now):
                booking.ensure_pending(now=now)

                showtime = await uow.showtime_query_repo.get_by_id(
                    showtime_id=booking.showtime_id
                )
                if showtime is None:
                    raise ValidationError(f'Showtime {booking.showtime_id} no longer exists')

                promotion = await uow.promotion_query_repo.get_by_code(code=code)
                user_usage_count = (
                    await uow.promotion_query_repo.count_user_usages(
                        promotion_id=promotion.id, user_id=booking.user_id
                    )
                    if promotion
                    else 0
                )
                quote = evaluate_coupon(
                    promotion=promotion,
                    booking=booking,
                    showtime=showtime,
                    today=now.date(),
                    user_usage_count=user_usage_count,
                )
                discounted = booking.apply_discount(
                    promotion_id=quote.promotion_id,
                    discount_amount=quote.discount_amount,
                    now=now,
                )

                if not await uow.booking_command_repo.apply_discount(
                    booking_id=booking_id,
                    promotion_id=quote.promotion_id,
                    discount_amount=discounted.discount_amount,
                    final_amount=discounted.final_amount,
                    now=now,
                ):
                    await uow.rollback()
                    current = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                    if current is None:
                        raise BookingNotFoundError()
                    current.ensure_pending(now=now)
                    raise PromotionInvalidError(PromotionRejectReason.ALREADY_APPLIED)

                if not await uow.promotion_command_repo.increment_usage(
                    promotion_id=quote.promotion_id
                ):
                    await uow.rollback()
                    raise PromotionInvalidError(PromotionRejectReason.USAGE_EXHAUSTED)

                await uow.promotion_command_repo.record_usage(
                    promotion_id=quote.promotion_id,
                    user_id=booking.user_id,
                    booking_id=booking_id,
                    now=now,
                )
                await uow.commit()

        if booking.is_hold_elapsed(now=now):
            await self.expire_booking_use_case.execute(booking_id=booking_id)
            raise ExpiredReservationError(f'Booking {booking.booking_code} hold has expired')

        Logger.base.info(
            f'🏷️ [COUPON] {quote.code} applied to booking {booking.booking_code}: '
            f'-{quote.discount_amount} → {quote.final_amount}'
        )
        return CouponResult(
            booking_id=booking_id,
            code=quote.code,
            total_amount=quote.total_amount,
            discount_amount=quote.discount_amount,
            final_amount=quote.final_amount,
            applied=True,
        )
