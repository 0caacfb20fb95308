from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.dto.booking_dto import CouponResult
from src.service.cinema.domain.discount_policy import evaluate_coupon
from src.service.cinema.domain.errors import BookingNotFoundError, ValidationError
from src.service.cinema.domain.value_object.request_context import RequestContext


class ValidateCouponUseCase:
    """
    Quote what a coupon would do to a pending booking without changing anything.

    Raises PromotionInvalidError with the reason of the first failing rule.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, code: str, booking_id: int, context: RequestContext) -> CouponResult:
        now = self.clock()
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
            if booking is None:
                raise BookingNotFoundError()
            booking.ensure_accessible_by(context)
            booking.ensure_pending(now=now)

            showtime = await uow.showtime_query_repo.get_by_id(showtime_id=booking.showtime_id)
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
        return CouponResult(
            booking_id=booking_id,
            code=quote.code,
            total_amount=quote.total_amount,
            discount_amount=quote.discount_amount,
            final_amount=quote.final_amount,
            applied=False,
        )
