from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.dto.booking_dto import BookingView
from src.service.cinema.domain.errors import BookingNotFoundError, UnauthorizedAccessError
from src.service.cinema.domain.value_object.booking_code import normalize_booking_code
from src.service.cinema.domain.value_object.request_context import RequestContext


class GetBookingUseCase:
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
    async def get_booking(self, *, booking_id: int, context: RequestContext) -> BookingView:
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)

        if booking is None:
            raise BookingNotFoundError()
        booking.ensure_accessible_by(context)
        return BookingView.from_booking(booking, now=self.clock())

    @Logger.io
    async def get_booking_by_code(
        self, *, booking_code: str, context: RequestContext
    ) -> BookingView:
        """Box-office lookup by the code printed on the ticket (staff only)"""
        if not context.is_staff:
            raise UnauthorizedAccessError('Only staff can look up bookings by code')

        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_code(
                booking_code=normalize_booking_code(booking_code)
            )

        if booking is None:
            raise BookingNotFoundError(f'Booking {booking_code} not found')
        return BookingView.from_booking(booking, now=self.clock())
