from datetime import datetime, timedelta
from typing import Callable, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.command.booking_lifecycle_guard import raise_for_lost_race
from src.service.cinema.app.command.booking_notifier import notify_after_commit
from src.service.cinema.app.command.expire_booking_use_case import ExpireBookingUseCase
from src.service.cinema.app.dto.booking_dto import BookingView
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEventType,
)
from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.domain.errors import (
    BookingNotFoundError,
    ExpiredReservationError,
    InvalidStateTransitionError,
)
from src.service.cinema.domain.value_object.request_context import RequestContext


class CancelBookingUseCase:
    """
    Cancel a pending or confirmed booking and release its seats immediately.

    Policy: when `cancellation_cutoff_hours` is set, customers cannot cancel a
    confirmed booking that close to the showtime. Staff are not bound by it.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        notification_dispatcher: INotificationDispatcher,
        expire_booking_use_case: ExpireBookingUseCase,
        cancellation_cutoff_hours: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.notification_dispatcher = notification_dispatcher
        self.expire_booking_use_case = expire_booking_use_case
        self.cancellation_cutoff_hours = cancellation_cutoff_hours
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        notification_dispatcher: INotificationDispatcher = Depends(
            Provide[Container.notification_dispatcher]
        ),
        expire_booking_use_case: ExpireBookingUseCase = Depends(ExpireBookingUseCase.depends),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            expire_booking_use_case=expire_booking_use_case,
            cancellation_cutoff_hours=settings.CANCELLATION_CUTOFF_HOURS,
        )

    @Logger.io
    async def execute(self, *, booking_id: int, context: RequestContext) -> BookingView:
        now = self.clock()
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
            if booking is None:
                raise BookingNotFoundError()
            booking.ensure_accessible_by(context)

            if not booking.is_hold_elapsed(now=now):
                cancelled = booking.cancel(now=now)
                if booking.status == BookingStatus.CONFIRMED and not context.is_staff:
                    showtime = await uow.showtime_query_repo.get_by_id(
                        showtime_id=booking.showtime_id
                    )
                    self._ensure_before_cutoff(booking=booking, showtime=showtime, now=now)

                if not await uow.booking_command_repo.mark_cancelled(
                    booking_id=booking_id, now=now
                ):
                    await uow.rollback()
                    raise_for_lost_race(
                        current=await uow.booking_query_repo.get_by_id(booking_id=booking_id),
                        target=BookingStatus.CANCELLED,
                        now=now,
                    )
                await uow.commit()

        if booking.is_hold_elapsed(now=now):
            await self.expire_booking_use_case.execute(booking_id=booking_id)
            raise ExpiredReservationError(f'Booking {booking.booking_code} hold has expired')

        Logger.base.info(
            f'🚫 [CANCEL] Booking {cancelled.booking_code} cancelled by user {context.user_id}, '
            f'released seats {cancelled.seat_ids}'
        )
        await notify_after_commit(
            dispatcher=self.notification_dispatcher,
            event_type=BookingLifecycleEventType.CANCELLED,
            booking=cancelled,
            now=now,
        )
        return BookingView.from_booking(cancelled, now=now)

    def _ensure_before_cutoff(
        self, *, booking: Booking, showtime: Optional[Showtime], now: datetime
    ) -> None:
        if self.cancellation_cutoff_hours is None or showtime is None:
            return
        if showtime.starts_at - now < timedelta(hours=self.cancellation_cutoff_hours):
            raise InvalidStateTransitionError(
                f'Confirmed booking {booking.booking_code} can only be cancelled up to '
                f'{self.cancellation_cutoff_hours} hours before the showtime'
            )
