from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.command.booking_notifier import notify_after_commit
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEventType,
)
from src.service.cinema.domain.errors import BookingNotFoundError


class ExpireBookingUseCase:
    """
    Expire one overdue hold and release its seats.

    Idempotent: only a pending booking whose reserved_until has elapsed is
    touched, so the reaper and the lazy checks in confirm/cancel can both call
    it for the same booking without coordination.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        notification_dispatcher: INotificationDispatcher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.notification_dispatcher = notification_dispatcher
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        notification_dispatcher: INotificationDispatcher = Depends(
            Provide[Container.notification_dispatcher]
        ),
    ) -> Self:
        return cls(uow_factory=uow_factory, notification_dispatcher=notification_dispatcher)

    @Logger.io
    async def execute(self, *, booking_id: int) -> bool:
        """
        Returns:
            True when this call performed the pending → expired transition
        """
        now = self.clock()
        async with self.uow_factory() as uow:
            if not await uow.booking_command_repo.mark_expired(booking_id=booking_id, now=now):
                return False
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
            if booking is None:
                raise BookingNotFoundError()
            await uow.commit()

        Logger.base.info(
            f'⌛ [EXPIRE] Booking {booking.booking_code} expired, '
            f'released seats {booking.seat_ids}'
        )
        await notify_after_commit(
            dispatcher=self.notification_dispatcher,
            event_type=BookingLifecycleEventType.EXPIRED,
            booking=booking,
            now=now,
        )
        return True
