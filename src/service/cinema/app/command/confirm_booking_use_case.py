from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

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
from src.service.cinema.domain.entity.booking_entity import BookingStatus, PaymentMethod
from src.service.cinema.domain.errors import BookingNotFoundError, ExpiredReservationError
from src.service.cinema.domain.value_object.request_context import RequestContext


class ConfirmBookingUseCase:
    """
    Mark a held booking as paid (pending → confirmed).

    Callers are responsible for payment: the card path runs the payment
    gateway first (PayBookingUseCase), the cash path is a staff action.
    An elapsed hold is expired on the spot and ExpiredReservationError raised.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        notification_dispatcher: INotificationDispatcher,
        expire_booking_use_case: ExpireBookingUseCase,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.notification_dispatcher = notification_dispatcher
        self.expire_booking_use_case = expire_booking_use_case
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        notification_dispatcher: INotificationDispatcher = Depends(
            Provide[Container.notification_dispatcher]
        ),
        expire_booking_use_case: ExpireBookingUseCase = Depends(ExpireBookingUseCase.depends),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            expire_booking_use_case=expire_booking_use_case,
        )

    @Logger.io
    async def execute(
        self,
        *,
        booking_id: int,
        context: RequestContext,
        payment_method: PaymentMethod = PaymentMethod.CARD,
    ) -> BookingView:
        now = self.clock()
        with self.tracer.start_as_current_span(
            'use_case.confirm_booking',
            attributes={'booking.id': booking_id, 'user.id': context.user_id},
        ):
            async with self.uow_factory() as uow:
                booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                if booking is None:
                    raise BookingNotFoundError()
                booking.ensure_accessible_by(context)

                if not booking.is_hold_elapsed(now=now):
                    confirmed = booking.confirm(now=now, payment_method=payment_method)
                    if not await uow.booking_command_repo.mark_confirmed(
                        booking_id=booking_id, now=now, payment_method=payment_method
                    ):
                        await uow.rollback()
                        raise_for_lost_race(
                            current=await uow.booking_query_repo.get_by_id(booking_id=booking_id),
                            target=BookingStatus.CONFIRMED,
                            now=now,
                        )
                    await uow.commit()

            if booking.is_hold_elapsed(now=now):
                await self.expire_booking_use_case.execute(booking_id=booking_id)
                raise ExpiredReservationError(
                    f'Booking {booking.booking_code} hold expired at '
                    f'{booking.reserved_until.isoformat() if booking.reserved_until else "-"}'
                )

        Logger.base.info(
            f'💳 [CONFIRM] Booking {confirmed.booking_code} confirmed via {payment_method}'
        )
        await notify_after_commit(
            dispatcher=self.notification_dispatcher,
            event_type=BookingLifecycleEventType.CONFIRMED,
            booking=confirmed,
            now=now,
        )
        return BookingView.from_booking(confirmed, now=now)
