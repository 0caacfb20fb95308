from datetime import datetime

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEvent,
    BookingLifecycleEventType,
)
from src.service.cinema.domain.entity.booking_entity import Booking


async def notify_after_commit(
    *,
    dispatcher: INotificationDispatcher,
    event_type: BookingLifecycleEventType,
    booking: Booking,
    now: datetime,
) -> None:
    """Fire-and-forget: the booking state is already committed, so failures are only logged."""
    event = BookingLifecycleEvent.from_booking(
        event_type=event_type, booking=booking, occurred_at=now
    )
    try:
        await dispatcher.dispatch(event=event)
    except Exception as e:
        Logger.base.warning(
            f'📭 [NOTIFY] {event.event_type} for booking {event.booking_id} not delivered: {e}'
        )
