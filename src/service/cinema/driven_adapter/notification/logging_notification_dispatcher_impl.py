from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEvent,
    BookingLifecycleEventType,
)


_EVENT_ICONS = {
    BookingLifecycleEventType.CONFIRMED: '📧',
    BookingLifecycleEventType.CANCELLED: '📪',
    BookingLifecycleEventType.EXPIRED: '⏰',
}


class LoggingNotificationDispatcherImpl(INotificationDispatcher):
    """
    Writes lifecycle events to the log stream.

    Email and push delivery are handled by the notification service, which
    tails these structured lines; nothing here blocks on a mail server.
    """

    async def dispatch(self, *, event: BookingLifecycleEvent) -> None:
        Logger.base.bind(
            event_type=event.event_type.value,
            booking_id=event.booking_id,
            user_id=event.user_id,
        ).info(
            f'{_EVENT_ICONS[event.event_type]} [NOTIFY] {event.event_type} '
            f'booking={event.booking_code} user={event.user_id} '
            f'showtime={event.showtime_id} amount={event.final_amount}'
        )
