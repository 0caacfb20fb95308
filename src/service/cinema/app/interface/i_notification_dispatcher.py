from abc import ABC, abstractmethod

from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEvent,
)


class INotificationDispatcher(ABC):
    """
    Outbound notifications (email, push) for booking lifecycle changes.

    Called after the state change has committed. Implementations may raise;
    callers log the failure and never roll back the booking because of it.
    """

    @abstractmethod
    async def dispatch(self, *, event: BookingLifecycleEvent) -> None:
        pass
