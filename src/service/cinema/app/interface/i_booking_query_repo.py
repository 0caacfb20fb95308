from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional, Set

from src.service.cinema.domain.entity.booking_entity import Booking


class IBookingQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_by_code(self, *, booking_code: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        """Bookings of one user, newest first"""
        pass

    @abstractmethod
    async def get_occupied_seat_ids(
        self, *, showtime_id: int, now: datetime, seat_ids: Optional[Iterable[int]] = None
    ) -> Set[int]:
        """
        Seat ids claimed by a confirmed booking or an unexpired pending booking

        Args:
            showtime_id: Showtime to inspect
            now: Instant holds are compared against
            seat_ids: Restrict the lookup to these seats (None = whole showtime)
        """
        pass

    @abstractmethod
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[int]:
        """Pending bookings whose reserved_until is before now, oldest first"""
        pass

    @abstractmethod
    async def exists_by_code(self, *, booking_code: str) -> bool:
        pass
