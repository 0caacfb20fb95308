"""
Catalog provider interface

Showtimes, rooms and seats are owned by the catalog; the booking core only
reads them.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.entity.showtime_entity import Showtime


class IShowtimeQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, showtime_id: int) -> Optional[Showtime]:
        pass

    @abstractmethod
    async def list_seats_by_room(self, *, room_id: int) -> List[Seat]:
        """All seats of a room ordered by row label, then seat number"""
        pass

    @abstractmethod
    async def get_seats_by_ids(self, *, seat_ids: Iterable[int]) -> List[Seat]:
        pass
