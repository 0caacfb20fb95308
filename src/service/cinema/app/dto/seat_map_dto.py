"""Seat map DTOs returned by the seat availability query."""

from decimal import Decimal
from typing import List

import attrs

from src.service.cinema.domain.entity.seat_entity import SeatStatus, SeatType


@attrs.define(frozen=True)
class SeatMapEntry:
    seat_id: int
    row_label: str
    seat_number: int
    seat_type: SeatType
    price: Decimal
    status: SeatStatus


@attrs.define(frozen=True)
class SeatMap:
    showtime_id: int
    room_id: int
    base_price: Decimal
    seats: List[SeatMapEntry]

    def count(self, status: SeatStatus) -> int:
        return sum(1 for seat in self.seats if seat.status == status)

    @property
    def occupied_seat_ids(self) -> List[int]:
        return [seat.seat_id for seat in self.seats if seat.status == SeatStatus.OCCUPIED]
