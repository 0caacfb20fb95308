from decimal import Decimal
from enum import StrEnum
from typing import AbstractSet

import attrs

from src.service.cinema.domain.value_object.money import to_money


class SeatType(StrEnum):
    STANDARD = 'standard'
    VIP = 'vip'
    DISABLED = 'disabled'  # wheelchair-accessible

    @property
    def default_multiplier(self) -> Decimal:
        return _DEFAULT_MULTIPLIERS[self]


_DEFAULT_MULTIPLIERS: dict[SeatType, Decimal] = {
    SeatType.STANDARD: Decimal('1.00'),
    SeatType.VIP: Decimal('1.50'),
    SeatType.DISABLED: Decimal('1.00'),
}


class SeatStatus(StrEnum):
    AVAILABLE = 'available'
    OCCUPIED = 'occupied'
    UNAVAILABLE = 'unavailable'


@attrs.define(frozen=True)
class Seat:
    id: int
    room_id: int
    row_label: str
    seat_number: int
    seat_type: SeatType = SeatType.STANDARD
    price_multiplier: Decimal = Decimal('1.00')
    is_available: bool = True

    @property
    def label(self) -> str:
        return f'{self.row_label}{self.seat_number}'

    def price_for(self, base_price: Decimal) -> Decimal:
        return to_money(base_price * self.price_multiplier)

    def status_given(self, occupied_seat_ids: AbstractSet[int]) -> SeatStatus:
        # Occupied takes precedence over the hardware flag
        if self.id in occupied_seat_ids:
            return SeatStatus.OCCUPIED
        if not self.is_available:
            return SeatStatus.UNAVAILABLE
        return SeatStatus.AVAILABLE
