from decimal import Decimal
from typing import List

from pydantic import BaseModel

from src.service.cinema.app.dto.seat_map_dto import SeatMap
from src.service.cinema.domain.entity.seat_entity import SeatStatus


class SeatResponse(BaseModel):
    seat_id: int
    row_label: str
    seat_number: int
    seat_type: str
    price: Decimal
    status: str


class SeatMapResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'showtime_id': 1,
                'room_id': 1,
                'base_price': '10.00',
                'available_count': 1,
                'occupied_count': 1,
                'unavailable_count': 0,
                'seats': [
                    {
                        'seat_id': 1,
                        'row_label': 'A',
                        'seat_number': 1,
                        'seat_type': 'standard',
                        'price': '10.00',
                        'status': 'available',
                    },
                    {
                        'seat_id': 2,
                        'row_label': 'A',
                        'seat_number': 2,
                        'seat_type': 'vip',
                        'price': '15.00',
                        'status': 'occupied',
                    },
                ],
            }
        },
    }

    showtime_id: int
    room_id: int
    base_price: Decimal
    available_count: int
    occupied_count: int
    unavailable_count: int
    seats: List[SeatResponse]

    @classmethod
    def from_seat_map(cls, seat_map: SeatMap) -> 'SeatMapResponse':
        return cls(
            showtime_id=seat_map.showtime_id,
            room_id=seat_map.room_id,
            base_price=seat_map.base_price,
            available_count=seat_map.count(SeatStatus.AVAILABLE),
            occupied_count=seat_map.count(SeatStatus.OCCUPIED),
            unavailable_count=seat_map.count(SeatStatus.UNAVAILABLE),
            seats=[
                SeatResponse(
                    seat_id=seat.seat_id,
                    row_label=seat.row_label,
                    seat_number=seat.seat_number,
                    seat_type=seat.seat_type.value,
                    price=seat.price,
                    status=seat.status.value,
                )
                for seat in seat_map.seats
            ],
        )
