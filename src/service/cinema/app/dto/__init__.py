"""Application layer DTOs"""

from src.service.cinema.app.dto.booking_dto import BookingView, CouponResult
from src.service.cinema.app.dto.seat_map_dto import SeatMap, SeatMapEntry

__all__ = [
    'BookingView',
    'CouponResult',
    'SeatMap',
    'SeatMapEntry',
]
