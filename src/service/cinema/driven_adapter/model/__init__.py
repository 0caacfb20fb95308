"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.cinema.driven_adapter.model.booking_model import BookingModel, BookingSeatModel
from src.service.cinema.driven_adapter.model.promotion_model import (
    PromotionModel,
    PromotionUsageModel,
)
from src.service.cinema.driven_adapter.model.room_model import RoomModel
from src.service.cinema.driven_adapter.model.seat_model import SeatModel
from src.service.cinema.driven_adapter.model.showtime_model import ShowtimeModel

__all__ = [
    'BookingModel',
    'BookingSeatModel',
    'PromotionModel',
    'PromotionUsageModel',
    'RoomModel',
    'SeatModel',
    'ShowtimeModel',
]
