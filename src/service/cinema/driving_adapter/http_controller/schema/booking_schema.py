from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.cinema.app.dto.booking_dto import BookingView


class ReserveSeatsRequest(BaseModel):
    showtime_id: int
    seat_ids: List[int] = Field(min_length=1)

    class Config:
        json_schema_extra = {'example': {'showtime_id': 1, 'seat_ids': [3, 4, 5]}}


class PaymentRequest(BaseModel):
    payment_intent_id: str

    class Config:
        json_schema_extra = {'example': {'payment_intent_id': 'pi_3NkZ2bLkdIwHu7ix0xYc'}}


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': 42,
                'booking_code': 'K7Q2M9XA',
                'user_id': 7,
                'showtime_id': 1,
                'status': 'pending',
                'reserved_until': '2025-01-10T10:40:00Z',
                'seat_ids': [3, 4, 5],
                'total_seats': 3,
                'total_amount': '30.00',
                'discount_amount': '0.00',
                'final_amount': '30.00',
                'promotion_id': None,
                'payment_method': None,
                'created_at': '2025-01-10T10:30:00Z',
                'confirmed_at': None,
                'cancelled_at': None,
            }
        },
    }

    id: int
    booking_code: str
    user_id: int
    showtime_id: int
    status: str
    reserved_until: Optional[datetime] = None
    seat_ids: List[int]
    total_seats: int
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    promotion_id: Optional[int] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_view(cls, view: BookingView) -> 'BookingResponse':
        return cls(
            id=view.booking_id,
            booking_code=view.booking_code,
            user_id=view.user_id,
            showtime_id=view.showtime_id,
            status=view.status.value,
            reserved_until=view.reserved_until,
            seat_ids=view.seat_ids,
            total_seats=view.total_seats,
            total_amount=view.total_amount,
            discount_amount=view.discount_amount,
            final_amount=view.final_amount,
            promotion_id=view.promotion_id,
            payment_method=view.payment_method.value if view.payment_method else None,
            created_at=view.created_at,
            confirmed_at=view.confirmed_at,
            cancelled_at=view.cancelled_at,
        )
