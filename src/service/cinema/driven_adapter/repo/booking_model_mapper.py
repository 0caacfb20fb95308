from decimal import Decimal

from src.service.cinema.domain.entity.booking_entity import (
    Booking,
    BookingSeat,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, BookingSeatModel


def to_booking_seat_entity(db_seat: BookingSeatModel) -> BookingSeat:
    return BookingSeat(
        id=db_seat.id,
        booking_id=db_seat.booking_id,
        showtime_id=db_seat.showtime_id,
        seat_id=db_seat.seat_id,
        price=Decimal(db_seat.price),
        is_active=db_seat.is_active,
    )


def to_booking_entity(db_booking: BookingModel) -> Booking:
    return Booking(
        id=db_booking.id,
        user_id=db_booking.user_id,
        showtime_id=db_booking.showtime_id,
        booking_code=db_booking.booking_code,
        status=BookingStatus(db_booking.status),
        reserved_until=db_booking.reserved_until,
        total_seats=db_booking.total_seats,
        total_amount=Decimal(db_booking.total_amount),
        discount_amount=Decimal(db_booking.discount_amount),
        final_amount=Decimal(db_booking.final_amount),
        promotion_id=db_booking.promotion_id,
        payment_method=(
            PaymentMethod(db_booking.payment_method) if db_booking.payment_method else None
        ),
        seats=[to_booking_seat_entity(seat) for seat in db_booking.seats],
        created_at=db_booking.created_at,
        updated_at=db_booking.updated_at,
        confirmed_at=db_booking.confirmed_at,
        cancelled_at=db_booking.cancelled_at,
    )
