"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cinema.app.command import (
    apply_coupon_use_case,
    cancel_booking_use_case,
    confirm_booking_use_case,
    expire_booking_use_case,
    pay_booking_use_case,
    reserve_seats_use_case,
)
from src.service.cinema.app.query import (
    get_booking_use_case,
    get_seat_map_use_case,
    list_active_promotions_use_case,
    list_user_bookings_use_case,
    validate_coupon_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    reserve_seats_use_case,
    confirm_booking_use_case,
    cancel_booking_use_case,
    expire_booking_use_case,
    pay_booking_use_case,
    apply_coupon_use_case,
    get_seat_map_use_case,
    list_active_promotions_use_case,
    get_booking_use_case,
    list_user_bookings_use_case,
    validate_coupon_use_case,
]
