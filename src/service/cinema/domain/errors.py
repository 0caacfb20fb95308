"""
Closed error taxonomy for the booking core.

Every error carries a `BookingErrorKind` so callers can branch on `error.kind`
instead of on exception class names, and the HTTP layer can render it as-is.
"""

from enum import StrEnum
from typing import Any, ClassVar, Iterable

from src.platform.exception.exceptions import CustomBaseError


class BookingErrorKind(StrEnum):
    VALIDATION = 'validation'
    SEAT_UNAVAILABLE = 'seat_unavailable'
    BOOKING_NOT_FOUND = 'booking_not_found'
    UNAUTHORIZED_ACCESS = 'unauthorized_access'
    EXPIRED_RESERVATION = 'expired_reservation'
    INVALID_STATE_TRANSITION = 'invalid_state_transition'
    PROMOTION_INVALID = 'promotion_invalid'
    PAYMENT_DECLINED = 'payment_declined'


class PromotionRejectReason(StrEnum):
    NOT_FOUND = 'not_found'
    INACTIVE = 'inactive'
    OUT_OF_WINDOW = 'out_of_window'
    BELOW_MIN_TICKETS = 'below_min_tickets'
    WRONG_DAY = 'wrong_day'
    WRONG_MOVIE = 'wrong_movie'
    USAGE_EXHAUSTED = 'usage_exhausted'
    PER_USER_LIMIT = 'per_user_limit'
    ALREADY_APPLIED = 'already_applied'


class BookingError(CustomBaseError):
    kind: ClassVar[BookingErrorKind]
    default_status_code: ClassVar[int] = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, status_code or self.default_status_code)

    def to_payload(self) -> dict[str, Any]:
        return {'detail': self.message, 'kind': self.kind.value}


class ValidationError(BookingError):
    kind = BookingErrorKind.VALIDATION


class ShowtimeNotFoundError(ValidationError):
    default_status_code = 404

    def __init__(self, showtime_id: int) -> None:
        self.showtime_id = showtime_id
        super().__init__(f'Showtime {showtime_id} not found')


class SeatUnavailableError(BookingError):
    kind = BookingErrorKind.SEAT_UNAVAILABLE
    default_status_code = 409

    def __init__(self, seat_ids: Iterable[int], message: str | None = None) -> None:
        self.seat_ids = sorted(set(seat_ids))
        super().__init__(message or f'Seats not available: {self.seat_ids}')

    def to_payload(self) -> dict[str, Any]:
        return super().to_payload() | {'seat_ids': self.seat_ids}


class BookingNotFoundError(BookingError):
    kind = BookingErrorKind.BOOKING_NOT_FOUND
    default_status_code = 404

    def __init__(self, message: str = 'Booking not found') -> None:
        super().__init__(message)


class UnauthorizedAccessError(BookingError):
    kind = BookingErrorKind.UNAUTHORIZED_ACCESS
    default_status_code = 403

    def __init__(self, message: str = 'Not allowed to access this booking') -> None:
        super().__init__(message)


class ExpiredReservationError(BookingError):
    kind = BookingErrorKind.EXPIRED_RESERVATION
    default_status_code = 410

    def __init__(self, message: str = 'Reservation hold has expired') -> None:
        super().__init__(message)


class InvalidStateTransitionError(BookingError):
    kind = BookingErrorKind.INVALID_STATE_TRANSITION
    default_status_code = 409


class PromotionInvalidError(BookingError):
    kind = BookingErrorKind.PROMOTION_INVALID
    default_status_code = 422

    def __init__(self, reason: PromotionRejectReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or f'Coupon rejected: {reason.value}')

    def to_payload(self) -> dict[str, Any]:
        return super().to_payload() | {'reason': self.reason.value}


class PaymentDeclinedError(BookingError):
    kind = BookingErrorKind.PAYMENT_DECLINED
    default_status_code = 402
