from datetime import datetime
from decimal import Decimal
from typing import List

import attrs
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_command_repo import (
    IBookingCommandRepo,
    SeatClaimConflictError,
)
from src.service.cinema.domain.entity.booking_entity import (
    Booking,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, BookingSeatModel


class BookingCommandRepoImpl(IBookingCommandRepo):
    """
    Booking writes inside the caller's Unit of Work.

    Status changes are single UPDATE statements guarded by the expected current
    status; the affected row count tells the caller whether it won.
    """

    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create_hold(self, *, booking: Booking) -> Booking:
        db_booking = BookingModel(
            user_id=booking.user_id,
            showtime_id=booking.showtime_id,
            booking_code=booking.booking_code,
            status=booking.status.value,
            reserved_until=booking.reserved_until,
            total_seats=booking.total_seats,
            total_amount=booking.total_amount,
            discount_amount=booking.discount_amount,
            final_amount=booking.final_amount,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
        db_booking.seats = [
            BookingSeatModel(
                showtime_id=seat.showtime_id,
                seat_id=seat.seat_id,
                price=seat.price,
                is_active=True,
            )
            for seat in booking.seats
        ]
        self.session.add(db_booking)

        try:
            await self.session.flush()
        except IntegrityError as e:
            raise SeatClaimConflictError(str(e.orig)) from e

        return attrs.evolve(
            booking,
            id=db_booking.id,
            seats=[
                attrs.evolve(seat, id=db_seat.id, booking_id=db_booking.id)
                for seat, db_seat in zip(booking.seats, db_booking.seats, strict=True)
            ],
        )

    @Logger.io
    async def expire_overdue_holds_on_seats(
        self, *, showtime_id: int, seat_ids: List[int], now: datetime
    ) -> List[int]:
        result = await self.session.execute(
            select(BookingSeatModel.booking_id)
            .join(BookingModel, BookingModel.id == BookingSeatModel.booking_id)
            .where(
                BookingSeatModel.showtime_id == showtime_id,
                BookingSeatModel.seat_id.in_(seat_ids),
                BookingSeatModel.is_active.is_(True),
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.reserved_until <= now,
            )
            .distinct()
        )

        expired_ids = []
        for booking_id in result.scalars().all():
            if await self.mark_expired(booking_id=booking_id, now=now):
                expired_ids.append(booking_id)

        if expired_ids:
            Logger.base.info(
                f'⌛ [LAZY-EXPIRE] Released stale holds {expired_ids} on showtime {showtime_id}'
            )
        return expired_ids

    @Logger.io
    async def mark_confirmed(
        self, *, booking_id: int, now: datetime, payment_method: PaymentMethod
    ) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking_id,
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.reserved_until > now,
            )
            .values(
                status=BookingStatus.CONFIRMED.value,
                payment_method=payment_method.value,
                confirmed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def mark_cancelled(self, *, booking_id: int, now: datetime) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking_id,
                or_(
                    BookingModel.status == BookingStatus.CONFIRMED.value,
                    and_(
                        BookingModel.status == BookingStatus.PENDING.value,
                        BookingModel.reserved_until > now,
                    ),
                ),
            )
            .values(status=BookingStatus.CANCELLED.value, cancelled_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return False

        await self._release_seats(booking_id=booking_id)
        return True

    @Logger.io
    async def mark_expired(self, *, booking_id: int, now: datetime) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking_id,
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.reserved_until <= now,
            )
            .values(status=BookingStatus.EXPIRED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return False

        await self._release_seats(booking_id=booking_id)
        return True

    @Logger.io
    async def apply_discount(
        self,
        *,
        booking_id: int,
        promotion_id: int,
        discount_amount: Decimal,
        final_amount: Decimal,
        now: datetime,
    ) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking_id,
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.reserved_until > now,
                BookingModel.promotion_id.is_(None),
            )
            .values(
                promotion_id=promotion_id,
                discount_amount=discount_amount,
                final_amount=final_amount,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def _release_seats(self, *, booking_id: int) -> None:
        await self.session.execute(
            update(BookingSeatModel)
            .where(BookingSeatModel.booking_id == booking_id)
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
