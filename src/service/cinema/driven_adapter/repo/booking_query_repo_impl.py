from datetime import datetime
from typing import Iterable, List, Optional, Set

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, BookingSeatModel
from src.service.cinema.driven_adapter.repo.booking_model_mapper import to_booking_entity


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_by_id(self, *, booking_id: int) -> Optional[Booking]:
        # populate_existing: conditional updates bypass the identity map
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .execution_options(populate_existing=True)
        )
        db_booking = result.scalar_one_or_none()
        return to_booking_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_by_code(self, *, booking_code: str) -> Optional[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.booking_code == booking_code)
            .execution_options(populate_existing=True)
        )
        db_booking = result.scalar_one_or_none()
        return to_booking_entity(db_booking) if db_booking else None

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.user_id == user_id)
            .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
            .execution_options(populate_existing=True)
        )
        return [to_booking_entity(db_booking) for db_booking in result.scalars().all()]

    @Logger.io
    async def get_occupied_seat_ids(
        self, *, showtime_id: int, now: datetime, seat_ids: Optional[Iterable[int]] = None
    ) -> Set[int]:
        stmt = (
            select(BookingSeatModel.seat_id)
            .join(BookingModel, BookingModel.id == BookingSeatModel.booking_id)
            .where(
                BookingSeatModel.showtime_id == showtime_id,
                BookingModel.showtime_id == showtime_id,
                BookingSeatModel.is_active.is_(True),
                or_(
                    BookingModel.status == BookingStatus.CONFIRMED.value,
                    and_(
                        BookingModel.status == BookingStatus.PENDING.value,
                        BookingModel.reserved_until > now,
                    ),
                ),
            )
        )
        if seat_ids is not None:
            stmt = stmt.where(BookingSeatModel.seat_id.in_(list(seat_ids)))

        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    @Logger.io
    async def list_overdue_ids(self, *, now: datetime, limit: int) -> List[int]:
        result = await self.session.execute(
            select(BookingModel.id)
            .where(
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.reserved_until <= now,
            )
            .order_by(BookingModel.reserved_until)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def exists_by_code(self, *, booking_code: str) -> bool:
        result = await self.session.execute(
            select(exists().where(BookingModel.booking_code == booking_code))
        )
        return bool(result.scalar())
