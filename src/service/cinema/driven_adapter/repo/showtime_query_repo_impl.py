from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_showtime_query_repo import IShowtimeQueryRepo
from src.service.cinema.domain.entity.seat_entity import Seat, SeatType
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.driven_adapter.model.seat_model import SeatModel
from src.service.cinema.driven_adapter.model.showtime_model import ShowtimeModel


class ShowtimeQueryRepoImpl(IShowtimeQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_showtime(db_showtime: ShowtimeModel) -> Showtime:
        return Showtime(
            id=db_showtime.id,
            movie_id=db_showtime.movie_id,
            room_id=db_showtime.room_id,
            show_date=db_showtime.show_date,
            show_time=db_showtime.show_time,
            base_price=Decimal(db_showtime.base_price),
            is_active=db_showtime.is_active,
        )

    @staticmethod
    def _to_seat(db_seat: SeatModel) -> Seat:
        return Seat(
            id=db_seat.id,
            room_id=db_seat.room_id,
            row_label=db_seat.row_label,
            seat_number=db_seat.seat_number,
            seat_type=SeatType(db_seat.seat_type),
            price_multiplier=Decimal(db_seat.price_multiplier),
            is_available=db_seat.is_available,
        )

    @Logger.io
    async def get_by_id(self, *, showtime_id: int) -> Optional[Showtime]:
        db_showtime = await self.session.get(ShowtimeModel, showtime_id)
        return self._to_showtime(db_showtime) if db_showtime else None

    @Logger.io
    async def list_seats_by_room(self, *, room_id: int) -> List[Seat]:
        result = await self.session.execute(
            select(SeatModel)
            .where(SeatModel.room_id == room_id)
            .order_by(SeatModel.row_label, SeatModel.seat_number)
        )
        return [self._to_seat(db_seat) for db_seat in result.scalars().all()]

    @Logger.io
    async def get_seats_by_ids(self, *, seat_ids: Iterable[int]) -> List[Seat]:
        result = await self.session.execute(
            select(SeatModel).where(SeatModel.id.in_(list(seat_ids))).order_by(SeatModel.id)
        )
        return [self._to_seat(db_seat) for db_seat in result.scalars().all()]
