from datetime import datetime
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.dto.seat_map_dto import SeatMap, SeatMapEntry
from src.service.cinema.domain.errors import ShowtimeNotFoundError


class GetSeatMapUseCase:
    """
    Seat-by-seat availability for one showtime.

    Read-only. Holds are judged against `now`, so an elapsed hold shows as
    available even if the reaper has not swept it yet.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, showtime_id: int) -> SeatMap:
        now = self.clock()
        async with self.uow_factory() as uow:
            showtime = await uow.showtime_query_repo.get_by_id(showtime_id=showtime_id)
            if showtime is None:
                raise ShowtimeNotFoundError(showtime_id)

            seats = await uow.showtime_query_repo.list_seats_by_room(room_id=showtime.room_id)
            occupied = await uow.booking_query_repo.get_occupied_seat_ids(
                showtime_id=showtime_id, now=now
            )

        return SeatMap(
            showtime_id=showtime.id,
            room_id=showtime.room_id,
            base_price=showtime.base_price,
            seats=[
                SeatMapEntry(
                    seat_id=seat.id,
                    row_label=seat.row_label,
                    seat_number=seat.seat_number,
                    seat_type=seat.seat_type,
                    price=seat.price_for(showtime.base_price),
                    status=seat.status_given(occupied),
                )
                for seat in seats
            ],
        )
