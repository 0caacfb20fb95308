from datetime import datetime
from typing import Callable

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.command.expire_booking_use_case import ExpireBookingUseCase


class ExpireOverdueBookingsUseCase:
    """
    One reaper sweep: expire every pending booking past its reserved_until.

    Each booking is expired in its own transaction. A failure is logged and
    the sweep moves on to the next booking.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        expire_booking_use_case: ExpireBookingUseCase,
        batch_size: int = 500,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.expire_booking_use_case = expire_booking_use_case
        self.batch_size = batch_size
        self.clock = clock

    @Logger.io
    async def execute(self) -> int:
        now = self.clock()
        async with self.uow_factory() as uow:
            overdue_ids = await uow.booking_query_repo.list_overdue_ids(
                now=now, limit=self.batch_size
            )

        if not overdue_ids:
            return 0

        expired_count = 0
        for booking_id in overdue_ids:
            try:
                if await self.expire_booking_use_case.execute(booking_id=booking_id):
                    expired_count += 1
            except Exception as e:
                Logger.base.error(f'❌ [REAPER] Failed to expire booking {booking_id}: {e}')

        Logger.base.info(
            f'🧹 [REAPER] Expired {expired_count}/{len(overdue_ids)} overdue bookings'
        )
        return expired_count
