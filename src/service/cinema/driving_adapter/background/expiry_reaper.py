"""
Background sweep that expires overdue seat holds.

Runs inside the FastAPI lifespan task group. Seat availability never depends on
the reaper (occupancy checks compare reserved_until against now), so a missed
or failed sweep only delays the status change and the expiry notification.
"""

from typing import Optional

import anyio
from anyio.abc import TaskGroup

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.expire_booking_use_case import ExpireBookingUseCase
from src.service.cinema.app.command.expire_overdue_bookings_use_case import (
    ExpireOverdueBookingsUseCase,
)


class ExpiryReaper:
    def __init__(
        self,
        *,
        expire_overdue_bookings_use_case: ExpireOverdueBookingsUseCase,
        interval_seconds: float,
    ) -> None:
        self.expire_overdue_bookings_use_case = expire_overdue_bookings_use_case
        self.interval_seconds = interval_seconds
        self._running = False

    @classmethod
    def from_container(cls, container: Container) -> 'ExpiryReaper':
        settings: Settings = container.config_service()
        uow_factory = container.uow_factory.provider
        expire_booking_use_case = ExpireBookingUseCase(
            uow_factory=uow_factory,
            notification_dispatcher=container.notification_dispatcher(),
        )
        return cls(
            expire_overdue_bookings_use_case=ExpireOverdueBookingsUseCase(
                uow_factory=uow_factory,
                expire_booking_use_case=expire_booking_use_case,
                batch_size=settings.REAPER_BATCH_SIZE,
            ),
            interval_seconds=settings.REAPER_INTERVAL_SECONDS,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> int:
        """One sweep; errors are logged so the loop keeps going."""
        try:
            return await self.expire_overdue_bookings_use_case.execute()
        except Exception as e:
            Logger.base.error(f'❌ [REAPER] Sweep failed: {e}')
            return 0

    async def run_forever(self, *, max_sweeps: Optional[int] = None) -> None:
        self._running = True
        Logger.base.info(f'🧹 [REAPER] Started, sweeping every {self.interval_seconds}s')
        sweeps = 0
        try:
            while max_sweeps is None or sweeps < max_sweeps:
                await self.run_once()
                sweeps += 1
                await anyio.sleep(self.interval_seconds)
        finally:
            self._running = False
            Logger.base.info('🛑 [REAPER] Stopped')

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self.run_forever)
