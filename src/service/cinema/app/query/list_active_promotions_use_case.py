from datetime import datetime
from typing import Callable, List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.domain.entity.promotion_entity import Promotion


class ListActivePromotionsUseCase:
    """Coupons a customer can try today, soonest to expire first"""

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
    async def execute(self) -> List[Promotion]:
        async with self.uow_factory() as uow:
            return await uow.promotion_query_repo.list_active(today=self.clock().date())
