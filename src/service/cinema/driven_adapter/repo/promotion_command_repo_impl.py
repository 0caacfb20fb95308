from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_promotion_command_repo import IPromotionCommandRepo
from src.service.cinema.driven_adapter.model.promotion_model import (
    PromotionModel,
    PromotionUsageModel,
)


class PromotionCommandRepoImpl(IPromotionCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def increment_usage(self, *, promotion_id: int) -> bool:
        result = await self.session.execute(
            update(PromotionModel)
            .where(
                PromotionModel.id == promotion_id,
                or_(
                    PromotionModel.max_uses.is_(None),
                    PromotionModel.uses_count < PromotionModel.max_uses,
                ),
            )
            .values(uses_count=PromotionModel.uses_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def record_usage(
        self, *, promotion_id: int, user_id: int, booking_id: int, now: datetime
    ) -> None:
        self.session.add(
            PromotionUsageModel(
                promotion_id=promotion_id,
                user_id=user_id,
                booking_id=booking_id,
                created_at=now,
            )
        )
        await self.session.flush()
