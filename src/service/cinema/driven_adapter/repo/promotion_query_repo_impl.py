from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_promotion_query_repo import IPromotionQueryRepo
from src.service.cinema.domain.entity.promotion_entity import DiscountType, Promotion
from src.service.cinema.driven_adapter.model.promotion_model import (
    PromotionModel,
    PromotionUsageModel,
)


class PromotionQueryRepoImpl(IPromotionQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_promotion: PromotionModel) -> Promotion:
        return Promotion(
            id=db_promotion.id,
            code=db_promotion.code,
            name=db_promotion.name,
            description=db_promotion.description,
            discount_type=DiscountType(db_promotion.discount_type),
            discount_value=Decimal(db_promotion.discount_value),
            max_discount=(
                Decimal(db_promotion.max_discount)
                if db_promotion.max_discount is not None
                else None
            ),
            min_tickets=db_promotion.min_tickets,
            valid_from=db_promotion.valid_from,
            valid_until=db_promotion.valid_until,
            applicable_days=frozenset(int(day) for day in db_promotion.applicable_days or []),
            applicable_movies=frozenset(
                int(movie_id) for movie_id in db_promotion.applicable_movies or []
            ),
            max_uses=db_promotion.max_uses,
            max_uses_per_user=db_promotion.max_uses_per_user,
            uses_count=db_promotion.uses_count,
            is_active=db_promotion.is_active,
        )

    @Logger.io
    async def get_by_code(self, *, code: str) -> Optional[Promotion]:
        result = await self.session.execute(
            select(PromotionModel)
            .where(func.upper(PromotionModel.code) == code.strip().upper())
            .execution_options(populate_existing=True)
        )
        db_promotion = result.scalar_one_or_none()
        return self._to_entity(db_promotion) if db_promotion else None

    @Logger.io
    async def count_user_usages(self, *, promotion_id: int, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count(PromotionUsageModel.id)).where(
                PromotionUsageModel.promotion_id == promotion_id,
                PromotionUsageModel.user_id == user_id,
            )
        )
        return int(result.scalar_one())

    @Logger.io
    async def list_active(self, *, today: date) -> List[Promotion]:
        result = await self.session.execute(
            select(PromotionModel)
            .where(
                PromotionModel.is_active.is_(True),
                PromotionModel.valid_from <= today,
                PromotionModel.valid_until >= today,
                or_(
                    PromotionModel.max_uses.is_(None),
                    PromotionModel.uses_count < PromotionModel.max_uses,
                ),
            )
            .order_by(PromotionModel.valid_until, PromotionModel.code)
        )
        return [self._to_entity(db_promotion) for db_promotion in result.scalars().all()]
