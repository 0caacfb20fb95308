from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.service.cinema.app.query.list_active_promotions_use_case import (
    ListActivePromotionsUseCase,
)
from src.service.cinema.domain.entity.promotion_entity import DiscountType, Promotion
from test.service.cinema.fixtures import TEST_NOW, FakeClock


pytestmark = pytest.mark.unit


class TestListActivePromotions:
    async def test_queries_with_clock_date(self, mock_uow):
        promotion = Promotion(
            id=1,
            code='PCT20',
            name='20 percent off',
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal('20'),
            valid_from=date(2025, 1, 1),
            valid_until=date(2025, 12, 31),
        )
        mock_uow.promotion_query_repo.list_active.return_value = [promotion]
        clock = FakeClock(TEST_NOW + timedelta(hours=13))

        use_case = ListActivePromotionsUseCase(uow_factory=lambda: mock_uow, clock=clock)
        promotions = await use_case.execute()

        assert promotions == [promotion]
        # 2025-03-04 12:00 UTC plus 13h rolls over to the next day
        mock_uow.promotion_query_repo.list_active.assert_awaited_once_with(
            today=date(2025, 3, 5)
        )
        mock_uow.commit.assert_not_awaited()
