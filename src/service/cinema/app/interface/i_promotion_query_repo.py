from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from src.service.cinema.domain.entity.promotion_entity import Promotion


class IPromotionQueryRepo(ABC):
    @abstractmethod
    async def get_by_code(self, *, code: str) -> Optional[Promotion]:
        """Case-insensitive lookup by coupon code"""
        pass

    @abstractmethod
    async def count_user_usages(self, *, promotion_id: int, user_id: int) -> int:
        pass

    @abstractmethod
    async def list_active(self, *, today: date) -> List[Promotion]:
        """Active promotions whose validity window contains today and that still have uses left"""
        pass
