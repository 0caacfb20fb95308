from abc import ABC, abstractmethod
from datetime import datetime


class IPromotionCommandRepo(ABC):
    @abstractmethod
    async def increment_usage(self, *, promotion_id: int) -> bool:
        """
        Bump uses_count unless max_uses has been reached

        Returns:
            False when the coupon ran out of uses in the meantime
        """
        pass

    @abstractmethod
    async def record_usage(
        self, *, promotion_id: int, user_id: int, booking_id: int, now: datetime
    ) -> None:
        pass
