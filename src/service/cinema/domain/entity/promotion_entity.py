from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import FrozenSet, Optional

import attrs


class DiscountType(StrEnum):
    FIXED = 'fixed'
    PERCENTAGE = 'percentage'
    TWO_FOR_ONE = '2x1'


@attrs.define(frozen=True)
class Promotion:
    id: int
    code: str
    name: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: date
    valid_until: date
    min_tickets: int = 1
    max_discount: Optional[Decimal] = None
    # ISO weekdays, 1 = Monday .. 7 = Sunday; empty means every day
    applicable_days: FrozenSet[int] = frozenset()
    # Empty means every movie
    applicable_movies: FrozenSet[int] = frozenset()
    max_uses: Optional[int] = None
    max_uses_per_user: Optional[int] = None
    uses_count: int = 0
    is_active: bool = True
    description: Optional[str] = None

    def is_within_window(self, today: date) -> bool:
        return self.valid_from <= today <= self.valid_until

    def applies_on(self, today: date) -> bool:
        return not self.applicable_days or today.isoweekday() in self.applicable_days

    def applies_to_movie(self, movie_id: int) -> bool:
        return not self.applicable_movies or movie_id in self.applicable_movies

    @property
    def has_uses_left(self) -> bool:
        return self.max_uses is None or self.uses_count < self.max_uses
