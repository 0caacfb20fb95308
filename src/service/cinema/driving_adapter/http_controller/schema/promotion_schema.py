from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.cinema.app.dto.booking_dto import CouponResult
from src.service.cinema.domain.entity.promotion_entity import Promotion


class CouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    booking_id: int

    class Config:
        json_schema_extra = {'example': {'code': 'TUESDAY2X1', 'booking_id': 42}}


class CouponResponse(BaseModel):
    booking_id: int
    code: str
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    applied: bool

    @classmethod
    def from_result(cls, result: CouponResult) -> 'CouponResponse':
        return cls(
            booking_id=result.booking_id,
            code=result.code,
            total_amount=result.total_amount,
            discount_amount=result.discount_amount,
            final_amount=result.final_amount,
            applied=result.applied,
        )


class PromotionResponse(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    discount_type: str
    discount_value: Decimal
    max_discount: Optional[Decimal] = None
    min_tickets: int
    valid_from: date
    valid_until: date
    applicable_days: List[int]
    applicable_movies: List[int]

    @classmethod
    def from_promotion(cls, promotion: Promotion) -> 'PromotionResponse':
        return cls(
            code=promotion.code,
            name=promotion.name,
            description=promotion.description,
            discount_type=promotion.discount_type.value,
            discount_value=promotion.discount_value,
            max_discount=promotion.max_discount,
            min_tickets=promotion.min_tickets,
            valid_from=promotion.valid_from,
            valid_until=promotion.valid_until,
            applicable_days=sorted(promotion.applicable_days),
            applicable_movies=sorted(promotion.applicable_movies),
        )
