from typing import List

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.apply_coupon_use_case import ApplyCouponUseCase
from src.service.cinema.app.query.list_active_promotions_use_case import (
    ListActivePromotionsUseCase,
)
from src.service.cinema.app.query.validate_coupon_use_case import ValidateCouponUseCase
from src.service.cinema.domain.value_object.request_context import RequestContext
from src.service.cinema.driving_adapter.http_controller.auth.request_context import (
    get_request_context,
)
from src.service.cinema.driving_adapter.http_controller.schema.promotion_schema import (
    CouponRequest,
    CouponResponse,
    PromotionResponse,
)


router = APIRouter()


@router.get('/active', response_model=List[PromotionResponse])
@Logger.io
async def list_active_promotions(
    use_case: ListActivePromotionsUseCase = Depends(ListActivePromotionsUseCase.depends),
) -> List[PromotionResponse]:
    promotions = await use_case.execute()
    return [PromotionResponse.from_promotion(promotion) for promotion in promotions]


@router.post('/validate')
@Logger.io
async def validate_coupon(
    request: CouponRequest,
    context: RequestContext = Depends(get_request_context),
    use_case: ValidateCouponUseCase = Depends(ValidateCouponUseCase.depends),
) -> CouponResponse:
    result = await use_case.execute(
        code=request.code, booking_id=request.booking_id, context=context
    )
    return CouponResponse.from_result(result)


@router.post('/apply')
@Logger.io
async def apply_coupon(
    request: CouponRequest,
    context: RequestContext = Depends(get_request_context),
    use_case: ApplyCouponUseCase = Depends(ApplyCouponUseCase.depends),
) -> CouponResponse:
    result = await use_case.execute(
        booking_id=request.booking_id, code=request.code, context=context
    )
    return CouponResponse.from_result(result)
