from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.confirm_booking_use_case import ConfirmBookingUseCase
from src.service.cinema.app.command.pay_booking_use_case import PayBookingUseCase
from src.service.cinema.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.cinema.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.domain.entity.booking_entity import PaymentMethod
from src.service.cinema.domain.value_object.request_context import RequestContext
from src.service.cinema.driving_adapter.http_controller.auth.request_context import (
    get_request_context,
    require_staff,
)
from src.service.cinema.driving_adapter.http_controller.schema.booking_schema import (
    BookingResponse,
    PaymentRequest,
    ReserveSeatsRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def reserve_seats(
    request: ReserveSeatsRequest,
    context: RequestContext = Depends(get_request_context),
    use_case: ReserveSeatsUseCase = Depends(ReserveSeatsUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.reserve_seats') as span:
        span.set_attribute('showtime.id', request.showtime_id)
        span.set_attribute('user.id', context.user_id)

        view = await use_case.execute(
            context=context, showtime_id=request.showtime_id, seat_ids=request.seat_ids
        )

        span.set_attribute('booking.id', view.booking_id)
        return BookingResponse.from_view(view)


@router.get('/my_booking', response_model=List[BookingResponse])
@Logger.io
async def list_my_bookings(
    context: RequestContext = Depends(get_request_context),
    use_case: ListUserBookingsUseCase = Depends(ListUserBookingsUseCase.depends),
) -> List[BookingResponse]:
    views = await use_case.execute(context=context)
    return [BookingResponse.from_view(view) for view in views]


@router.get('/code/{booking_code}')
@Logger.io
async def get_booking_by_code(
    booking_code: str,
    context: RequestContext = Depends(require_staff),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    view = await use_case.get_booking_by_code(booking_code=booking_code, context=context)
    return BookingResponse.from_view(view)


@router.get('/{booking_id}')
@Logger.io
async def get_booking(
    booking_id: int,
    context: RequestContext = Depends(get_request_context),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    view = await use_case.get_booking(booking_id=booking_id, context=context)
    return BookingResponse.from_view(view)


@router.post('/{booking_id}/confirm')
@Logger.io
async def confirm_booking(
    booking_id: int,
    context: RequestContext = Depends(require_staff),
    use_case: ConfirmBookingUseCase = Depends(ConfirmBookingUseCase.depends),
) -> BookingResponse:
    view = await use_case.execute(booking_id=booking_id, context=context)
    return BookingResponse.from_view(view)


@router.post('/{booking_id}/pay')
@Logger.io
async def pay_booking(
    booking_id: int,
    request: PaymentRequest,
    context: RequestContext = Depends(get_request_context),
    use_case: PayBookingUseCase = Depends(PayBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.pay_booking') as span:
        span.set_attribute('booking.id', booking_id)
        view = await use_case.execute(
            booking_id=booking_id,
            context=context,
            payment_intent_id=request.payment_intent_id,
        )
        return BookingResponse.from_view(view)


@router.post('/{booking_id}/confirm-cash')
@Logger.io
async def confirm_cash_booking(
    booking_id: int,
    context: RequestContext = Depends(require_staff),
    use_case: ConfirmBookingUseCase = Depends(ConfirmBookingUseCase.depends),
) -> BookingResponse:
    view = await use_case.execute(
        booking_id=booking_id, context=context, payment_method=PaymentMethod.CASH
    )
    return BookingResponse.from_view(view)


@router.patch('/{booking_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: int,
    context: RequestContext = Depends(get_request_context),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> BookingResponse:
    view = await use_case.execute(booking_id=booking_id, context=context)
    return BookingResponse.from_view(view)
