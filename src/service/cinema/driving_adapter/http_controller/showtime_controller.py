from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.query.get_seat_map_use_case import GetSeatMapUseCase
from src.service.cinema.driving_adapter.http_controller.schema.seat_map_schema import (
    SeatMapResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get('/{showtime_id}/seats')
@Logger.io
async def get_seat_map(
    showtime_id: int,
    use_case: GetSeatMapUseCase = Depends(GetSeatMapUseCase.depends),
) -> SeatMapResponse:
    """Seat map for a showtime; public, no caller identity needed."""
    with tracer.start_as_current_span('controller.get_seat_map') as span:
        span.set_attribute('showtime.id', showtime_id)
        seat_map = await use_case.execute(showtime_id=showtime_id)
        return SeatMapResponse.from_seat_map(seat_map)
