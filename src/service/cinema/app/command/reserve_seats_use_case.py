"""
Reserve Seats Use Case - atomic seat claim for one showtime
"""

from datetime import datetime, timedelta
from typing import Callable, List, Self, Set

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.app.command.booking_notifier import notify_after_commit
from src.service.cinema.app.dto.booking_dto import BookingView
from src.service.cinema.app.interface.i_booking_command_repo import SeatClaimConflictError
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEventType,
)
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.domain.errors import (
    SeatUnavailableError,
    ShowtimeNotFoundError,
    ValidationError,
)
from src.service.cinema.domain.value_object.booking_code import generate_booking_code
from src.service.cinema.domain.value_object.request_context import RequestContext


# A unique-index violation without any seat overlap can only be a booking code collision
MAX_RESERVE_ATTEMPTS = 2
MAX_CODE_GENERATION_ATTEMPTS = 5


class ReserveSeatsUseCase:
    """
    Claim a set of seats for one user as a single pending booking.

    Flow (one transaction):
    1. Validate showtime (exists, active, not started) and seats (same room, not broken)
    2. Expire stale holds on the requested seats
    3. Read occupancy for the requested seats; abort on any overlap
    4. Price seats, generate booking code, insert booking + booking_seat rows
    5. Commit

    Concurrency:
    - booking_seat has a partial unique index on (showtime_id, seat_id) for active
      claims; a losing concurrent writer fails on insert and gets SeatUnavailableError
    - SQLite transactions start with BEGIN IMMEDIATE, so writers are serialised
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        notification_dispatcher: INotificationDispatcher,
        hold_duration: timedelta = timedelta(minutes=10),
        max_seats_per_booking: int = 10,
        booking_code_length: int = 8,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.notification_dispatcher = notification_dispatcher
        self.hold_duration = hold_duration
        self.max_seats_per_booking = max_seats_per_booking
        self.booking_code_length = booking_code_length
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        notification_dispatcher: INotificationDispatcher = Depends(
            Provide[Container.notification_dispatcher]
        ),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            hold_duration=timedelta(minutes=settings.HOLD_DURATION_MINUTES),
            max_seats_per_booking=settings.MAX_SEATS_PER_BOOKING,
            booking_code_length=settings.BOOKING_CODE_LENGTH,
        )

    @Logger.io
    async def execute(
        self, *, context: RequestContext, showtime_id: int, seat_ids: List[int]
    ) -> BookingView:
        self._validate_seat_ids(seat_ids)

        with self.tracer.start_as_current_span(
            'use_case.reserve_seats',
            attributes={
                'showtime.id': showtime_id,
                'user.id': context.user_id,
                'seat.quantity': len(seat_ids),
            },
        ):
            Logger.base.info(
                f'🎟️ [RESERVE] User {context.user_id} requests seats {seat_ids} '
                f'for showtime {showtime_id}'
            )

            for attempt in range(1, MAX_RESERVE_ATTEMPTS + 1):
                try:
                    return await self._reserve_once(
                        user_id=context.user_id, showtime_id=showtime_id, seat_ids=seat_ids
                    )
                except SeatClaimConflictError:
                    conflicts = await self._find_conflicts(
                        showtime_id=showtime_id, seat_ids=seat_ids
                    )
                    if conflicts:
                        Logger.base.warning(
                            f'⚔️ [RESERVE] Lost race for seats {sorted(conflicts)} '
                            f'on showtime {showtime_id}'
                        )
                        raise SeatUnavailableError(conflicts)
                    Logger.base.warning(
                        f'🔁 [RESERVE] Insert conflict without seat overlap, '
                        f'retrying (attempt {attempt}/{MAX_RESERVE_ATTEMPTS})'
                    )

            raise SeatUnavailableError(seat_ids, 'Could not reserve seats, please try again')

    def _validate_seat_ids(self, seat_ids: List[int]) -> None:
        if not seat_ids:
            raise ValidationError('At least one seat must be selected')
        if len(seat_ids) > self.max_seats_per_booking:
            raise ValidationError(
                f'Maximum {self.max_seats_per_booking} seats per booking, got {len(seat_ids)}'
            )
        if len(set(seat_ids)) != len(seat_ids):
            raise ValidationError('Duplicate seats in request')

    async def _reserve_once(
        self, *, user_id: int, showtime_id: int, seat_ids: List[int]
    ) -> BookingView:
        now = self.clock()
        async with self.uow_factory() as uow:
            showtime = await uow.showtime_query_repo.get_by_id(showtime_id=showtime_id)
            if showtime is None:
                raise ShowtimeNotFoundError(showtime_id)
            showtime.ensure_bookable(now=now)

            seats = await self._load_requested_seats(uow=uow, showtime=showtime, seat_ids=seat_ids)

            expired_ids = await uow.booking_command_repo.expire_overdue_holds_on_seats(
                showtime_id=showtime_id, seat_ids=seat_ids, now=now
            )
            expired_bookings: List[Booking] = []
            for booking_id in expired_ids:
                expired = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                if expired is not None:
                    expired_bookings.append(expired)

            occupied = await uow.booking_query_repo.get_occupied_seat_ids(
                showtime_id=showtime_id, now=now, seat_ids=seat_ids
            )
            if occupied:
                raise SeatUnavailableError(occupied)

            booking = Booking.create_hold(
                user_id=user_id,
                showtime=showtime,
                seats=seats,
                booking_code=await self._generate_unique_code(uow=uow),
                now=now,
                hold_duration=self.hold_duration,
            )
            booking = await uow.booking_command_repo.create_hold(booking=booking)
            await uow.commit()

        Logger.base.info(
            f'✅ [RESERVE] Booking {booking.booking_code} holds seats {booking.seat_ids} '
            f'until {booking.reserved_until.isoformat() if booking.reserved_until else "-"}'
        )
        for expired in expired_bookings:
            await notify_after_commit(
                dispatcher=self.notification_dispatcher,
                event_type=BookingLifecycleEventType.EXPIRED,
                booking=expired,
                now=now,
            )
        return BookingView.from_booking(booking, now=now)

    async def _load_requested_seats(
        self, *, uow: AbstractUnitOfWork, showtime: Showtime, seat_ids: List[int]
    ) -> List[Seat]:
        seats_by_id = {
            seat.id: seat
            for seat in await uow.showtime_query_repo.get_seats_by_ids(seat_ids=seat_ids)
        }

        unknown = [
            seat_id
            for seat_id in seat_ids
            if seat_id not in seats_by_id or seats_by_id[seat_id].room_id != showtime.room_id
        ]
        if unknown:
            raise ValidationError(f'Seats {unknown} do not belong to showtime {showtime.id}')

        out_of_service = [seat_id for seat_id in seat_ids if not seats_by_id[seat_id].is_available]
        if out_of_service:
            raise SeatUnavailableError(
                out_of_service, f'Seats {out_of_service} are out of service'
            )

        return [seats_by_id[seat_id] for seat_id in seat_ids]

    async def _generate_unique_code(self, *, uow: AbstractUnitOfWork) -> str:
        for _ in range(MAX_CODE_GENERATION_ATTEMPTS):
            code = generate_booking_code(self.booking_code_length)
            if not await uow.booking_query_repo.exists_by_code(booking_code=code):
                return code
        raise RuntimeError('Could not generate a unique booking code')

    async def _find_conflicts(self, *, showtime_id: int, seat_ids: List[int]) -> Set[int]:
        async with self.uow_factory() as uow:
            return await uow.booking_query_repo.get_occupied_seat_ids(
                showtime_id=showtime_id, now=self.clock(), seat_ids=seat_ids
            )
