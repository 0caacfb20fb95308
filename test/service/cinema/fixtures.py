"""
Shared fixtures and seed data for the cinema booking tests

- `clock`: controllable UTC clock injected into use cases
- `notification_dispatcher`: records dispatched lifecycle events
- `database` / `uow_factory`: a fresh SQLite file database per test
- `cinema`: one room, ten seats and a showtime the next day, plus promotions
- `services`: every use case wired to the test database and clock
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.database.db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory
from src.service.cinema.app.command.apply_coupon_use_case import ApplyCouponUseCase
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.confirm_booking_use_case import ConfirmBookingUseCase
from src.service.cinema.app.command.expire_booking_use_case import ExpireBookingUseCase
from src.service.cinema.app.command.expire_overdue_bookings_use_case import (
    ExpireOverdueBookingsUseCase,
)
from src.service.cinema.app.command.pay_booking_use_case import PayBookingUseCase
from src.service.cinema.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.cinema.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.cinema.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema.app.query.get_seat_map_use_case import GetSeatMapUseCase
from src.service.cinema.app.query.list_active_promotions_use_case import (
    ListActivePromotionsUseCase,
)
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.app.query.validate_coupon_use_case import ValidateCouponUseCase
from src.service.cinema.domain.domain_event.booking_lifecycle_event import (
    BookingLifecycleEvent,
    BookingLifecycleEventType,
)
from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.seat_entity import Seat
from src.service.cinema.domain.entity.showtime_entity import Showtime
from src.service.cinema.driven_adapter.model.promotion_model import PromotionModel
from src.service.cinema.driven_adapter.model.room_model import RoomModel
from src.service.cinema.driven_adapter.model.seat_model import SeatModel
from src.service.cinema.driven_adapter.model.showtime_model import ShowtimeModel
from src.service.cinema.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)


# Tuesday, so Tuesday-only promotions apply on the default clock
TEST_NOW = datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)
TEST_MOVIE_ID = 501
OTHER_MOVIE_ID = 502
BASE_PRICE = Decimal('10.00')

CUSTOMER_ID = 7
OTHER_CUSTOMER_ID = 8
STAFF_ID = 99


class FakeClock:
    def __init__(self, now: datetime = TEST_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingNotificationDispatcher(INotificationDispatcher):
    def __init__(self, *, fail: bool = False) -> None:
        self.events: List[BookingLifecycleEvent] = []
        self.fail = fail

    async def dispatch(self, *, event: BookingLifecycleEvent) -> None:
        if self.fail:
            raise ConnectionError('mail relay unreachable')
        self.events.append(event)

    def of_type(self, event_type: BookingLifecycleEventType) -> List[BookingLifecycleEvent]:
        return [event for event in self.events if event.event_type == event_type]


@attrs.define
class SeededCinema:
    room_id: int
    showtime_id: int
    seat_ids: Dict[str, int]
    promotion_ids: Dict[str, int]

    def seats(self, *labels: str) -> List[int]:
        return [self.seat_ids[label] for label in labels]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notification_dispatcher() -> RecordingNotificationDispatcher:
    return RecordingNotificationDispatcher()


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "cinema_test.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    # session_maker is resolved per call so it is bound to the running loop
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session_maker)


async def seed_cinema(
    database: Database, *, show_date: date, show_time: time = time(20, 0)
) -> SeededCinema:
    """
    Room 1 layout:
        A1-A6  standard, x1.00
        B1-B3  vip,      x1.50
        B4     standard, out of service
    """
    async with database.session() as session:
        room = RoomModel(name='Room 1', capacity=10)
        session.add(room)
        await session.flush()

        seat_models: Dict[str, SeatModel] = {}
        for number in range(1, 7):
            seat_models[f'A{number}'] = SeatModel(
                room_id=room.id, row_label='A', seat_number=number, seat_type='standard'
            )
        for number in range(1, 4):
            seat_models[f'B{number}'] = SeatModel(
                room_id=room.id,
                row_label='B',
                seat_number=number,
                seat_type='vip',
                price_multiplier=Decimal('1.50'),
            )
        seat_models['B4'] = SeatModel(
            room_id=room.id, row_label='B', seat_number=4, is_available=False
        )
        session.add_all(seat_models.values())

        showtime = ShowtimeModel(
            movie_id=TEST_MOVIE_ID,
            room_id=room.id,
            show_date=show_date,
            show_time=show_time,
            base_price=BASE_PRICE,
            is_active=True,
        )
        session.add(showtime)

        promotions = {
            'TUESDAY2X1': PromotionModel(
                code='TUESDAY2X1',
                name='Two for one Tuesday',
                discount_type='2x1',
                discount_value=Decimal('0'),
                min_tickets=2,
                valid_from=date(2000, 1, 1),
                valid_until=date(2999, 12, 31),
                applicable_days=[2],
            ),
            'PCT20': PromotionModel(
                code='PCT20',
                name='20 percent off',
                discount_type='percentage',
                discount_value=Decimal('20'),
                max_discount=Decimal('15.00'),
                valid_from=date(2000, 1, 1),
                valid_until=date(2999, 12, 31),
            ),
            'FIVEOFF': PromotionModel(
                code='FIVEOFF',
                name='Five off, single use',
                discount_type='fixed',
                discount_value=Decimal('5.00'),
                valid_from=date(2000, 1, 1),
                valid_until=date(2999, 12, 31),
                max_uses=1,
            ),
            'OTHERMOVIE': PromotionModel(
                code='OTHERMOVIE',
                name='Premiere only',
                discount_type='fixed',
                discount_value=Decimal('3.00'),
                valid_from=date(2000, 1, 1),
                valid_until=date(2999, 12, 31),
                applicable_movies=[OTHER_MOVIE_ID],
            ),
        }
        session.add_all(promotions.values())

        await session.commit()

        return SeededCinema(
            room_id=room.id,
            showtime_id=showtime.id,
            seat_ids={label: seat.id for label, seat in seat_models.items()},
            promotion_ids={code: promotion.id for code, promotion in promotions.items()},
        )


@pytest.fixture
async def cinema(database: Database) -> SeededCinema:
    return await seed_cinema(database, show_date=(TEST_NOW + timedelta(days=1)).date())


# =============================================================================
# Unit test doubles
# =============================================================================


class MockUnitOfWork:
    """Stands in for SqlAlchemyUnitOfWork; every repository is an AsyncMock"""

    def __init__(self) -> None:
        self.showtime_query_repo = AsyncMock()
        self.booking_command_repo = AsyncMock()
        self.booking_query_repo = AsyncMock()
        self.promotion_command_repo = AsyncMock()
        self.promotion_query_repo = AsyncMock()
        self.commit = AsyncMock()
        self.rollback = AsyncMock()
        self.entered = 0

    async def __aenter__(self) -> 'MockUnitOfWork':
        self.entered += 1
        return self

    async def __aexit__(self, *args) -> None:
        return None


def make_showtime(*, starts_in: timedelta = timedelta(days=1), **overrides) -> Showtime:
    starts_at = TEST_NOW + starts_in
    fields = {
        'id': 1,
        'movie_id': TEST_MOVIE_ID,
        'room_id': 1,
        'show_date': starts_at.date(),
        'show_time': starts_at.time(),
        'base_price': BASE_PRICE,
    }
    fields.update(overrides)
    return Showtime(**fields)


def make_seat(seat_id: int, *, room_id: int = 1, **overrides) -> Seat:
    fields = {
        'id': seat_id,
        'room_id': room_id,
        'row_label': 'A',
        'seat_number': seat_id,
    }
    fields.update(overrides)
    return Seat(**fields)


def make_booking(
    *,
    booking_id: int = 42,
    user_id: int = CUSTOMER_ID,
    seat_ids: Iterable[int] = (1, 2),
    created_at: datetime = TEST_NOW,
    hold: timedelta = timedelta(minutes=10),
) -> Booking:
    booking = Booking.create_hold(
        user_id=user_id,
        showtime=make_showtime(),
        seats=[make_seat(seat_id) for seat_id in seat_ids],
        booking_code='K7Q2M9XA',
        now=created_at,
        hold_duration=hold,
    )
    return attrs.evolve(
        booking,
        id=booking_id,
        seats=[attrs.evolve(seat, booking_id=booking_id) for seat in booking.seats],
    )


# =============================================================================
# Use cases wired to the test database
# =============================================================================


@attrs.define
class CinemaServices:
    reserve: ReserveSeatsUseCase
    confirm: ConfirmBookingUseCase
    cancel: CancelBookingUseCase
    pay: PayBookingUseCase
    expire: ExpireBookingUseCase
    expire_overdue: ExpireOverdueBookingsUseCase
    apply_coupon: ApplyCouponUseCase
    validate_coupon: ValidateCouponUseCase
    seat_map: GetSeatMapUseCase
    get_booking: GetBookingUseCase
    list_bookings: ListUserBookingsUseCase
    list_promotions: ListActivePromotionsUseCase


def build_services(
    *,
    uow_factory: UnitOfWorkFactory,
    notification_dispatcher: INotificationDispatcher,
    clock: FakeClock,
    cancellation_cutoff_hours: Optional[int] = 2,
) -> CinemaServices:
    expire = ExpireBookingUseCase(
        uow_factory=uow_factory, notification_dispatcher=notification_dispatcher, clock=clock
    )
    confirm = ConfirmBookingUseCase(
        uow_factory=uow_factory,
        notification_dispatcher=notification_dispatcher,
        expire_booking_use_case=expire,
        clock=clock,
    )
    return CinemaServices(
        reserve=ReserveSeatsUseCase(
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            hold_duration=timedelta(minutes=10),
            clock=clock,
        ),
        confirm=confirm,
        cancel=CancelBookingUseCase(
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            expire_booking_use_case=expire,
            cancellation_cutoff_hours=cancellation_cutoff_hours,
            clock=clock,
        ),
        pay=PayBookingUseCase(
            payment_gateway=MockPaymentGatewayImpl(), confirm_booking_use_case=confirm
        ),
        expire=expire,
        expire_overdue=ExpireOverdueBookingsUseCase(
            uow_factory=uow_factory, expire_booking_use_case=expire, clock=clock
        ),
        apply_coupon=ApplyCouponUseCase(
            uow_factory=uow_factory, expire_booking_use_case=expire, clock=clock
        ),
        validate_coupon=ValidateCouponUseCase(uow_factory=uow_factory, clock=clock),
        seat_map=GetSeatMapUseCase(uow_factory=uow_factory, clock=clock),
        get_booking=GetBookingUseCase(uow_factory=uow_factory, clock=clock),
        list_bookings=ListUserBookingsUseCase(uow_factory=uow_factory, clock=clock),
        list_promotions=ListActivePromotionsUseCase(uow_factory=uow_factory, clock=clock),
    )


@pytest.fixture
def services(
    uow_factory: UnitOfWorkFactory,
    notification_dispatcher: RecordingNotificationDispatcher,
    clock: FakeClock,
) -> CinemaServices:
    return build_services(
        uow_factory=uow_factory, notification_dispatcher=notification_dispatcher, clock=clock
    )
