#!/usr/bin/env python3
"""
Database Seed Script
Populate demo data into the database

Features:
1. Create Room - one room with standard, VIP, accessible and out-of-service seats
2. Create Showtimes - evening showtimes for the next 7 days
3. Create Promotions - one of each discount type

Notes:
- Movies live in the catalog service; showtimes only reference DEMO_MOVIE_ID
- Run against an empty database: `python -m script.seed_data`
"""

import asyncio
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal

from sqlalchemy import func, select, text

from src.platform.config.di import container
from src.platform.database.db_setting import Database
from src.platform.types.utc_datetime_types import utc_now
from src.service.cinema.domain.entity.seat_entity import SeatType
from src.service.cinema.driven_adapter.model.promotion_model import PromotionModel
from src.service.cinema.driven_adapter.model.room_model import RoomModel
from src.service.cinema.driven_adapter.model.seat_model import SeatModel
from src.service.cinema.driven_adapter.model.showtime_model import ShowtimeModel


DEMO_MOVIE_ID = 1
DEMO_DAYS = 7
SHOW_TIMES = [time(18, 0), time(21, 0)]
BASE_PRICE = Decimal('10.00')


@dataclass
class RowConfig:
    """Seat row seed configuration"""
    label: str
    seats: int
    seat_type: SeatType = SeatType.STANDARD


ROWS = [
    RowConfig(label='A', seats=10, seat_type=SeatType.DISABLED),
    RowConfig(label='B', seats=10),
    RowConfig(label='C', seats=10),
    RowConfig(label='D', seats=10),
    RowConfig(label='E', seats=8, seat_type=SeatType.VIP),
]
# Broken seats, shown as unavailable on every seat map
OUT_OF_SERVICE = {('C', 5), ('C', 6)}


def _promotions(today: date) -> list[PromotionModel]:
    valid_until = today + timedelta(days=90)
    return [
        PromotionModel(
            code='TUESDAY2X1',
            name='Two for one Tuesday',
            discount_type='2x1',
            discount_value=Decimal('0'),
            min_tickets=2,
            valid_from=today,
            valid_until=valid_until,
            applicable_days=[2],
        ),
        PromotionModel(
            code='WELCOME20',
            name='20% off your first booking',
            discount_type='percentage',
            discount_value=Decimal('20'),
            max_discount=Decimal('15.00'),
            max_uses_per_user=1,
            valid_from=today,
            valid_until=valid_until,
        ),
        PromotionModel(
            code='FIVEOFF',
            name='Five off, first 100 bookings',
            discount_type='fixed',
            discount_value=Decimal('5.00'),
            max_uses=100,
            valid_from=today,
            valid_until=valid_until,
        ),
    ]


async def create_room(session) -> int:
    """Create the demo room and its seats

    Returns:
        int: room_id
    """
    capacity = sum(row.seats for row in ROWS)
    print(f'🪑 Creating room with {capacity} seats...')

    room = RoomModel(name='Sala 1', capacity=capacity)
    session.add(room)
    await session.flush()

    for row in ROWS:
        session.add_all(
            SeatModel(
                room_id=room.id,
                row_label=row.label,
                seat_number=number,
                seat_type=row.seat_type.value,
                price_multiplier=row.seat_type.default_multiplier,
                is_available=(row.label, number) not in OUT_OF_SERVICE,
            )
            for number in range(1, row.seats + 1)
        )
        print(f'   ✅ Row {row.label}: {row.seats} {row.seat_type} seats')

    print(f'   🚧 Out of service: {sorted(f"{r}{n}" for r, n in OUT_OF_SERVICE)}')
    return room.id


async def create_showtimes(session, room_id: int) -> int:
    """Create showtimes starting tomorrow"""
    print(f'🎬 Creating showtimes for the next {DEMO_DAYS} days...')

    start = utc_now().date() + timedelta(days=1)
    showtimes = [
        ShowtimeModel(
            movie_id=DEMO_MOVIE_ID,
            room_id=room_id,
            show_date=start + timedelta(days=offset),
            show_time=show_time,
            base_price=BASE_PRICE,
            is_active=True,
        )
        for offset in range(DEMO_DAYS)
        for show_time in SHOW_TIMES
    ]
    session.add_all(showtimes)
    await session.flush()

    print(f'   ✅ Created showtimes: IDs {showtimes[0].id}..{showtimes[-1].id}')
    return len(showtimes)


async def create_promotions(session) -> None:
    print('🏷️  Creating promotions...')

    promotions = _promotions(utc_now().date())
    session.add_all(promotions)
    await session.flush()

    for promotion in promotions:
        print(f'   ✅ {promotion.code} ({promotion.discount_type}): {promotion.name}')


async def verify_data(database: Database) -> None:
    """Verify seeded data"""
    print('🔍 Verifying seeded data...')

    async with database.session() as session:
        for table in ['room', 'seat', 'showtime', 'promotion']:
            result = await session.execute(text(f'SELECT COUNT(*) FROM {table}'))
            print(f'   {table.capitalize()} count: {result.scalar()}')

    print('   ✅ Data verification completed!')


async def _seed_data(database: Database) -> None:
    """Seed room, showtimes and promotions in a single transaction"""
    async with database.session() as session:
        existing = await session.execute(select(func.count(RoomModel.id)))
        if existing.scalar():
            raise RuntimeError('Database already has rooms, reset it before seeding')

        try:
            room_id = await create_room(session)
            print()

            await create_showtimes(session, room_id)
            print()

            await create_promotions(session)
            print()

            await session.commit()
            print('✅ All data committed successfully!')

        except Exception as e:
            await session.rollback()
            print(f'❌ Rolling back: {e}')
            raise


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    database = container.database()
    try:
        await database.create_tables()
        await _seed_data(database)
        await verify_data(database)

        print()
        print('=' * 50)
        print('🌱 Data seeding completed!')
        print('📋 Try it:')
        print('   GET /api/showtime/1/seats')
        print('   POST /api/booking  (headers: X-User-Id: 1)')

    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        exit(1)

    finally:
        await database.dispose()


if __name__ == '__main__':
    asyncio.run(main())
