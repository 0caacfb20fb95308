from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.db_setting import Base
from src.platform.types.utc_datetime_types import UTCDateTime, utc_now


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (Index('ix_booking_status_reserved_until', 'status', 'reserved_until'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    showtime_id: Mapped[int] = mapped_column(ForeignKey('showtime.id'), nullable=False, index=True)
    booking_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    reserved_until: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal('0.00')
    )
    final_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    promotion_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('promotion.id'), nullable=True
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    seats: Mapped[List['BookingSeatModel']] = relationship(
        'BookingSeatModel',
        back_populates='booking',
        lazy='selectin',
        order_by='BookingSeatModel.seat_id',
    )


class BookingSeatModel(Base):
    """
    One seat claimed by one booking.

    Rows are kept after cancel/expire with is_active = false. The partial unique
    index allows a single active claim per (showtime, seat), so a second writer
    racing for the same seat fails at insert time.
    """

    __tablename__ = 'booking_seat'
    __table_args__ = (
        Index(
            'uq_booking_seat_active_claim',
            'showtime_id',
            'seat_id',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active = 1'),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey('booking.id'), nullable=False, index=True)
    showtime_id: Mapped[int] = mapped_column(ForeignKey('showtime.id'), nullable=False)
    seat_id: Mapped[int] = mapped_column(ForeignKey('seat.id'), nullable=False)
    # Captured at reservation time; later showtime price changes do not touch it
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    booking: Mapped['BookingModel'] = relationship('BookingModel', back_populates='seats')
