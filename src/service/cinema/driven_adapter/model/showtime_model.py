from datetime import date, time
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, Time
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.db_setting import Base


class ShowtimeModel(Base):
    __tablename__ = 'showtime'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Movies live in the catalog service; only the reference is kept here
    movie_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey('room.id'), nullable=False, index=True)
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    show_time: Mapped[time] = mapped_column(Time, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
