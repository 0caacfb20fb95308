from datetime import date, datetime, time, timezone
from decimal import Decimal

import attrs

from src.service.cinema.domain.errors import ValidationError


@attrs.define(frozen=True)
class Showtime:
    id: int
    movie_id: int
    room_id: int
    show_date: date
    show_time: time
    base_price: Decimal
    is_active: bool = True

    @property
    def starts_at(self) -> datetime:
        # Schedules are stored in UTC
        return datetime.combine(self.show_date, self.show_time, tzinfo=timezone.utc)

    def has_started(self, *, now: datetime) -> bool:
        return self.starts_at <= now

    def ensure_bookable(self, *, now: datetime) -> None:
        if not self.is_active:
            raise ValidationError(f'Showtime {self.id} is not active')
        if self.has_started(now=now):
            raise ValidationError(f'Showtime {self.id} has already started')
