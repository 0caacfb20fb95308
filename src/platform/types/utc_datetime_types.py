"""
Timezone-aware UTC datetime column type

PostgreSQL stores `timestamptz` natively, but SQLite has no timezone support and
hands back naive datetimes. Hold deadlines are compared against `now()` on both
backends, so every value is normalised to UTC on the way in and re-tagged as UTC
on the way out.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if not isinstance(value, datetime):
            raise TypeError(f'UTCDateTime expects datetime, got {type(value).__name__}')
        if value.tzinfo is None:
            raise ValueError('UTCDateTime refuses naive datetimes')
        value = value.astimezone(timezone.utc)
        if dialect.name == 'sqlite':
            # Stored naive so lexical comparison in SQL matches chronological order
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
