import datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import DateTime, Integer, TypeDecorator
from sqlalchemy.dialects.sqlite import DATETIME as SQLITE_DATETIME


CENT = Decimal("0.01")


class UTCDateTime(TypeDecorator):
    """Stores timezone-aware datetimes as UTC.

    SQLite has no timezone support, so values are written as naive UTC and
    re-tagged with ``timezone.utc`` on the way out. Naive values handed in
    by callers are taken to already be UTC.
    """
    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'sqlite':
            return dialect.type_descriptor(SQLITE_DATETIME())
        else:
            return dialect.type_descriptor(DateTime(timezone=True))

    def process_bind_param(self, value: datetime.datetime | None, dialect) -> datetime.datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        if dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value.replace(tzinfo=datetime.timezone.utc)

    def process_result_value(self, value: datetime.datetime | None, dialect) -> datetime.datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)


class Money(TypeDecorator):
    """Two-decimal amounts kept as integer cents in the database."""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect) -> int | None:
        if value is None:
            return None
        cents = (Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP) * 100)
        return int(cents)

    def process_result_value(self, value, dialect) -> Decimal | None:
        if value is None:
            return None
        return (Decimal(value) / 100).quantize(CENT)
