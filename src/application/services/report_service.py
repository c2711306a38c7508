from datetime import date, datetime, time, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from src.application.repositories import AbstractUnitOfWork
from src.config.settings_env import settings
from src.domain.entities import DailyReport
from src.shared.utils import utcnow


def day_window(day: date, tz: Optional[tzinfo] = None):
    """Inclusive [00:00:00.000, 23:59:59.999] bounds of ``day`` in ``tz``, as UTC instants."""
    tz = tz or ZoneInfo("UTC")
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=tz)
    return start.astimezone(ZoneInfo("UTC")), end.astimezone(ZoneInfo("UTC"))


class ReportService:
    def __init__(self, uow: AbstractUnitOfWork, timezone: Optional[str] = None):
        self.uow = uow
        self.timezone = ZoneInfo(timezone or settings.REPORT_TIMEZONE)

    async def get_daily_report(self, day: Optional[date] = None) -> DailyReport:
        day = day or utcnow().astimezone(self.timezone).date()
        start, end = day_window(day, self.timezone)
        payments = await self.uow.run_read(
            lambda: self.uow.payments.list(start=start, end=end, include_voided=False)
        )
        return DailyReport(date=day, payments=payments)
