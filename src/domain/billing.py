"""Fee arithmetic for closing a parking session.

Duration is rounded up to whole minutes, then billed hours are rounded up
from the minutes. Amounts are rounded half-up to cents.
"""
import math
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")
MINUTES_PER_HOUR = 60


def round2(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_duration_minutes(entry_time: datetime, exit_time: datetime) -> int:
    """Whole minutes between entry and exit, partial minutes counted in full.

    A closed session is never shorter than one minute.
    """
    if exit_time < entry_time:
        raise ValueError("exit_time must not precede entry_time")
    minutes, remainder = divmod(exit_time - entry_time, timedelta(minutes=1))
    if remainder:
        minutes += 1
    return max(1, minutes)


def compute_billed_hours(duration_minutes: int) -> int:
    return math.ceil(duration_minutes / MINUTES_PER_HOUR)


def compute_amount(duration_minutes: int, hourly_rate: Optional[Decimal], default_rate: Decimal) -> Decimal:
    rate = default_rate if hourly_rate is None else Decimal(str(hourly_rate))
    return round2(compute_billed_hours(duration_minutes) * rate)
