"""Delay normalization for scheduled deliveries.

Converts a caller's ``(amount, unit)`` pair into a ``SendDirective``: either an
absolute send-after instant or a "deliver at this local time" directive that
the provider resolves per recipient. The clock is always injected so results
are deterministic under test.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Union

from onesignal_gateway.utils.errors import InvalidDelayAmountError, InvalidDelayUnitError

Clock = Callable[[], datetime]

DEFAULT_DELAY_AMOUNT = 30
DEFAULT_DELAY_UNIT = "seconds"


class DelayUnit(str, Enum):
    """Recognized delay units."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    TIMEZONE = "timezone"


UNIT_FACTORS: Dict[DelayUnit, int] = {
    DelayUnit.SECONDS: 1,
    DelayUnit.MINUTES: 60,
    DelayUnit.HOURS: 3600,
    DelayUnit.DAYS: 86400,
}

VALID_DELAY_UNITS = tuple(unit.value for unit in DelayUnit)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def format_instant(instant: datetime) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision, e.g. ``2024-01-01T00:05:00.000Z``."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SendAfter:
    """Deliver no earlier than an absolute instant."""

    at: datetime

    def to_payload(self) -> Dict[str, Any]:
        return {"send_after": format_instant(self.at)}

    def describe_schedule(self) -> str:
        return format_instant(self.at)


@dataclass(frozen=True)
class LocalTimeDelivery:
    """Deliver at a clock time in each recipient's own timezone."""

    time_of_day: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "delayed_option": DelayUnit.TIMEZONE.value,
            "delivery_time_of_day": self.time_of_day,
        }

    def describe_schedule(self) -> str:
        return f"{self.time_of_day} in user's timezone"


SendDirective = Union[SendAfter, LocalTimeDelivery]


def is_valid_delay_unit(unit: Any) -> bool:
    """Membership check for the five recognized units."""
    return isinstance(unit, str) and unit in VALID_DELAY_UNITS


def _parse_unit(unit: Any) -> DelayUnit:
    if not is_valid_delay_unit(unit):
        raise InvalidDelayUnitError(unit, VALID_DELAY_UNITS)
    return DelayUnit(unit)


def _parse_duration(amount: Any) -> Union[int, float]:
    # bool is an int subclass
    if isinstance(amount, bool) or amount is None:
        raise InvalidDelayAmountError(amount, "must be a number")
    if isinstance(amount, (int, float)):
        value = amount
    elif isinstance(amount, str):
        try:
            value = float(amount.strip())
        except ValueError:
            raise InvalidDelayAmountError(amount, "must be a number") from None
        if value.is_integer():
            value = int(value)
    else:
        raise InvalidDelayAmountError(amount, "must be a number")

    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidDelayAmountError(amount, "must be finite")
    if value < 0:
        raise InvalidDelayAmountError(amount, "must not be negative")
    return value


def to_seconds(amount: Any, unit: Any) -> Union[int, float]:
    """Convert a duration to seconds. Not defined for the timezone unit."""
    delay_unit = _parse_unit(unit)
    if delay_unit is DelayUnit.TIMEZONE:
        raise InvalidDelayUnitError(unit, [u.value for u in UNIT_FACTORS])
    return _parse_duration(amount) * UNIT_FACTORS[delay_unit]


def normalize(amount: Any, unit: Any, now_fn: Clock = utc_now) -> SendDirective:
    """Turn ``(amount, unit)`` into a send directive.

    Duration units yield ``SendAfter(now_fn() + amount * factor)``. The
    ``timezone`` unit yields ``LocalTimeDelivery(amount)`` with the clock-time
    string passed through untouched and the clock never consulted.

    Raises:
        InvalidDelayUnitError: unit is not one of ``VALID_DELAY_UNITS``
        InvalidDelayAmountError: amount cannot be used with the unit
    """
    delay_unit = _parse_unit(unit)

    if delay_unit is DelayUnit.TIMEZONE:
        if not isinstance(amount, str) or not amount.strip():
            raise InvalidDelayAmountError(
                amount, "timezone delivery needs a clock time such as '9:00AM'"
            )
        return LocalTimeDelivery(time_of_day=amount)

    delay_seconds = to_seconds(amount, delay_unit.value)
    try:
        return SendAfter(at=now_fn() + timedelta(seconds=delay_seconds))
    except OverflowError:
        raise InvalidDelayAmountError(amount, "is too large") from None


def describe_delay(amount: Any, unit: Any) -> str:
    """Human-readable phrase: ``in 5 minutes`` or ``at 9:00AM``."""
    if unit == DelayUnit.TIMEZONE.value:
        return f"at {amount}"
    return f"in {amount} {unit}"
