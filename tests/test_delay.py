"""Tests for delay normalization."""

from datetime import datetime, timedelta, timezone

import pytest

from onesignal_gateway.core.delay import (
    LocalTimeDelivery,
    SendAfter,
    describe_delay,
    format_instant,
    is_valid_delay_unit,
    normalize,
    to_seconds,
)
from onesignal_gateway.utils.errors import InvalidDelayAmountError, InvalidDelayUnitError

T0 = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def clock():
    return T0


def exploding_clock():
    raise AssertionError("clock must not be consulted")


@pytest.mark.parametrize(
    "unit,factor",
    [("seconds", 1), ("minutes", 60), ("hours", 3600), ("days", 86400)],
)
@pytest.mark.parametrize("amount", [0, 1, 5, 42])
def test_duration_units_offset_the_clock(unit, factor, amount):
    directive = normalize(amount, unit, clock)

    assert directive == SendAfter(at=T0 + timedelta(seconds=amount * factor))


def test_five_minutes_is_three_hundred_seconds():
    directive = normalize(5, "minutes", clock)

    assert directive.at - T0 == timedelta(seconds=300)
    assert directive.to_payload() == {"send_after": "2024-01-01T00:05:00.000Z"}


def test_fractional_amount():
    directive = normalize(1.5, "hours", clock)

    assert directive.at == T0 + timedelta(minutes=90)


def test_numeric_string_amount():
    directive = normalize("10", "seconds", clock)

    assert directive.at == T0 + timedelta(seconds=10)


def test_timezone_returns_literal_time_of_day():
    directive = normalize("9:00AM", "timezone", exploding_clock)

    assert directive == LocalTimeDelivery(time_of_day="9:00AM")
    assert directive.to_payload() == {
        "delayed_option": "timezone",
        "delivery_time_of_day": "9:00AM",
    }


@pytest.mark.parametrize("unit", ["bogus", "weeks", "Seconds", "", None, 5])
def test_unknown_unit_raises(unit):
    with pytest.raises(InvalidDelayUnitError) as exc_info:
        normalize(5, unit, exploding_clock)

    assert exc_info.value.status_code == 400
    assert "seconds, minutes, hours, days, timezone" in exc_info.value.message


@pytest.mark.parametrize("amount", ["abc", True, None, -1, [5], float("inf")])
def test_unusable_duration_amount_raises(amount):
    with pytest.raises(InvalidDelayAmountError):
        normalize(amount, "seconds", clock)


@pytest.mark.parametrize("amount,unit", [("1e12", "days"), (10**20, "seconds"), (1e300, "hours")])
def test_oversized_amount_raises(amount, unit):
    with pytest.raises(InvalidDelayAmountError) as exc_info:
        normalize(amount, unit, clock)

    assert exc_info.value.message == "Invalid delay amount: is too large"


@pytest.mark.parametrize("amount", ["", "   ", 9, None])
def test_timezone_needs_a_clock_time(amount):
    with pytest.raises(InvalidDelayAmountError):
        normalize(amount, "timezone", exploding_clock)


def test_is_valid_delay_unit():
    for unit in ("seconds", "minutes", "hours", "days", "timezone"):
        assert is_valid_delay_unit(unit) is True
    assert is_valid_delay_unit("bogus") is False
    assert is_valid_delay_unit(None) is False


def test_to_seconds():
    assert to_seconds(2, "days") == 172800
    with pytest.raises(InvalidDelayUnitError):
        to_seconds("9:00AM", "timezone")


def test_format_instant_uses_utc_and_milliseconds():
    offset = timezone(timedelta(hours=2))
    instant = datetime(2024, 1, 1, 14, 0, 0, 123456, tzinfo=offset)

    assert format_instant(instant) == "2024-01-01T12:00:00.123Z"


def test_format_instant_treats_naive_as_utc():
    assert format_instant(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"


def test_describe_delay():
    assert describe_delay(5, "minutes") == "in 5 minutes"
    assert describe_delay("9:00AM", "timezone") == "at 9:00AM"


def test_describe_schedule():
    assert normalize(30, "seconds", clock).describe_schedule() == "2024-01-01T00:00:30.000Z"
    assert normalize("9:00AM", "timezone", clock).describe_schedule() == "9:00AM in user's timezone"
