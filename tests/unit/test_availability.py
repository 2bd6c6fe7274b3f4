"""Unit tests for the store availability check."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError
from services.ordering_service.availability import (
    DEFAULT_WORKING_HOURS,
    DaySchedule,
    InvalidStoreData,
    StoreStatus,
    Weekday,
    WeeklySchedule,
    is_open_now,
    load_store_status,
)

# 2026-10-19 is a Monday
MONDAY = (2026, 10, 19)


def _week(**days) -> WeeklySchedule:
    closed = DaySchedule(enabled=False, open="00:00", close="00:00")
    data = {day.value: closed for day in Weekday}
    data.update(days)
    return WeeklySchedule(**data)


def _status(is_open=True, auto_close=True, hours=None) -> StoreStatus:
    return StoreStatus(
        is_open=is_open,
        auto_close_enabled=auto_close,
        working_hours=hours or DEFAULT_WORKING_HOURS,
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    "hour,minute,expected",
    [(8, 59, False), (9, 0, True), (22, 0, True), (22, 1, False)],
)
def test_schedule_bounds_are_inclusive(hour, minute, expected):
    status = _status(
        hours=_week(monday=DaySchedule(enabled=True, open="09:00", close="22:00"))
    )

    assert is_open_now(status, datetime(*MONDAY, hour, minute)) is expected


@pytest.mark.unit
@pytest.mark.parametrize("auto_close", [True, False])
@pytest.mark.parametrize("hour", [0, 12, 21])
def test_manual_closed_always_wins(auto_close, hour):
    status = _status(is_open=False, auto_close=auto_close)

    assert is_open_now(status, datetime(*MONDAY, hour, 0)) is False


@pytest.mark.unit
def test_without_auto_close_the_switch_decides():
    status = _status(auto_close=False, hours=_week())

    assert is_open_now(status, datetime(*MONDAY, 3, 0)) is True


@pytest.mark.unit
def test_disabled_day_is_closed():
    status = _status(
        hours=_week(tuesday=DaySchedule(enabled=True, open="00:00", close="23:59"))
    )

    assert is_open_now(status, datetime(*MONDAY, 12, 0)) is False
    assert is_open_now(status, datetime(2026, 10, 20, 12, 0)) is True


@pytest.mark.unit
def test_aware_time_is_read_in_store_time_zone():
    status = _status(
        hours=_week(monday=DaySchedule(enabled=True, open="09:00", close="22:00"))
    )
    istanbul = ZoneInfo("Europe/Istanbul")

    # 06:30 UTC is 09:30 in Istanbul
    assert is_open_now(status, datetime(*MONDAY, 6, 30, tzinfo=timezone.utc), istanbul)
    # 19:30 UTC is 22:30 in Istanbul
    assert not is_open_now(status, datetime(*MONDAY, 19, 30, tzinfo=timezone.utc), istanbul)


@pytest.mark.unit
def test_overnight_hours_never_match():
    """Close earlier than open (18:00-02:00) is not supported and reads as closed."""
    status = _status(
        hours=_week(monday=DaySchedule(enabled=True, open="18:00", close="02:00"))
    )

    assert is_open_now(status, datetime(*MONDAY, 20, 0)) is False
    assert is_open_now(status, datetime(*MONDAY, 1, 0)) is False


@pytest.mark.unit
def test_schedule_missing_a_day_fails_validation():
    data = DEFAULT_WORKING_HOURS.model_dump()
    del data["sunday"]

    with pytest.raises(ValidationError):
        StoreStatus.model_validate(
            {"is_open": True, "auto_close_enabled": True, "working_hours": data}
        )


@pytest.mark.unit
@pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon"])
def test_malformed_times_fail_validation(value):
    with pytest.raises(ValidationError):
        DaySchedule(enabled=True, open=value, close="22:00")


@pytest.mark.unit
def test_loading_malformed_stored_status_raises_invalid_store_data():
    data = {"is_open": True, "auto_close_enabled": True, "working_hours": {"monday": {}}}

    with pytest.raises(InvalidStoreData):
        load_store_status(data)


@pytest.mark.unit
def test_loading_stored_status():
    data = {
        "is_open": True,
        "auto_close_enabled": False,
        "working_hours": DEFAULT_WORKING_HOURS.model_dump(),
    }

    assert load_store_status(data).working_hours == DEFAULT_WORKING_HOURS


@pytest.mark.unit
def test_weekday_of_maps_monday_first():
    assert Weekday.of(datetime(*MONDAY)) is Weekday.MONDAY
    assert Weekday.of(datetime(2026, 10, 25)) is Weekday.SUNDAY
