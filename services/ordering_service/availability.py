"""Store availability: weekly working hours plus the manual open/closed switch.

``is_open_now`` is a pure function of the store status and a point in time.
Times are compared as "HH:MM" strings, inclusive on both ends, so a day whose
close time is earlier than its open time (overnight hours such as
18:00-02:00) never matches. Overnight schedules are not supported.
"""

from __future__ import annotations

import enum
import re
from datetime import datetime, tzinfo
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Weekday(str, enum.Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        # datetime.weekday(): Monday == 0
        return list(cls)[moment.weekday()]


class DaySchedule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"expected 24-hour HH:MM, got {v!r}")
        return v

    def contains(self, hhmm: str) -> bool:
        if not self.enabled:
            return False
        return self.open <= hhmm <= self.close


class WeeklySchedule(BaseModel):
    """Exactly one DaySchedule per weekday; a missing day is a validation error."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    monday: DaySchedule
    tuesday: DaySchedule
    wednesday: DaySchedule
    thursday: DaySchedule
    friday: DaySchedule
    saturday: DaySchedule
    sunday: DaySchedule

    def for_day(self, day: Weekday) -> DaySchedule:
        return getattr(self, day.value)


class StoreStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_open: bool
    auto_close_enabled: bool
    working_hours: WeeklySchedule


class InvalidStoreData(Exception):
    """Persisted store settings do not validate (e.g. a weekday is missing)."""


def load_store_status(data: object) -> StoreStatus:
    """Validate stored settings into a StoreStatus or raise InvalidStoreData."""
    try:
        return StoreStatus.model_validate(data)
    except ValidationError as exc:
        raise InvalidStoreData(str(exc)) from exc


DEFAULT_WORKING_HOURS = WeeklySchedule(
    monday=DaySchedule(enabled=True, open="09:00", close="22:00"),
    tuesday=DaySchedule(enabled=True, open="09:00", close="22:00"),
    wednesday=DaySchedule(enabled=True, open="09:00", close="22:00"),
    thursday=DaySchedule(enabled=True, open="09:00", close="22:00"),
    friday=DaySchedule(enabled=True, open="09:00", close="23:00"),
    saturday=DaySchedule(enabled=True, open="10:00", close="23:00"),
    sunday=DaySchedule(enabled=True, open="10:00", close="22:00"),
)


def is_open_now(status: StoreStatus, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    """Whether the store accepts new orders at ``now``.

    The manual switch always wins when it says closed. With auto-close off
    the switch is the whole answer; with auto-close on the weekly schedule
    decides. An aware ``now`` is converted to ``tz`` (the store's local time)
    when given; a naive ``now`` is taken as local wall-clock time.
    """
    if not status.is_open:
        return False
    if not status.auto_close_enabled:
        return status.is_open

    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)

    day = status.working_hours.for_day(Weekday.of(now))
    return day.contains(now.strftime("%H:%M"))
