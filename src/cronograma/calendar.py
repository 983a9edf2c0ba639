"""Working calendar configuration and date arithmetic.

A working calendar describes which days are worked (weekdays, holidays and
one-off exceptions) and which hours of a working day count toward elapsed
duration. ``WorkingCalendar`` walks forward or backward over that time,
skipping everything that is not working time.
"""

import unicodedata
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .exceptions import InvalidCalendarError
from .logger import get_logger

logger = get_logger()

MINUTES_PER_DAY = 24 * 60

# Accepts English and Spanish names; keys are lowercase without accents
WEEKDAY_NAMES: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
    "lunes": 0,
    "martes": 1,
    "miercoles": 2,
    "jueves": 3,
    "viernes": 4,
    "sabado": 5,
    "domingo": 6,
}

DEFAULT_WORKING_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def normalize_weekday_name(name: str) -> str:
    """Lowercase a weekday name and strip accents ("Miércoles" -> "miercoles")."""
    decomposed = unicodedata.normalize("NFKD", name.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class ExceptionType(str, Enum):
    """Kinds of one-off calendar exceptions."""

    HOLIDAY = "holiday"
    NON_WORKING_DAY = "non_working_day"
    EXTRA_WORKING_DAY = "extra_working_day"


_EXCEPTION_ALIASES = {
    "feriado": ExceptionType.HOLIDAY,
    "dia_no_laboral": ExceptionType.NON_WORKING_DAY,
    "dia_laboral_extra": ExceptionType.EXTRA_WORKING_DAY,
}


class CalendarException(BaseModel):
    """A single date that overrides the weekly pattern."""

    date: date
    type: ExceptionType = ExceptionType.HOLIDAY
    name: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def accept_spanish_aliases(cls, v: Any) -> Any:
        """Map the Spanish exception names to their canonical values."""
        if isinstance(v, str):
            return _EXCEPTION_ALIASES.get(v.strip().lower(), v)
        return v


def _default_working_days() -> list[str]:
    return list(DEFAULT_WORKING_DAYS)


class WorkingCalendarConfig(BaseModel):
    """Configuration of a working calendar.

    Semantic validity (positive hours, at least one working day, known weekday
    names) is checked by ``WorkingCalendar`` so that resolution can report an
    ``InvalidCalendarError`` instead of failing while loading input.
    """

    hours_per_day: float = 8.0
    working_days: list[str] = Field(default_factory=_default_working_days)
    day_start: time = time(8, 0)
    break_start: time | None = time(12, 0)  # Lunch break, skipped if outside working span
    break_minutes: int = Field(default=60, ge=0)
    holidays: list[date] = Field(default_factory=list[date])
    exceptions: list[CalendarException] = Field(default_factory=list[CalendarException])

    @field_validator("working_days", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a list, a set or a comma-separated string of weekday names."""
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        if isinstance(v, (list, set, tuple, frozenset)):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @field_validator("day_start", "break_start", mode="before")
    @classmethod
    def accept_minutes_since_midnight(cls, v: Any) -> Any:
        """Accept an int as minutes since midnight.

        PyYAML reads an unquoted ``13:00`` as the base-60 integer 780.
        """
        if isinstance(v, int) and not isinstance(v, bool):
            return time(v // 60, v % 60)
        return v


class WorkingCalendar:
    """Date arithmetic over working time.

    Each working day has one or more windows: starting at ``day_start`` the
    calendar accumulates ``hours_per_day`` of working time, jumping over the
    break if it falls inside. With the defaults that is 08:00-12:00 and
    13:00-17:00.
    """

    def __init__(self, config: WorkingCalendarConfig | None = None) -> None:
        """Build a calendar, failing fast if the configuration is unusable.

        Raises:
            InvalidCalendarError: If hours per day is not positive, no day is
                worked, a weekday name is unknown, or the working span of a
                day runs past midnight.
        """
        self.config = config or WorkingCalendarConfig()
        self._weekdays = self._parse_weekdays(self.config.working_days)
        self._window_offsets = self._build_window_offsets(self.config)

        closed = set(self.config.holidays)
        extra: set[date] = set()
        for exception in self.config.exceptions:
            if exception.type == ExceptionType.EXTRA_WORKING_DAY:
                extra.add(exception.date)
            else:
                closed.add(exception.date)
        self._closed_dates = closed - extra
        self._extra_dates = extra
        # No stretch of non-working days can be longer than this
        self._max_idle_days = len(self._closed_dates) + 7

    @staticmethod
    def _parse_weekdays(names: list[str]) -> frozenset[int]:
        weekdays: set[int] = set()
        for name in names:
            key = normalize_weekday_name(name)
            if key not in WEEKDAY_NAMES:
                raise InvalidCalendarError(f"Unknown weekday name: '{name}'")
            weekdays.add(WEEKDAY_NAMES[key])
        if not weekdays:
            raise InvalidCalendarError("Calendar has no working days")
        return frozenset(weekdays)

    @staticmethod
    def _build_window_offsets(config: WorkingCalendarConfig) -> list[tuple[float, float]]:
        """Compute working windows as minute offsets from midnight."""
        if config.hours_per_day <= 0:
            raise InvalidCalendarError(
                f"hours_per_day must be positive, got {config.hours_per_day}"
            )

        cursor = float(config.day_start.hour * 60 + config.day_start.minute)
        remaining = config.hours_per_day * 60
        windows: list[tuple[float, float]] = []

        if config.break_start is not None and config.break_minutes > 0:
            break_from = float(config.break_start.hour * 60 + config.break_start.minute)
            break_to = break_from + config.break_minutes
            if break_from <= cursor < break_to:
                cursor = break_to
            if cursor < break_from < cursor + remaining:
                windows.append((cursor, break_from))
                remaining -= break_from - cursor
                cursor = break_to

        windows.append((cursor, cursor + remaining))
        if windows[-1][1] > MINUTES_PER_DAY:
            raise InvalidCalendarError(
                f"{config.hours_per_day} working hours starting at "
                f"{config.day_start.isoformat('minutes')} do not fit in one day"
            )
        return windows

    def is_working_day(self, day: date) -> bool:
        """Check whether any time on ``day`` counts as working time."""
        if day in self._extra_dates:
            return True
        if day in self._closed_dates:
            return False
        return day.weekday() in self._weekdays

    def working_windows(
        self, day: date, tz: tzinfo | None = None
    ) -> list[tuple[datetime, datetime]]:
        """Get the working intervals of a day as (start, end) datetimes.

        Returns:
            Sorted, non-overlapping intervals; empty for non-working days
        """
        if not self.is_working_day(day):
            return []
        midnight = datetime.combine(day, time(0, 0), tzinfo=tz)
        return [
            (midnight + timedelta(minutes=start), midnight + timedelta(minutes=end))
            for start, end in self._window_offsets
        ]

    def is_working_time(self, moment: datetime) -> bool:
        """Check whether ``moment`` falls inside a working window."""
        return any(
            start <= moment < end
            for start, end in self.working_windows(moment.date(), moment.tzinfo)
        )

    def next_working_instant(self, moment: datetime) -> datetime:
        """Get the earliest working instant at or after ``moment``."""
        day = moment.date()
        idle_days = 0
        while True:
            windows = self.working_windows(day, moment.tzinfo)
            idle_days = self._check_idle(windows, idle_days)
            for start, end in windows:
                if moment < end:
                    return max(start, moment)
            day += timedelta(days=1)

    def add_duration(self, start: datetime, minutes: float) -> datetime:
        """Move ``minutes`` of working time away from ``start``.

        Positive values walk forward and negative values walk backward, both
        skipping non-working time. A zero offset returns ``start`` unchanged,
        even outside working hours.
        """
        if minutes == 0:
            return start
        if minutes > 0:
            result = self._walk_forward(start, float(minutes))
        else:
            result = self._walk_backward(start, float(-minutes))
        logger.debug(f"      calendar: {start.isoformat()} {minutes:+g}min -> {result.isoformat()}")
        return result

    def add_work_hours(self, start: datetime, hours: float) -> datetime:
        """Move ``hours`` of working time away from ``start``."""
        return self.add_duration(start, hours * 60)

    def working_minutes_between(self, start: datetime, end: datetime) -> float:
        """Count working minutes in [start, end); negative if end precedes start."""
        if end < start:
            return -self.working_minutes_between(end, start)

        total = 0.0
        day = start.date()
        while day <= end.date():
            for window_start, window_end in self.working_windows(day, start.tzinfo):
                overlap_start = max(window_start, start)
                overlap_end = min(window_end, end)
                if overlap_end > overlap_start:
                    total += (overlap_end - overlap_start).total_seconds() / 60
            day += timedelta(days=1)
        return total

    def _walk_forward(self, start: datetime, remaining: float) -> datetime:
        day = start.date()
        idle_days = 0
        while True:
            windows = self.working_windows(day, start.tzinfo)
            idle_days = self._check_idle(windows, idle_days)
            for window_start, window_end in windows:
                if window_end <= start:
                    continue
                segment_start = max(window_start, start)
                available = (window_end - segment_start).total_seconds() / 60
                if remaining <= available:
                    return segment_start + timedelta(minutes=remaining)
                remaining -= available
            day += timedelta(days=1)

    def _walk_backward(self, start: datetime, remaining: float) -> datetime:
        day = start.date()
        idle_days = 0
        while True:
            windows = self.working_windows(day, start.tzinfo)
            idle_days = self._check_idle(windows, idle_days)
            for window_start, window_end in reversed(windows):
                if window_start >= start:
                    continue
                segment_end = min(window_end, start)
                available = (segment_end - window_start).total_seconds() / 60
                if remaining <= available:
                    return segment_end - timedelta(minutes=remaining)
                remaining -= available
            day -= timedelta(days=1)

    def _check_idle(self, windows: list[tuple[datetime, datetime]], idle_days: int) -> int:
        if windows:
            return 0
        idle_days += 1
        if idle_days > self._max_idle_days:
            raise InvalidCalendarError("No working time found in calendar")
        return idle_days
