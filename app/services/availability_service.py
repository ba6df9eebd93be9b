"""Bookable dates and time-slot labels derived from a psychiatrist's availability.

All calendar math is done on UTC calendar days: "today", weekday lookups and
same-day comparisons never use the server's local timezone.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from app.core.config import settings

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
WEEKDAY_ABBREVIATIONS = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BookableDate:
    day: str  # weekday abbreviation, e.g. "MON"
    day_of_month: int
    month: str  # month abbreviation, e.g. "Jun"
    date: date

    @property
    def key(self) -> str:
        """ISO YYYY-MM-DD key used by the booked-slots and booking endpoints."""
        return self.date.isoformat()


def utc_today() -> date:
    return datetime.now(UTC).date()


def utc_now_naive() -> datetime:
    """Naive UTC for comparison with TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


def weekday_name(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()]


def normalize_weekday(name: str) -> str | None:
    """Map "monday", "Mon", "MONDAY" to "Monday"; None if not a weekday."""
    candidate = name.strip().lower()
    for full in WEEKDAY_NAMES:
        if candidate in (full.lower(), full[:3].lower()):
            return full
    return None


def parse_time_of_day(value: str) -> int:
    """Parse a 24-hour ``HH:MM`` string into minutes after midnight."""
    try:
        hour_str, minute_str = value.strip().split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time of day: {value!r}") from e
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour * 60 + minute


def format_12h(minutes: int) -> str:
    """Render minutes after midnight as e.g. "9:00 AM" or "12:30 PM"."""
    minutes %= _MINUTES_PER_DAY
    hour, minute = divmod(minutes, 60)
    period = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {period}"


def parse_12h(value: str) -> int:
    """Inverse of format_12h: "2:30 PM" -> 870."""
    try:
        clock, period = value.strip().split()
        hour_str, minute_str = clock.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except ValueError as e:
        raise ValueError(f"Invalid 12-hour time: {value!r}") from e
    period = period.upper()
    if period not in ("AM", "PM") or not (1 <= hour <= 12 and 0 <= minute < 60):
        raise ValueError(f"Invalid 12-hour time: {value!r}")
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute


def parse_slot_start(label: str) -> int:
    """Start of a slot label ("2:00 PM - 2:30 PM") in minutes after midnight."""
    start, sep, _ = label.partition(" - ")
    if not sep:
        raise ValueError(f"Invalid time slot: {label!r}")
    return parse_12h(start)


def compute_bookable_dates(
    working_days: Iterable[str],
    horizon_days: int | None = None,
    lookahead_window: int | None = None,
    today: date | None = None,
) -> list[BookableDate]:
    """Return up to ``horizon_days`` upcoming dates (UTC today inclusive) on which
    the psychiatrist works. An empty ``working_days`` treats every day as
    eligible; that is only meant for previews, booking still rejects it."""
    horizon = settings.bookable_days_horizon if horizon_days is None else horizon_days
    window = settings.bookable_days_lookahead if lookahead_window is None else lookahead_window
    window = max(window, horizon)
    start = today or utc_today()

    wanted = {n for n in (normalize_weekday(d) for d in working_days) if n}
    show_all = not wanted

    result: list[BookableDate] = []
    for offset in range(window):
        if len(result) >= horizon:
            break
        d = start + timedelta(days=offset)
        if show_all or weekday_name(d) in wanted:
            result.append(
                BookableDate(
                    day=WEEKDAY_ABBREVIATIONS[d.weekday()],
                    day_of_month=d.day,
                    month=MONTH_ABBREVIATIONS[d.month - 1],
                    date=d,
                )
            )
    return result


def compute_slots(start_time: str, end_time: str, duration_minutes: int | None = None) -> list[str]:
    """Split [start_time, end_time) into consecutive slot labels.

    Returns [] when start_time >= end_time. A trailing partial interval still
    yields a full-length slot, so the count is ceil(span / duration).
    """
    step = duration_minutes or settings.slot_duration_minutes
    start = parse_time_of_day(start_time)
    end = parse_time_of_day(end_time)
    if start >= end:
        return []
    return [f"{format_12h(t)} - {format_12h(t + step)}" for t in range(start, end, step)]
