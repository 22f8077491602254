"""Calendar-day helpers for the weekly board.

Every bucket on the board is identified by a day key (``YYYY-MM-DD``) in
local time. Local time is the process timezone unless HARVEST_BOARD_TIMEZONE
names an IANA zone.

Naive datetimes are treated as local wall-clock time. Aware datetimes are
converted to local time before they are truncated to a day.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from harvest_board.config.settings import settings
from harvest_board.errors import InvalidDayKeyError

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_WEEKDAY_SHORT = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def board_timezone() -> tzinfo | None:
    """Get the configured board timezone, or None for process local time."""
    if settings.timezone:
        return ZoneInfo(settings.timezone)
    return None


def coerce_datetime(value: datetime | date | str) -> datetime:
    """Parse a plan date into a datetime.

    Accepts datetimes (returned unchanged), dates (local midnight), and
    ISO-8601 strings with or without a time part. A trailing ``Z`` is read
    as UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date string is empty")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Unrecognized date string: {value!r}") from e
    raise ValueError(f"Unsupported date value: {value!r}")


def to_local(value: datetime) -> datetime:
    """Convert an aware datetime to board-local time. Naive values are already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone(board_timezone())


def to_local_date(value: datetime | date | str) -> date:
    """Truncate a date value to its local calendar day."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_local(coerce_datetime(value)).date()


def to_day_key(value: datetime | date | str) -> str:
    """Get the ``YYYY-MM-DD`` bucket key for a date value.

    Examples:
        >>> to_day_key(date(2024, 6, 10))
        '2024-06-10'
        >>> to_day_key("2024-06-10T15:30:00")
        '2024-06-10'
    """
    return to_local_date(value).isoformat()


def parse_day_key(key: str) -> date:
    """Parse a day key back into a date.

    Raises:
        InvalidDayKeyError: If the key is not a valid ``YYYY-MM-DD`` string
    """
    if not isinstance(key, str) or not DAY_KEY_PATTERN.match(key):
        raise InvalidDayKeyError(key)
    try:
        return date.fromisoformat(key)
    except ValueError as e:
        raise InvalidDayKeyError(key) from e


def is_day_key(key: object) -> bool:
    """Check whether a value is a valid day key."""
    try:
        parse_day_key(key)  # type: ignore[arg-type]
    except InvalidDayKeyError:
        return False
    return True


def day_boundary(key: str) -> datetime:
    """Get local midnight of a day key as an aware datetime."""
    midnight = datetime.combine(parse_day_key(key), time.min)
    tz = board_timezone()
    if tz is not None:
        return midnight.replace(tzinfo=tz)
    return midnight.astimezone()


def day_boundary_iso(key: str) -> str:
    """Serialize local midnight of a day key as a UTC ISO-8601 instant.

    The format matches what the plan service stores, e.g.
    ``2024-06-11T07:00:00.000Z`` for a board running in US Pacific time.
    """
    instant = day_boundary(key).astimezone(timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def start_of_week(day: datetime | date | str, week_starts_on: int | None = None) -> date:
    """Get the first day of the week containing ``day``.

    Args:
        day: Any date value inside the week
        week_starts_on: First weekday, ``date.weekday()`` numbering. Defaults to settings.

    Returns:
        Local date of the week's first day
    """
    first_weekday = settings.week_starts_on if week_starts_on is None else week_starts_on
    local_day = to_local_date(day)
    offset = (local_day.weekday() - first_weekday) % 7
    return local_day - timedelta(days=offset)


def week_days(start: date) -> list[date]:
    """Get the seven consecutive days starting at ``start``."""
    return [start + timedelta(days=i) for i in range(7)]


def week_day_keys(start: date) -> list[str]:
    """Get the seven consecutive day keys starting at ``start``."""
    return [d.isoformat() for d in week_days(start)]


def day_keys_for_week(anchor: datetime | date | str, week_starts_on: int | None = None) -> list[str]:
    """Get the day keys of the board week containing ``anchor``."""
    return week_day_keys(start_of_week(anchor, week_starts_on))


def weekday_short(day: date) -> str:
    """Short English weekday name (``Mon`` .. ``Sun``)."""
    return _WEEKDAY_SHORT[day.weekday()]


def format_range_label(start: date, end: date) -> str:
    """Format a week range header, e.g. ``6/9 – 6/15``."""
    return f"{start.month}/{start.day} – {end.month}/{end.day}"
