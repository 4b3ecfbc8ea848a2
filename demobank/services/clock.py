"""
Clock Service

Deterministic time for demo data. "Now" is a fixed anchor and every date
in the store is an integer day offset from it, so fixtures read the same
whatever day the app is run.

Patterns use date-format tokens ("MMM d, yyyy", "h:mm a") because that is
how the screens specify them. Supported tokens:

    yyyy / y   four-digit year        yy        two-digit year
    MMMM       month name             MMM       short month name
    MM / M     month number           dd / d    day of month
    EEEE       weekday name           EEE       short weekday name
    HH / H     hour (0-23)            hh / h    hour (1-12)
    mm / m     minute                 ss / s    second
    a          AM / PM                'text'    literal text ('' is a quote)
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

DEFAULT_ANCHOR = datetime(2025, 11, 20, 12, 0, 0)
DEFAULT_DATE_FORMAT = "MMM d, yyyy"
TIME_FORMAT = "h:mm a"

# Offsets at or beyond this many days render as absolute dates
RELATIVE_WINDOW_DAYS = 7

_NAMES = {
    "en": {
        "months": (
            "January", "February", "March", "April", "May", "June", "July",
            "August", "September", "October", "November", "December",
        ),
        "short_months": (
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ),
        "weekdays": (
            "Monday", "Tuesday", "Wednesday", "Thursday", "Friday",
            "Saturday", "Sunday",
        ),
        "short_weekdays": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        "am_pm": ("AM", "PM"),
    },
    "sv": {
        "months": (
            "januari", "februari", "mars", "april", "maj", "juni", "juli",
            "augusti", "september", "oktober", "november", "december",
        ),
        "short_months": (
            "jan", "feb", "mar", "apr", "maj", "jun",
            "jul", "aug", "sep", "okt", "nov", "dec",
        ),
        "weekdays": (
            "måndag", "tisdag", "onsdag", "torsdag", "fredag", "lördag",
            "söndag",
        ),
        "short_weekdays": ("mån", "tis", "ons", "tors", "fre", "lör", "sön"),
        "am_pm": ("fm", "em"),
    },
}

_TOKEN_PATTERN = re.compile(r"'(?:[^']|'')*'|y+|M+|d+|E+|H+|h+|m+|s+|a")

DateLike = Union[date, datetime]


class Clock:
    """
    Resolves day offsets against a fixed anchor and formats the results.

    One instance per store; ``now()`` never changes for its lifetime.
    """

    def __init__(
        self,
        anchor: datetime = DEFAULT_ANCHOR,
        date_format: str = DEFAULT_DATE_FORMAT,
        locale: str = "en",
    ):
        if locale not in _NAMES:
            raise ValueError(f"Unsupported locale: {locale}")
        self._anchor = anchor
        self._date_format = date_format
        self._names = _NAMES[locale]

    def now(self) -> datetime:
        """The fixed anchor instant."""
        return self._anchor

    def today(self) -> date:
        return self._anchor.date()

    def resolve(self, offset_days: int) -> datetime:
        """Anchor plus N calendar days. Negative offsets are past dates."""
        return self._anchor + timedelta(days=offset_days)

    def days_from_anchor(self, value: DateLike) -> int:
        """Calendar-day difference from the anchor (positive = future)."""
        if isinstance(value, datetime):
            value = value.date()
        return (value - self.today()).days

    # -------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------

    def format_absolute(self, value: DateLike, pattern: Optional[str] = None) -> str:
        """Format a date with a pattern, e.g. "Nov 20, 2025"."""
        pattern = pattern or self._date_format
        return _TOKEN_PATTERN.sub(lambda m: self._render_token(m.group(0), value), pattern)

    def format_offset(self, offset_days: int, pattern: Optional[str] = None) -> str:
        """Absolute date for an offset, e.g. "Nov 7, 2025"."""
        return self.format_absolute(self.resolve(offset_days), pattern)

    def format_time(self, offset_days: int) -> str:
        """Time of day for an offset, e.g. "12:00 PM"."""
        return self.format_absolute(self.resolve(offset_days), TIME_FORMAT)

    def format_offset_with_time(self, offset_days: int, time: str) -> str:
        """Absolute date plus a caller-supplied time, e.g. "Nov 7, 2025, 9:05 AM"."""
        return f"{self.format_offset(offset_days)}, {time}"

    def format_relative(self, offset_days: int) -> str:
        """
        Human-readable relative date.

        Today / Yesterday / Tomorrow, "N days ago" and "In N days" inside a
        six-day window, the absolute date from seven days out.
        """
        days = self.days_from_anchor(self.resolve(offset_days))

        if days == 0:
            return "Today"
        if days == -1:
            return "Yesterday"
        if days == 1:
            return "Tomorrow"
        if abs(days) >= RELATIVE_WINDOW_DAYS:
            return self.format_offset(offset_days, DEFAULT_DATE_FORMAT)
        if days < 0:
            return f"{-days} days ago"
        return f"In {days} days"

    def _render_token(self, token: str, value: DateLike) -> str:
        if token.startswith("'"):
            return token[1:-1].replace("''", "'") if len(token) > 2 else "'"

        letter, width = token[0], len(token)
        names = self._names

        if letter == "y":
            return f"{value.year % 100:02d}" if width == 2 else f"{value.year:04d}"
        if letter == "M":
            if width >= 4:
                return names["months"][value.month - 1]
            if width == 3:
                return names["short_months"][value.month - 1]
            return f"{value.month:0{width}d}"
        if letter == "d":
            return f"{value.day:0{min(width, 2)}d}"
        if letter == "E":
            weekday = value.weekday()
            if width >= 4:
                return names["weekdays"][weekday]
            return names["short_weekdays"][weekday]

        # Time tokens; plain dates count as midnight
        hour = getattr(value, "hour", 0)
        if letter == "H":
            return f"{hour:0{min(width, 2)}d}"
        if letter == "h":
            return f"{(hour % 12) or 12:0{min(width, 2)}d}"
        if letter == "m":
            return f"{getattr(value, 'minute', 0):0{min(width, 2)}d}"
        if letter == "s":
            return f"{getattr(value, 'second', 0):0{min(width, 2)}d}"
        return names["am_pm"][0 if hour < 12 else 1]
