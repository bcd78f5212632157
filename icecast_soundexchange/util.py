# icecast_soundexchange.util - date and time helpers
#
# Copyright the icecast-soundexchange authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import NamedTuple

from .constants import DAY_LEN, MONTHIDX

__all__ = (
    "ONE_DAY",
    "ParseError",
    "UnknownMonthError",
    "LogTime",
    "month_ordinal",
    "parse_civil_date",
    "to_epoch_seconds",
    "date_to_epoch",
    "offset_to_timezone",
    "offset_hours",
    "split_logtime",
    "parse_logtime",
    "disconnect_sort_key",
    "format_timestamp",
)

ONE_DAY = DAY_LEN

CIVIL_DATE_RE = re.compile(r"^(?P<day>\d{1,2})/(?P<month>[A-Za-z]{3})/(?P<year>\d{4})$")

# ===========================================================================
# ====== Errors =============================================================
# ===========================================================================


class ParseError(ValueError):
    pass


class UnknownMonthError(ParseError):
    pass


# ===========================================================================
# ====== Civil dates ========================================================
# ===========================================================================


def month_ordinal(name):
    """Return the 0-based index of a 3-letter English month abbreviation."""
    try:
        return MONTHIDX[name.title()] - 1
    except (KeyError, AttributeError):
        raise UnknownMonthError(f"unknown month name {name!r}") from None


def parse_civil_date(text):
    """
    Parse a DD/Mon/YYYY literal, like the dates in the log itself, into a
    datetime.date. Raises ParseError if it doesn't look like one.
    """
    match = CIVIL_DATE_RE.match(text.strip())
    if not match:
        raise ParseError(f"invalid date {text!r}, expected DD/Mon/YYYY")
    month = month_ordinal(match["month"]) + 1
    try:
        return date(int(match["year"]), month, int(match["day"]))
    except ValueError as e:
        raise ParseError(f"invalid date {text!r}: {e}") from None


def to_epoch_seconds(year, month0, day, hour, minute, second, local_offset_hours=0):
    """
    Interpret the given fields as local time at `local_offset_hours` east of
    UTC and return the corresponding UTC epoch seconds. `month0` is 0-based.
    """
    utc_seconds = calendar.timegm((year, month0 + 1, day, hour, minute, second, 0, 0, 0))
    return utc_seconds - round(local_offset_hours * 3600)


def date_to_epoch(civil_date):
    """Midnight UTC at the start of `civil_date`, in epoch seconds."""
    return to_epoch_seconds(civil_date.year, civil_date.month - 1, civil_date.day, 0, 0, 0)


# ===========================================================================
# ====== Log timestamps =====================================================
# ===========================================================================


def offset_to_timezone(offset):
    """Convert a UTC offset like -0400 to a datetime.timezone instance"""
    offmin = 60 * int(offset[1:3]) + int(offset[3:5])
    if offset[0] == "-":
        offmin = -offmin
    return timezone(timedelta(minutes=offmin))


def offset_hours(offset):
    """Convert a UTC offset like +0530 to (fractional) hours, here 5.5"""
    hours = int(offset[1:3]) + int(offset[3:5]) / 60
    return -hours if offset[0] == "-" else hours


class LogTime(NamedTuple):
    """
    Broken-down log timestamp, e.g. [05/Mar/2013:22:09:36 -0600].
    Field order is the sort order of log lines.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    offset: str

    def epoch(self):
        return to_epoch_seconds(
            self.year,
            self.month - 1,
            self.day,
            self.hour,
            self.minute,
            self.second,
            offset_hours(self.offset),
        )

    def tzinfo(self):
        return offset_to_timezone(self.offset)


def parse_logtime(logtime):
    """
    Parse a log time field ("05/Mar/2013:22:09:36 -0600") into an aware
    datetime. Every field is range-checked, so "31/Feb/2013:25:61:61 +9999"
    raises ParseError instead of rolling over into some other time.
    """
    try:
        dt, off = logtime.split(" ", 1)
        datestr, hour, minute, second = dt.split(":", 3)
        day, month, year = datestr.split("/", 2)
        if not re.fullmatch(r"[+-]\d{4}", off) or int(off[3:5]) >= 60:
            raise ValueError(f"bad UTC offset {off!r}")
        tz = timezone.utc if off in {"+0000", "-0000"} else offset_to_timezone(off)
        return datetime(
            int(year),
            month_ordinal(month) + 1,
            int(day),
            int(hour),
            int(minute),
            int(second),
            0,
            tz,
        )
    except ParseError:
        raise
    except ValueError as e:
        raise ParseError(f"invalid log time {logtime!r}: {e}") from None


def split_logtime(logtime):
    """
    Split a log time field into a LogTime, keeping the offset as logged.
    Raises ParseError like parse_logtime.
    """
    when = parse_logtime(logtime)
    return LogTime(
        when.year, when.month, when.day, when.hour, when.minute, when.second, logtime[-5:]
    )


def disconnect_sort_key(logtime):
    """
    Sort key for log lines: (year, month, day, hour, minute, second) of the
    logged disconnect time. Comparing the raw strings would put
    "09/Jan/2014" before "10/Mar/2013".
    """
    return logtime[:6]


def format_timestamp(epoch, tz=timezone.utc):
    """Return ("YYYY-MM-DD", "HH:MM:SS") for `epoch` as seen in `tz`."""
    dt = datetime.fromtimestamp(epoch, tz)
    return dt.strftime("%Y-%m-%d"), dt.strftime("%H:%M:%S")
