# icecast_soundexchange.output_items - session records and friends
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

from datetime import date, timedelta, timezone
from typing import NamedTuple

from .constants import ROTATION_SLACK
from .util import ONE_DAY, LogTime, date_to_epoch, format_timestamp

# ===========================================================================
# ====== Output items =======================================================
# ===========================================================================


class SessionRecord(NamedTuple):
    """
    One listener session, as logged by Icecast when the listener went away.
    """

    host: str
    disconnect_time: LogTime
    mountpoint: str
    status: int
    nbytes: int
    referrer: str
    user_agent: str
    duration: int
    trailing: str | None = None

    def connect_timestamp(self):
        """UTC epoch seconds at which the session started."""
        return self.disconnect_time.epoch() - self.duration

    def report_fields(self, utc=False):
        """
        The seven report columns for this session. Date and time are the
        connect time, in the logged UTC offset unless `utc` is set.
        """
        tz = timezone.utc if utc else self.disconnect_time.tzinfo()
        day, time = format_timestamp(self.connect_timestamp(), tz)
        return (
            self.host,
            day,
            time,
            self.mountpoint,
            f"{self.duration:03d}",
            f"{self.status:03d}",
            f"{self.referrer}/{self.user_agent}",
        )


class Parsed(NamedTuple):
    record: SessionRecord


class Malformed(NamedTuple):
    line: str
    reason: str


class DateWindow(NamedTuple):
    """
    The operator's [start, end] date range, both inclusive. The literal dates
    mean midnight UTC, so the end boundary is pushed back one whole day to
    include sessions on the end date itself.
    """

    start: date
    end: date

    @property
    def start_epoch(self):
        return date_to_epoch(self.start)

    @property
    def end_epoch(self):
        return date_to_epoch(self.end) + ONE_DAY

    def contains(self, epoch):
        return self.start_epoch <= epoch < self.end_epoch

    def contains_rotation_date(self, rotated):
        """Was a log rotated on `rotated` possibly holding in-window sessions?"""
        return self.start <= rotated <= self.end + timedelta(seconds=ROTATION_SLACK)

    def contains_log_date(self, logged):
        """Does a logged date fall in [start, end + 1 day]?"""
        return self.start <= logged <= self.end + timedelta(seconds=ONE_DAY)
