# icecast_soundexchange.matchers - turn log lines into session records
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

import logging

from .output_items import Malformed, Parsed, SessionRecord
from .regex import compile_log_regex, compile_prefilter_regex, normalize_mountpoint
from .util import ParseError, split_logtime

log = logging.getLogger(__name__)


class SessionMatcher:
    """
    Matches log lines for a set of mount points and builds SessionRecords.

    Lines for other mount points are rejected by a cheap substring search
    before the full regex ever sees them.
    """

    itemtuple = SessionRecord

    def __init__(self, mountpoints):
        self.mountpoints = tuple(mountpoints)
        self.prefilter = compile_prefilter_regex(self.mountpoints)
        self.regex = compile_log_regex(mountpoints=self.mountpoints)

    def is_candidate(self, line):
        return self.prefilter.search(line) is not None

    def match_line(self, line):
        """
        Return Parsed(record) or Malformed(line, reason) for a line addressed
        to one of our mount points, or None for any other line.
        """
        if not self.is_candidate(line):
            return None
        match = self.regex.match(line)
        if not match:
            return Malformed(line, "line does not match the log format")
        try:
            return Parsed(self.make_item(match))
        except ParseError as e:
            return Malformed(line, str(e))

    def iteritems(self, lines):
        for line in lines:
            result = self.match_line(line)
            if isinstance(result, Parsed):
                yield result.record
            elif result is not None:
                log.warning("IGNORING MALFORMED LINE (%s): %r", result.reason, result.line)

    __call__ = iteritems

    @classmethod
    def make_item(cls, match):
        item = cls.itemtuple(
            host=match["host"],
            disconnect_time=split_logtime(match["time"]),
            mountpoint=normalize_mountpoint(match["path"]),
            status=int(match["status"]),
            nbytes=int(match["nbytes"]),
            referrer=match["referrer"],
            user_agent=match["user_agent"],
            duration=int(match["duration"]),
            trailing=match["trailing"],
        )
        try:
            item.report_fields()
            item.report_fields(utc=True)
        except (OverflowError, OSError, ValueError):
            raise ParseError("connect time out of range") from None
        return item
