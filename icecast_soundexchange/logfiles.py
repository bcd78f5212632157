# icecast_soundexchange.logfiles - find the access logs covering a date window
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
#
# Icecast rotates access.log to access.log.YYYYMMDD_HHMMSS, so the file name
# tells us when a log was retired. The live access.log has no such date and
# has to be looked into instead.

import logging
import os
from datetime import date, datetime
from typing import NamedTuple

from .constants import DEFAULT_EXCLUDED_HOSTS
from .progress import ReadProgress
from .regex import LOG_DATE_RE, LOG_FILENAME_RE
from .util import ParseError, parse_civil_date

log = logging.getLogger(__name__)

__all__ = (
    "LogFileCandidate",
    "list_log_files",
    "rotation_date",
    "drop_excluded_hosts",
    "has_window_content",
    "select_log_lines",
)


class LogFileCandidate(NamedTuple):
    path: str
    rotated: date | None

    @property
    def filename(self):
        return os.path.basename(self.path)


def rotation_date(filename):
    """
    Return the rotation date embedded in a log file name as a datetime.date,
    or None if there isn't a (valid) one.
    """
    match = LOG_FILENAME_RE.match(filename)
    if not match or not match["date"]:
        return None
    try:
        return datetime.strptime(match["date"], "%Y%m%d").date()
    except ValueError:
        log.debug("%s: unparseable rotation date %r", filename, match["date"])
        return None


def list_log_files(directory):
    """List the access log files in `directory`, sorted by name."""
    candidates = []
    for filename in sorted(os.listdir(directory)):
        if not LOG_FILENAME_RE.match(filename):
            continue
        candidates.append(
            LogFileCandidate(os.path.join(directory, filename), rotation_date(filename))
        )
    return candidates


def drop_excluded_hosts(lines, excluded_hosts):
    excluded = frozenset(excluded_hosts)
    if not excluded:
        return list(lines)
    return [line for line in lines if line.split(" ", 1)[0] not in excluded]


def has_window_content(lines, window):
    """True if any line's bracketed date lies in [start, end + 1 day]."""
    for line in lines:
        match = LOG_DATE_RE.search(line)
        if not match:
            continue
        try:
            logged = parse_civil_date(match["date"])
        except ParseError:
            continue
        if window.contains_log_date(logged):
            return True
    return False


def select_log_lines(directory, window, excluded_hosts=DEFAULT_EXCLUDED_HOSTS, progress=False):
    """
    Return the lines of every log file in `directory` that may hold sessions
    for `window`, minus the ones from `excluded_hosts`.

    Rotated logs are picked by the date in their name; logs without one are
    read and kept only if they contain at least one in-window date.
    """
    candidates = []
    for candidate in list_log_files(directory):
        if candidate.rotated is not None and not window.contains_rotation_date(
            candidate.rotated
        ):
            log.debug("%s: rotated %s, outside window", candidate.filename, candidate.rotated)
            continue
        candidates.append(candidate)

    by_path = {c.path: c for c in candidates}
    selected = []
    for path, lines in ReadProgress([c.path for c in candidates], display=progress):
        candidate = by_path[path]
        lines = drop_excluded_hosts((line.rstrip("\r\n") for line in lines), excluded_hosts)
        if candidate.rotated is None and not has_window_content(lines, window):
            log.info("%s: no entries in window, skipping", candidate.filename)
            continue
        log.info("%s: using %d lines", candidate.filename, len(lines))
        selected.extend(lines)

    return selected
