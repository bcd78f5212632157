# icecast_soundexchange.aggregate - sort, filter and bucket listener sessions
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
from collections import Counter
from types import MappingProxyType

from .constants import MIN_DURATION
from .matchers import SessionMatcher
from .output_items import Malformed
from .regex import LOG_TIME_RE, normalize_mountpoint
from .util import ParseError, disconnect_sort_key, split_logtime

log = logging.getLogger(__name__)

__all__ = (
    "bucket_names",
    "sort_lines",
    "window_excludes",
    "aggregate",
)


def bucket_names(mountpoints):
    """Map lowercased mount point names to the configured spelling."""
    names = {}
    for name in mountpoints:
        name = normalize_mountpoint(name)
        if name:
            names.setdefault(name.lower(), name)
    return names


def _by_disconnect_time(item):
    logtime, _ = item
    return disconnect_sort_key(logtime)


def sort_lines(lines):
    """
    Sort raw log lines by their disconnect time. Lines whose time field can't
    be parsed are logged and dropped. The sort is stable.
    """
    keyed = []
    for line in lines:
        match = LOG_TIME_RE.search(line)
        try:
            if not match:
                raise ParseError("no time field")
            keyed.append((split_logtime(match["time"]), line))
        except ParseError as e:
            log.warning("IGNORING MALFORMED LINE (%s): %r", e, line)
    keyed.sort(key=_by_disconnect_time)
    return [line for _, line in keyed]


def window_excludes(window, connect_epoch, strict=False):
    """
    Should a session that started at `connect_epoch` be left out?

    Without `strict`, this is the test the reports have always used: a
    session is only dropped if it started both before the window and after
    it, which never happens, so every session is kept.
    """
    if strict:
        return not window.contains(connect_epoch)
    return connect_epoch < window.start_epoch and connect_epoch >= window.end_epoch


def aggregate(lines, window, mountpoints, min_duration=MIN_DURATION, strict_window=False, utc=False):
    """
    Turn raw log lines into per-mount-point report lines.

    Returns a read-only mapping with an entry for every mount point in
    `mountpoints` (empty if nothing matched), each a tuple of tab-separated
    report lines in chronological order.
    """
    names = bucket_names(mountpoints)
    buckets = {name: [] for name in names.values()}
    matcher = SessionMatcher(names.values())
    stats = Counter()

    candidates = [line for line in lines if matcher.is_candidate(line)]

    for line in sort_lines(candidates):
        result = matcher.match_line(line)
        if result is None:  # pragma: no cover
            continue
        if isinstance(result, Malformed):
            log.warning("IGNORING MALFORMED LINE (%s): %r", result.reason, result.line)
            stats["malformed"] += 1
            continue
        record = result.record
        if record.duration < min_duration:
            stats["short"] += 1
            continue
        if window_excludes(window, record.connect_timestamp(), strict=strict_window):
            stats["outside"] += 1
            continue
        name = names[record.mountpoint.lower()]
        buckets[name].append("\t".join(record.report_fields(utc=utc)))
        stats["sessions"] += 1

    log.info(
        "%d sessions, %d too short, %d outside window, %d malformed",
        stats["sessions"],
        stats["short"],
        stats["outside"],
        stats["malformed"],
    )
    return MappingProxyType({name: tuple(entries) for name, entries in buckets.items()})
