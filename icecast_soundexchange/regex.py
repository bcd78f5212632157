# icecast_soundexchange.regex - regexes for log matching and parsing
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

import re

__all__ = (
    "compile_log_regex",
    "compile_prefilter_regex",
    "mountpoint_pattern",
    "normalize_mountpoint",
    "LOG_DATE_RE",
    "LOG_TIME_RE",
    "LOG_FILENAME_RE",
)

# ===========================================================================
# ====== Regexes! Get your regexes here! ====================================
# ===========================================================================

# Icecast writes the Combined Log Format with one extra field: the number of
# seconds the listener stayed connected. The line is written when the
# listener disconnects, so the timestamp is the *end* of the session.
#
# Example log line:
#   1.2.3.4 - - [05/Mar/2013:22:09:36 -0600] "GET /stream HTTP/1.0" 200 134755 "-" "PlayerX/1.0" 40 # noqa
#
# Some servers append more fields after the duration; those end up in
# 'trailing' and are otherwise ignored.
LOG_PATTERN_FORMAT = (
    r"^"
    r"(?P<host>{host})\s"
    r"(?P<identity>{identity})\s"
    r"(?P<user>{user})\s"
    r"\[(?P<time>{time})\]\s"
    r'"(?P<method>{method})\s'
    r"(?P<path>{path})"
    r'\s(?P<protocol>{protocol})"\s'
    r"(?P<status>{status})\s"
    r"(?P<nbytes>{nbytes})\s"
    r'"(?P<referrer>{referrer})"\s'
    r'"(?P<user_agent>{user_agent})"\s'
    r"(?P<duration>{duration})"
    r"(?:\s+(?P<trailing>{trailing}))?\s*"
    r"$"
)

# Default/fallback patterns for each field. The user agent may contain
# anything, including quotes, parentheses and commas.
LOG_PATTERN_FIELDS = {
    "host": "\\S+",
    "identity": "\\S+",
    "user": "\\S+",
    "time": "\\d{1,2}/\\w{3}/\\d{4}:\\d{2}:\\d{2}:\\d{2}\\s[+-]\\d{4}",
    "method": "GET",
    "path": "\\S+",
    "protocol": "HTTP/\\d(?:\\.\\d)?",
    "status": "\\d+",
    "nbytes": "\\d+",
    "referrer": '[^"]*',
    "user_agent": ".*?",
    "duration": "\\d+",
    "trailing": "\\S.*?",
}


def normalize_mountpoint(name):
    """Strip a single leading slash, except from the root mount point '/'."""
    if name != "/" and name.startswith("/"):
        return name[1:]
    return name


def mountpoint_pattern(mountpoints):
    """
    Return a regex alternation matching the request path of any of the given
    mount points, with or without the leading slash.
    """
    alternatives = []
    for name in mountpoints:
        name = normalize_mountpoint(name)
        if name == "/":
            alternatives.append("/")
        elif name:
            alternatives.append("/?" + re.escape(name))
    if not alternatives:
        raise ValueError("no mount points to match")
    return "(?:" + "|".join(alternatives) + ")"


def compile_log_regex(flags=0, ascii=True, mountpoints=None, **kwargs):
    """
    Return a compiled re.Pattern object that should match Icecast access.log
    lines, capturing each field (as listed in LOG_PATTERN_FIELDS) in its own
    group.

    The default regex to match each field is in LOG_PATTERN_FIELDS but you
    can supply your own custom regexes as keyword arguments, like so:

        head_or_get_pattern = compile_log_regex(method='GET|HEAD')

    If `mountpoints` is given, only requests for those mount points match;
    this overrides any `path` pattern.

    Matching is always case-insensitive, so "get /Stream" is a match for the
    mount point "stream". Since access.log contents should be ASCII-only,
    re.ASCII is added by default, but you can turn that off with
    'ascii=False'.
    """
    flags |= re.IGNORECASE
    if ascii:  # pragma: no branch
        flags |= re.ASCII

    fields = LOG_PATTERN_FIELDS.copy()
    fields.update(kwargs)

    if mountpoints is not None:
        fields["path"] = mountpoint_pattern(mountpoints)

    pattern = LOG_PATTERN_FORMAT.format(**fields)

    return re.compile(pattern, flags=flags)


def compile_prefilter_regex(mountpoints):
    """
    Return a pattern that *searches* for "get <mountpoint> " anywhere in a
    line. This is much cheaper than a full match and throws away most of the
    lines we don't care about.
    """
    return re.compile(
        r"\bget\s" + mountpoint_pattern(mountpoints) + r"\s",
        flags=re.IGNORECASE | re.ASCII,
    )


# Regexes for pulling the date or the full time field out of a log line
LOG_DATE_RE = re.compile(r"\[(?P<date>\d{1,2}/\w{3}/\d{4}):", flags=re.ASCII)
LOG_TIME_RE = re.compile(r"\[(?P<time>[^\]]+)\]")

# Log file names: the live access.log, or a rotated one like
# access.log.20130305_120000 (optionally compressed).
LOG_FILENAME_RE = re.compile(
    r"^access.*?\.log(?:\.(?P<date>\d{8})_(?P<suffix>[^/]+))?$", flags=re.ASCII
)
