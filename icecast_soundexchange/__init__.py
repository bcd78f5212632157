# icecast_soundexchange - SoundExchange listener reports from Icecast logs.
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

__all__ = (
    "DateWindow",
    "SessionRecord",
    "Parsed",
    "Malformed",
    "SessionMatcher",
    "RunConfig",
    "select_log_lines",
    "make_writer",
    "parse_civil_date",
    "ParseError",
)

from .config import RunConfig
from .logfiles import select_log_lines
from .matchers import SessionMatcher
from .output_items import DateWindow, Malformed, Parsed, SessionRecord
from .util import ParseError, parse_civil_date
from .writers import make_writer
