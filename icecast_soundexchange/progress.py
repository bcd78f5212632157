# icecast_soundexchange.progress - log readers and progress meters
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

import gzip
import lzma
import os
import sys

from .regex import LOG_DATE_RE

__all__ = (
    "log_reader",
    "ProgressMeter",
    "ReadProgress",
)

# ===========================================================================
# ====== Log readers & progress meters ======================================
# ===========================================================================


def log_date(line):
    match = LOG_DATE_RE.search(line)
    if match:
        return match["date"]
    return "??/??/????"


def log_reader(logfn):
    logfn = os.fspath(logfn)
    if logfn.endswith(".xz"):
        return lzma.open(logfn, mode="rt", errors="replace")
    elif logfn.endswith(".gz"):
        return gzip.open(logfn, mode="rt", errors="replace")
    else:
        return open(logfn, mode="rt", errors="replace")


def log_total_size(logfn):
    """Size of a plain log file in bytes; None for compressed ones."""
    logfn = os.fspath(logfn)
    if logfn.endswith((".xz", ".gz")):
        return None
    return os.stat(logfn).st_size


class ProgressMeter:
    def __init__(self, desc=None, total=None, file=None, disable=False, barchar="_-=#"):
        self.desc = desc
        self.total = total
        self.file = sys.stderr if file is None else file
        self.disable = disable or not total
        self.count = 0
        self.showat = 0
        self.barchar = barchar

    def set_description(self, desc=None):
        self.desc = desc
        if not self.disable:
            self.display()

    def update(self, n=1):
        if self.disable:
            return
        self.count += n
        if self.count >= self.showat:
            self.showat = min(self.total, self.showat + self.total // 100)
            self.display()

    @staticmethod
    def hrsize(n):
        for suffix in ("", "k", "m", "g", "t"):
            if n < 1000:
                break
            n /= 1000
        return f"{n:.1f}{suffix}b"

    def display(self):
        pct = (self.count * 100) // self.total
        bar = (min(pct, 100) // 4) * self.barchar[-1]
        if pct < 100:
            bar += self.barchar[pct % 4]
        count, total = self.hrsize(self.count), self.hrsize(self.total)
        print(
            f"{self.desc}: {pct:>3}% [{bar:<25}] {count:>7}/{total:<7}",
            flush=True,
            file=self.file,
            end="\r",
        )

    def close(self):
        if self.disable:
            return
        print(flush=True, file=self.file)


class ReadProgress:
    def __init__(self, logs, display=True):
        """logs should be a sequence of log file paths.
        if display is False, no progress output will be printed."""
        self.logs = logs
        self.display = display

    def __iter__(self):
        """Yield (path, lines) for each log; lines is a list of the file's
        lines. Each file is closed before the next one is opened."""
        for num, logfn in enumerate(self.logs):
            with log_reader(logfn) as logf:
                total = log_total_size(logfn) if self.display else None
                lines = list(self._iter_log_lines(logf, num, total))
            yield logfn, lines

    def _progress_obj(self, *args, **kwargs):
        return ProgressMeter(*args, **kwargs)

    def _iter_log_lines(self, logf, num, total):
        prog = self._progress_obj(total=total, disable=not self.display)

        for i, line in enumerate(logf):
            if i == 0:
                prog.set_description(f"log {num+1}/{len(self.logs)}, date={log_date(line)}")
            prog.update(len(line))
            yield line
        prog.close()
