# icecast_soundexchange.writers - write per-mount-point reports
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
import os
import zipfile

from .constants import REPORT_EOL, REPORT_HEADER

log = logging.getLogger(__name__)

# ===========================================================================
# ====== ReportWriters - output containers ==================================
# ===========================================================================


def report_filename(mountpoint, end_date):
    """
    <mountpoint>-<YYYY-MM-DD>.txt, with the root mount point named 'root'.
    Inner slashes become underscores so every report sits in one directory.
    """
    if mountpoint == "/":
        mountpoint = "root"
    mountpoint = mountpoint.replace("/", "_")
    return f"{mountpoint}-{end_date:%Y-%m-%d}.txt"


def render_report(entries):
    """The header plus one line per entry, each ending in CRLF, as bytes."""
    lines = [REPORT_HEADER, *entries]
    return "".join(line + REPORT_EOL for line in lines).encode("utf-8")


class ReportWriter:
    def __init__(self, target, end_date):
        self._target = target
        self._end_date = end_date

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def open(self):
        pass

    def close(self):
        pass

    def write_entry(self, name, content):
        raise NotImplementedError

    def write_report(self, mountpoint, entries):
        name = report_filename(mountpoint, self._end_date)
        self.write_entry(name, render_report(entries))
        log.info("%s: %d sessions", name, len(entries))
        return len(entries)

    def write(self, buckets):
        """Write one report per named bucket; return {mountpoint: lines written}."""
        counts = {}
        with self:
            for mountpoint, entries in buckets.items():
                if not mountpoint:
                    continue
                counts[mountpoint] = self.write_report(mountpoint, entries)
        return counts


class DirectoryWriter(ReportWriter):
    """One report file per mount point in the target directory."""

    def open(self):
        os.makedirs(self._target, exist_ok=True)

    def write_entry(self, name, content):
        with open(os.path.join(self._target, name), "wb") as fp:
            fp.write(content)


class ZipWriter(ReportWriter):
    """One compressed entry per mount point in a single zip archive."""

    _zipfile = None

    def open(self):
        self._zipfile = zipfile.ZipFile(self._target, mode="w", compression=zipfile.ZIP_DEFLATED)

    def close(self):
        if self._zipfile is not None:
            self._zipfile.close()
            self._zipfile = None

    def write_entry(self, name, content):
        self._zipfile.writestr(name, content)


def make_writer(name, *args, **kwargs):
    """Convenience function to grab/instantiate the right writer"""
    if name == "directory":
        writer = DirectoryWriter
    elif name == "zip":
        writer = ZipWriter
    else:
        raise ValueError(f"Unknown writer '{name}'")
    return writer(*args, **kwargs)
