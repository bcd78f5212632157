#!/usr/bin/python3
# soundexchange-report - turn Icecast access logs into SoundExchange reports.
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
# Reads the access logs covering a date range and writes one tab-separated
# listener report per mount point, either as plain files or inside a zip
# archive, ready to be sent off for royalty reporting.

import argparse
import logging
import os

from ..config import RunConfig
from ..constants import (
    DEFAULT_EXCLUDED_HOSTS,
    DEFAULT_LOG_DIR,
    DEFAULT_MOUNTPOINTS,
    DEFAULT_OUTPUT_DIR,
    MIN_DURATION,
)
from ..output_items import DateWindow
from ..parse import parse
from ..util import ParseError, parse_civil_date
from ..version import __version__

log = logging.getLogger(__name__)

LOG_DIR_ENV = "ICECAST_LOG_DIR"
OUTPUT_DIR_ENV = "SOUNDEXCHANGE_OUTPUT_DIR"

# ===========================================================================
# ====== CLI parser & main() ================================================
# ===========================================================================


def civil_date(text):
    try:
        return parse_civil_date(text)
    except ParseError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def mountpoint_list(text):
    names = tuple(name.strip() for name in text.split(",") if name.strip())
    if not names:
        raise argparse.ArgumentTypeError("no mount points given")
    return names


def parse_args(argv=None, environ=None):
    if environ is None:
        environ = os.environ

    p = argparse.ArgumentParser(
        description="Generate SoundExchange listener reports from Icecast access logs.",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    p.add_argument(
        "-s", "--start", metavar="DD/Mon/YYYY", type=civil_date, required=True, help="first day"
    )
    p.add_argument(
        "-e", "--end", metavar="DD/Mon/YYYY", type=civil_date, required=True, help="last day"
    )

    p.add_argument(
        "-l",
        "--logdir",
        default=environ.get(LOG_DIR_ENV, DEFAULT_LOG_DIR),
        help=f"directory with access.log* files (default: ${LOG_DIR_ENV} or %(default)s)",
    )

    out = p.add_mutually_exclusive_group()
    out.add_argument(
        "-o",
        "--outdir",
        default=None,
        help=f"write report files here (default: ${OUTPUT_DIR_ENV} or {DEFAULT_OUTPUT_DIR})",
    )
    out.add_argument("-z", "--zip", metavar="ZIPFILE", help="write reports into a zip archive")

    p.add_argument(
        "-m",
        "--mountpoints",
        type=mountpoint_list,
        default=DEFAULT_MOUNTPOINTS,
        help="comma-separated mount points to report on (default: %(default)s)",
    )
    p.add_argument(
        "--exclude-host",
        metavar="ADDR",
        dest="excluded_hosts",
        action="append",
        default=[],
        help="ignore requests from this address (repeatable)",
    )
    p.add_argument(
        "--no-default-excludes",
        dest="default_excludes",
        default=True,
        action="store_false",
        help=f"don't ignore {', '.join(DEFAULT_EXCLUDED_HOSTS)}",
    )
    p.add_argument(
        "--min-duration",
        metavar="SECONDS",
        type=int,
        default=MIN_DURATION,
        help="drop sessions shorter than this (default: %(default)s)",
    )
    p.add_argument(
        "--strict-window",
        action="store_true",
        help="only report sessions that started inside the date range",
    )
    p.add_argument("--utc", action="store_true", help="report times in UTC")
    p.add_argument("--progress", action="store_true", help="print some progress info while reading")
    p.add_argument("-v", "--verbose", action="store_true", help="say what's going on")
    p.add_argument("--debug", action="store_true", help="say a lot more")

    args = p.parse_args(argv)

    if args.end < args.start:
        p.error("argument -e/--end: end date is before start date")
    if args.min_duration < 0:
        p.error("argument --min-duration: must not be negative")

    if not args.zip and not args.outdir:
        args.outdir = environ.get(OUTPUT_DIR_ENV, DEFAULT_OUTPUT_DIR)

    excluded = list(DEFAULT_EXCLUDED_HOSTS) if args.default_excludes else []
    excluded.extend(h for h in args.excluded_hosts if h not in excluded)

    args.config = RunConfig(
        window=DateWindow(args.start, args.end),
        log_dir=args.logdir,
        output_dir=args.outdir,
        zip_file=args.zip,
        mountpoints=args.mountpoints,
        excluded_hosts=tuple(excluded),
        min_duration=args.min_duration,
        strict_window=args.strict_window,
        utc=args.utc,
        progress=args.progress,
    )

    return args


def setup_logging(args):
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(name)s: %(levelname)s: %(message)s")


def cli():
    try:
        args = parse_args()
        setup_logging(args)
        counts = parse(args.config)
        for mountpoint, count in counts.items():
            log.info("%s: %d sessions reported", mountpoint, count)
    except OSError as e:
        log.error("%s: %s", e.filename or "I/O error", e.strerror or e)
        raise SystemExit(1)
    except KeyboardInterrupt:  # pragma: no cover
        raise SystemExit(3)
