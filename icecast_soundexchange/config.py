from typing import NamedTuple

from .constants import (
    DEFAULT_EXCLUDED_HOSTS,
    DEFAULT_LOG_DIR,
    DEFAULT_MOUNTPOINTS,
    DEFAULT_OUTPUT_DIR,
    MIN_DURATION,
)
from .output_items import DateWindow


class RunConfig(NamedTuple):
    """Everything a report run needs to know, set up once by the CLI."""

    window: DateWindow
    log_dir: str = DEFAULT_LOG_DIR
    output_dir: str | None = DEFAULT_OUTPUT_DIR
    zip_file: str | None = None
    mountpoints: tuple[str, ...] = DEFAULT_MOUNTPOINTS
    excluded_hosts: tuple[str, ...] = DEFAULT_EXCLUDED_HOSTS
    min_duration: int = MIN_DURATION
    strict_window: bool = False
    utc: bool = False
    progress: bool = False

    @property
    def writer_args(self):
        """(writer name, target) for writers.make_writer()"""
        if self.zip_file:
            return "zip", self.zip_file
        return "directory", self.output_dir or DEFAULT_OUTPUT_DIR
