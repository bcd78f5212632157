import logging

from .aggregate import aggregate
from .logfiles import select_log_lines
from .writers import make_writer

log = logging.getLogger(__name__)


def parse(config):
    """
    Run one report: pick the logs, aggregate the sessions in the window and
    write a report per mount point. Returns {mountpoint: sessions written}.
    """
    window = config.window
    log.info("Reading logs from %s for %s to %s", config.log_dir, window.start, window.end)
    lines = select_log_lines(
        config.log_dir,
        window,
        excluded_hosts=config.excluded_hosts,
        progress=config.progress,
    )

    buckets = aggregate(
        lines,
        window,
        config.mountpoints,
        min_duration=config.min_duration,
        strict_window=config.strict_window,
        utc=config.utc,
    )

    name, target = config.writer_args
    writer = make_writer(name, target, window.end)
    return writer.write(buckets)
