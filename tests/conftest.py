import os

import pytest

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def make_line(
    when="05/Mar/2013:22:09:36 -0600",
    host="1.2.3.4",
    path="/stream",
    status=200,
    nbytes=134755,
    referrer="-",
    user_agent="PlayerX/1.0",
    duration=40,
    method="GET",
    trailing="",
):
    """Build an Icecast access.log line; `when` may be a string or a datetime."""
    if not isinstance(when, str):
        when = (
            f"{when.day:02d}/{MONTHS[when.month - 1]}/{when.year:04d}:"
            f"{when.hour:02d}:{when.minute:02d}:{when.second:02d} +0000"
        )
    line = (
        f'{host} - - [{when}] "{method} {path} HTTP/1.0" {status} {nbytes} '
        f'"{referrer}" "{user_agent}" {duration}'
    )
    if trailing:
        line += f" {trailing}"
    return line


@pytest.fixture
def tmp_path_cwd(tmp_path):
    """Return a temporary path and change into it"""
    old_wd = os.getcwd()
    os.chdir(tmp_path)
    yield tmp_path
    os.chdir(old_wd)


@pytest.fixture
def logdir(tmp_path):
    """An empty log directory; fill it with write_log()."""
    logdir = tmp_path / "logs"
    logdir.mkdir()
    return logdir


def write_log(directory, name, lines):
    path = directory / name
    path.write_text("".join(line + "\n" for line in lines))
    return path
