DAY_LEN = 24 * 60 * 60
WEEK_LEN = 7 * DAY_LEN
MONTHIDX = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

# Rotated logs are kept for up to a week past the end date, so sessions that
# were still running when the log got rotated aren't lost.
ROTATION_SLACK = WEEK_LEN

# Sessions shorter than this are HEAD requests, stream checkers and the like.
MIN_DURATION = 3

DEFAULT_LOG_DIR = "/var/log/icecast2"
DEFAULT_OUTPUT_DIR = "."
DEFAULT_MOUNTPOINTS = ("stream",)

# The local monitoring check polls the stream all day long.
DEFAULT_EXCLUDED_HOSTS = ("127.0.0.1",)

# Reports use DOS line endings, including after the last line.
REPORT_EOL = "\r\n"
REPORT_FIELDS = ("IP Address", "Date", "Time", "Stream", "Duration", "Status", "Referrer")
REPORT_HEADER = "\t".join(REPORT_FIELDS)
