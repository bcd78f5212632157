import datetime as dt
import logging
from unittest import mock

import pytest

from icecast_soundexchange.config import RunConfig
from icecast_soundexchange.constants import DEFAULT_LOG_DIR, DEFAULT_OUTPUT_DIR
from icecast_soundexchange.output_items import DateWindow
from icecast_soundexchange.scripts import soundexchange_report
from icecast_soundexchange.version import __version__


@pytest.fixture
def argv():
    return ["--start=04/Mar/2013", "--end=06/Mar/2013"]


def parse_args(argv, **environ):
    return soundexchange_report.parse_args(argv, environ=environ)


class TestParseArgs:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["-V"])

        assert excinfo.value.code == 0
        stdout, _ = capsys.readouterr()
        assert __version__ in stdout

    @pytest.mark.parametrize("missing", ("start", "end"))
    def test_missing_mandatory(self, missing, argv, capsys):
        argv = [arg for arg in argv if not arg.startswith(f"--{missing}")]

        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)

        assert excinfo.value.code == 2
        stdout, stderr = capsys.readouterr()
        assert not stdout
        assert "error: the following arguments are required" in stderr
        assert f"--{missing}" in stderr

    def test_defaults(self, argv):
        args = parse_args(argv)

        assert args.config == RunConfig(
            window=DateWindow(dt.date(2013, 3, 4), dt.date(2013, 3, 6)),
            log_dir=DEFAULT_LOG_DIR,
            output_dir=DEFAULT_OUTPUT_DIR,
            zip_file=None,
            mountpoints=("stream",),
            excluded_hosts=("127.0.0.1",),
            min_duration=3,
            strict_window=False,
            utc=False,
            progress=False,
        )

    def test_environment_defaults(self, argv):
        args = parse_args(
            argv, ICECAST_LOG_DIR="/srv/icecast/logs", SOUNDEXCHANGE_OUTPUT_DIR="/srv/reports"
        )
        assert args.config.log_dir == "/srv/icecast/logs"
        assert args.config.output_dir == "/srv/reports"

    def test_options_override_environment(self, argv):
        args = parse_args(
            argv + ["--logdir=/logs", "--outdir=/out"],
            ICECAST_LOG_DIR="/srv/icecast/logs",
            SOUNDEXCHANGE_OUTPUT_DIR="/srv/reports",
        )
        assert args.config.log_dir == "/logs"
        assert args.config.output_dir == "/out"

    def test_zip(self, argv):
        args = parse_args(argv + ["--zip=reports.zip"], SOUNDEXCHANGE_OUTPUT_DIR="/srv/reports")
        assert args.config.zip_file == "reports.zip"
        assert args.config.output_dir is None
        assert args.config.writer_args == ("zip", "reports.zip")

    def test_mutually_exclusive_group(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv + ["--zip=reports.zip", "--outdir=out"])

        assert excinfo.value.code != 0
        stdout, stderr = capsys.readouterr()
        assert not stdout
        assert "error: argument -o/--outdir: not allowed with argument -z/--zip" in stderr

    @pytest.mark.parametrize(
        "option, expected",
        (
            ("--mountpoints=stream", ("stream",)),
            ("--mountpoints=/stream, live.mp3,,/", ("/stream", "live.mp3", "/")),
        ),
    )
    def test_mountpoints(self, option, expected, argv):
        assert parse_args(argv + [option]).config.mountpoints == expected

    @pytest.mark.parametrize(
        "options, expected",
        (
            ([], ("127.0.0.1",)),
            (["--exclude-host=10.0.0.1"], ("127.0.0.1", "10.0.0.1")),
            (["--exclude-host=127.0.0.1"], ("127.0.0.1",)),
            (["--no-default-excludes"], ()),
            (["--no-default-excludes", "--exclude-host=10.0.0.1"], ("10.0.0.1",)),
        ),
    )
    def test_excluded_hosts(self, options, expected, argv):
        assert parse_args(argv + options).config.excluded_hosts == expected

    @pytest.mark.parametrize(
        "option, field",
        (("--strict-window", "strict_window"), ("--utc", "utc"), ("--progress", "progress")),
    )
    def test_flags(self, option, field, argv):
        assert not getattr(parse_args(argv).config, field)
        assert getattr(parse_args(argv + [option]).config, field)

    def test_min_duration(self, argv):
        assert parse_args(argv + ["--min-duration=10"]).config.min_duration == 10

    @pytest.mark.parametrize(
        "bad_argv, message",
        (
            (["--start=2013-03-04", "--end=06/Mar/2013"], "invalid date '2013-03-04'"),
            (["--start=04/Foo/2013", "--end=06/Mar/2013"], "unknown month name 'Foo'"),
            (["--start=06/Mar/2013", "--end=04/Mar/2013"], "end date is before start date"),
            (["--start=04/Mar/2013", "--end=06/Mar/2013", "--mountpoints=,"], "no mount points"),
            (["--start=04/Mar/2013", "--end=06/Mar/2013", "--min-duration=-1"], "negative"),
        ),
    )
    def test_configuration_errors(self, bad_argv, message, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(bad_argv)

        assert excinfo.value.code == 2
        _, stderr = capsys.readouterr()
        assert message in stderr


@pytest.mark.parametrize(
    "options, level",
    (([], logging.WARNING), (["-v"], logging.INFO), (["--debug"], logging.DEBUG)),
)
def test_setup_logging(options, level, argv):
    args = parse_args(argv + options)
    with mock.patch("logging.basicConfig") as basic_config:
        soundexchange_report.setup_logging(args)

    basic_config.assert_called_once_with(
        level=level, format="%(name)s: %(levelname)s: %(message)s"
    )


@mock.patch("icecast_soundexchange.scripts.soundexchange_report.setup_logging")
@mock.patch("icecast_soundexchange.scripts.soundexchange_report.parse")
@mock.patch("icecast_soundexchange.scripts.soundexchange_report.parse_args")
def test_cli(parse_args, parse, setup_logging):
    parse_args.return_value = args = mock.Mock()
    parse.return_value = {"stream": 1}

    soundexchange_report.cli()

    parse_args.assert_called_once_with()
    setup_logging.assert_called_once_with(args)
    parse.assert_called_once_with(args.config)


@mock.patch("icecast_soundexchange.scripts.soundexchange_report.setup_logging")
@mock.patch("icecast_soundexchange.scripts.soundexchange_report.parse")
@mock.patch("icecast_soundexchange.scripts.soundexchange_report.parse_args")
def test_cli_io_error(parse_args, parse, setup_logging, caplog):
    parse.side_effect = FileNotFoundError(2, "No such file or directory", "/var/log/nope")

    with pytest.raises(SystemExit) as excinfo:
        soundexchange_report.cli()

    assert excinfo.value.code == 1
    assert "/var/log/nope: No such file or directory" in caplog.text


def test_cli_end_to_end(tmp_path, monkeypatch):
    logdir = tmp_path / "logs"
    logdir.mkdir()
    (logdir / "access.log").write_text(
        '1.2.3.4 - - [05/Mar/2013:22:09:36 -0600] "GET /stream HTTP/1.0" 200 134755 '
        '"-" "PlayerX/1.0" 40\n'
    )
    outdir = tmp_path / "out"
    monkeypatch.setattr(
        "sys.argv",
        [
            "soundexchange-report",
            "--start=04/Mar/2013",
            "--end=06/Mar/2013",
            f"--logdir={logdir}",
            f"--outdir={outdir}",
            "--mountpoints=stream",
        ],
    )

    soundexchange_report.cli()

    assert (outdir / "stream-2013-03-06.txt").read_bytes() == (
        b"IP Address\tDate\tTime\tStream\tDuration\tStatus\tReferrer\r\n"
        b"1.2.3.4\t2013-03-05\t22:08:56\tstream\t040\t200\t-/PlayerX/1.0\r\n"
    )
