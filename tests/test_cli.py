from __future__ import annotations

import pytest

from geobridge.__main__ import build_parser, main


def test_parser_send_arguments() -> None:
    args = build_parser().parse_args(["--host", "10.0.0.2", "send", "--lat", "1.5", "--lon", "-2.5"])
    assert args.host == "10.0.0.2"
    assert args.command == "send"
    assert (args.lat, args.lon, args.accuracy) == (1.5, -2.5, 0.0)


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_invalid_coordinates_exit_with_usage_error() -> None:
    assert main(["send", "--lat", "123", "--lon", "0"]) == 2


def test_invalid_host_reports_config_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--host", "http://nope", "status"]) == 1
    assert "device_host" in capsys.readouterr().err
