"""Tests for the ascom-facade CLI.

The device factory is patched so no Alpaca server is needed.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from ascom_facade import cli
from ascom_facade.cli import PROBE_FIELDS, _format_report, main, run_probe
from ascom_facade.config import get_factory
from ascom_facade.errors import NotConnected, TransportError


def _fake_device() -> MagicMock:
    device = MagicMock()
    device.name = "Simulator"
    device.description = "Alpaca camera simulator"
    device.driver_info = "OmniSim"
    device.driver_version = "0.4"
    device.interface_version = 4
    device.supported_actions = []
    return device


@pytest.fixture
def factory() -> Iterator[MagicMock]:
    """Patch get_factory() in the CLI to return a mock factory."""
    mock_factory = MagicMock()
    mock_factory.create.return_value = _fake_device()
    with patch.object(cli, "get_factory", return_value=mock_factory):
        yield mock_factory


class TestRunProbe:
    """run_probe()."""

    def test_report_fields(self, factory: MagicMock) -> None:
        """Every identity member is reported in order."""
        report = run_probe("camera", 2)
        assert list(report) == [label for label, _ in PROBE_FIELDS]
        assert report["Name"] == "Simulator"
        assert report["InterfaceVersion"] == 4
        factory.create.assert_called_once_with("camera", 2)

    def test_format_report(self) -> None:
        """Labels are aligned and empty lists shown as (none)."""
        text = _format_report({"Name": "Sim", "SupportedActions": []})
        lines = text.splitlines()
        assert lines[0] == "Name              Sim"
        assert lines[1] == "SupportedActions  (none)"

    def test_format_report_joins_lists(self) -> None:
        """List values are comma separated."""
        text = _format_report({"SupportedActions": ["a", "b"]})
        assert text.endswith("a, b")


class TestMain:
    """main() argument handling and exit codes."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without a subcommand the help text is printed."""
        assert main([]) == 2
        assert "probe" in capsys.readouterr().out

    def test_probe_text(
        self, factory: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """The report is printed to stdout."""
        assert main(["probe", "--device-type", "camera"]) == 0
        out = capsys.readouterr().out
        assert "Simulator" in out
        assert "OmniSim" in out

    def test_probe_json(
        self, factory: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--json prints a JSON object."""
        assert main(["probe", "--device-type", "camera", "--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["DriverVersion"] == "0.4"
        assert report["SupportedActions"] == []

    def test_probe_configures_factory(self) -> None:
        """Host, port and scheme configure the global factory."""
        with patch.object(cli, "run_probe", return_value={"Name": "x"}):
            assert (
                main(
                    [
                        "probe",
                        "--host",
                        "10.1.1.1",
                        "--port",
                        "4567",
                        "--scheme",
                        "https",
                        "--device-type",
                        "dome",
                    ]
                )
                == 0
            )
        config = get_factory().config
        assert (config.host, config.port, config.scheme) == ("10.1.1.1", 4567, "https")

    def test_device_error_exit_code(self, factory: MagicMock) -> None:
        """Device and transport errors exit with 1."""
        factory.create.side_effect = TransportError("connection refused")
        assert main(["probe", "--device-type", "camera"]) == 1
        factory.create.side_effect = NotConnected("not connected")
        assert main(["probe", "--device-type", "camera"]) == 1

    def test_unknown_device_type(self, factory: MagicMock) -> None:
        """Unknown device types exit with 2."""
        factory.create.side_effect = ValueError("Unknown device type: 'mount'")
        assert main(["probe", "--device-type", "mount"]) == 2

    def test_bad_port_is_usage_error(self) -> None:
        """argparse rejects non-integer ports."""
        with pytest.raises(SystemExit) as info:
            main(["probe", "--device-type", "camera", "--port", "abc"])
        assert info.value.code == 2

    def test_debug_configures_logging(self, factory: MagicMock) -> None:
        """--debug switches the package logger to DEBUG."""
        with patch.object(cli, "configure_logging") as configure_logging:
            assert main(["--debug", "probe", "--device-type", "camera"]) == 0
        configure_logging.assert_called_once()
