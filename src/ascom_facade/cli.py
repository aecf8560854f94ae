"""CLI entry point for ascom-facade.

Provides the ``ascom-facade`` console script with subcommands:

- ``probe`` - Connect to an Alpaca device and print its identity

Usage::

    # Probe camera 0 on the local Alpaca server
    ascom-facade probe --device-type camera

    # Probe a remote focuser and print JSON
    ascom-facade probe --host 192.168.1.20 --port 11111 \\
        --device-type focuser --device-number 1 --json

Module Structure:
    - ``main()`` - CLI entry point, dispatches subcommands
    - ``run_probe()`` - Read identity members from one device
    - ``_format_report()`` - Human-readable report text
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from ascom_facade.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    FacadeConfig,
    configure,
    get_factory,
)
from ascom_facade.errors import AscomError
from ascom_facade.observability import configure_logging
from ascom_facade.types import DeviceType

PROG_NAME = "ascom-facade"

#: Report fields in output order, as (label, facade attribute).
PROBE_FIELDS: tuple[tuple[str, str], ...] = (
    ("Name", "name"),
    ("Description", "description"),
    ("DriverInfo", "driver_info"),
    ("DriverVersion", "driver_version"),
    ("InterfaceVersion", "interface_version"),
    ("SupportedActions", "supported_actions"),
)


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger with message-only format for CLI feedback."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI feedback."""
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def run_probe(
    device_type: str,
    device_number: int = 0,
) -> dict[str, Any]:
    """Read the identity members of one device from the global factory.

    Args:
        device_type: Device type name, any casing.
        device_number: Alpaca device number.

    Returns:
        Mapping of report label to value, in PROBE_FIELDS order.

    Raises:
        AscomError: If the device reports an error or is unreachable.
        ValueError: If the device type is unknown.
    """
    device = get_factory().create(device_type, device_number)
    return {label: getattr(device, attr) for label, attr in PROBE_FIELDS}


def _format_report(report: dict[str, Any]) -> str:
    width = max(len(label) for label in report)
    lines = []
    for label, value in report.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) or "(none)"
        lines.append(f"{label:<{width}}  {value}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="ASCOM/Alpaca device facades",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Emit structured debug logging on stderr",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    probe_parser = subparsers.add_parser(
        "probe",
        help="Print the identity of an Alpaca device",
    )
    probe_parser.add_argument("--host", default=DEFAULT_HOST, help="Server host")
    probe_parser.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help="Server port"
    )
    probe_parser.add_argument(
        "--scheme", choices=("http", "https"), default="http", help="URL scheme"
    )
    probe_parser.add_argument(
        "--device-type",
        required=True,
        help=f"One of: {', '.join(t.value for t in DeviceType)}",
    )
    probe_parser.add_argument(
        "--device-number", type=int, default=0, help="Alpaca device number"
    )
    probe_parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the report as JSON",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point for ascom-facade.

    Returns:
        Exit code 0 for success, 1 when the device could not be probed,
        2 for usage errors.

    Raises:
        SystemExit: On --help or argument parsing errors.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command != "probe":
        parser.print_help()
        return 2

    if args.debug:
        configure_logging(level=logging.DEBUG, force=True)

    configure(FacadeConfig(scheme=args.scheme, host=args.host, port=args.port))
    try:
        report = run_probe(args.device_type, args.device_number)
    except ValueError as exc:
        _log(str(exc), emoji="❌")
        return 2
    except AscomError as exc:
        _log(f"Probe failed: {exc}", emoji="❌")
        return 1

    if args.as_json:
        print(json.dumps(report, indent=2))
    else:
        print(_format_report(report))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
