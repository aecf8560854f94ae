"""Test helper functions for ascom-facade.

Provides protocol compliance checks and request inspection shared by
the test modules.

Example:
    from tests.helpers import assert_implements_protocol
    from ascom_facade.devices import Backend

    def test_local_backend_implements_protocol():
        assert_implements_protocol(LocalBackend.for_driver(...), Backend)
"""

from __future__ import annotations

from typing import Any, Protocol
from unittest.mock import MagicMock

import requests


def assert_implements_protocol(
    instance: object,
    protocol: type[Protocol],
) -> None:
    """Assert that an instance implements a runtime-checkable Protocol.

    Args:
        instance: Object to check for protocol compliance.
        protocol: Protocol class decorated with @runtime_checkable.

    Raises:
        AssertionError: Listing the protocol members the instance lacks.
    """
    if not isinstance(instance, protocol):
        object_attrs = set(dir(object))
        expected = {
            attr
            for attr in set(dir(protocol)) - object_attrs
            if not attr.startswith("_")
        }
        missing = sorted(attr for attr in expected if not hasattr(instance, attr))
        raise AssertionError(
            f"{type(instance).__name__} does not implement {protocol.__name__}. "
            f"Missing: {', '.join(missing) or 'unknown'}"
        )


def sent_fields(call: Any) -> dict[str, str]:
    """Return the request fields of a recorded session.get/put call.

    Args:
        call: Entry from ``MagicMock.call_args`` or ``call_args_list``.

    Returns:
        Mapping of field name to value, from ``params`` for GET and
        ``data`` for PUT.
    """
    kwargs = call.kwargs
    pairs = kwargs.get("params") or kwargs.get("data") or []
    return dict(pairs)


def request_count(http: MagicMock) -> int:
    """Total number of GET and PUT requests sent through a mock session."""
    return http.get.call_count + http.put.call_count


# =============================================================================
# Fake driver
# =============================================================================


class FakeDriver:
    """Driver handle resolving members by name, recording every access.

    Members are supplied as keyword arguments. A member whose value is an
    exception instance raises it when read; callables act as methods.
    Reading a member that was never supplied raises AttributeError, the
    same way a late-bound driver without that member does. Omitting
    ``InterfaceVersion`` makes the driver look like a V1 driver.

    Example:
        >>> driver = FakeDriver(InterfaceVersion=2, Gain=100)
        >>> driver.Gain
        100
        >>> driver.accessed
        ['Gain']
    """

    def __init__(self, **members: Any) -> None:
        object.__setattr__(self, "members", dict(members))
        object.__setattr__(self, "accessed", [])

    def __getattr__(self, name: str) -> Any:
        self.accessed.append(name)
        try:
            value = self.members[name]
        except KeyError:
            raise AttributeError(name, name=name, obj=self) from None
        if isinstance(value, BaseException):
            raise value
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        self.accessed.append(name)
        current = self.members.get(name)
        if isinstance(current, BaseException):
            raise current
        self.members[name] = value

    def touched(self, name: str) -> bool:
        """Return True if the member was read, written or called."""
        return name in self.accessed


# =============================================================================
# Mock HTTP responses
# =============================================================================


def alpaca_response(
    value: Any = None,
    error_number: int = 0,
    error_message: str = "",
    status_code: int = 200,
    client_transaction_id: int = 1,
    server_transaction_id: int = 1,
) -> MagicMock:
    """Build a mock requests.Response carrying an Alpaca JSON envelope."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.headers = {"Content-Type": "application/json"}
    payload = {
        "Value": value,
        "ClientTransactionID": client_transaction_id,
        "ServerTransactionID": server_transaction_id,
        "ErrorNumber": error_number,
        "ErrorMessage": error_message,
    }
    if value is None:
        del payload["Value"]
    response.json.return_value = payload
    response.text = "" if status_code == 200 else "Server error"
    return response


def raw_response(
    body: bytes,
    content_type: str,
    content_encoding: str | None = None,
) -> MagicMock:
    """Build a mock streamed requests.Response with a raw body."""
    response = MagicMock(spec=requests.Response)
    response.status_code = 200
    response.headers = {"Content-Type": content_type}
    if content_encoding is not None:
        response.headers["Content-Encoding"] = content_encoding
    response.raw = MagicMock()
    response.raw.read.return_value = body
    return response
