"""Common facade members shared by every device type.

Device subclasses declare their members as thin wrappers around four
helpers, one per access shape:

    _get(member)              property read
    _put(member, value)       property write
    _query(member, params)    method that only reads (GET on the wire)
    _call(member, params)     method that acts (PUT on the wire)

Each access runs inside a LogContext identifying the device so every
record emitted underneath (shim, transport) carries it.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, ClassVar, Self

import requests

from ascom_facade.capabilities import has_connect_and_device_state
from ascom_facade.devices.backends import Backend, LocalBackend, RemoteBackend
from ascom_facade.errors import DriverFailure, UnsupportedOperation
from ascom_facade.observability import LogContext, get_logger
from ascom_facade.transport import (
    ClientSession,
    DeviceEndpoint,
    TimeoutPolicy,
    TimeoutTier,
    TransportAdapter,
)
from ascom_facade.types import DeviceType, MemberKind, StateValue, field_value

logger = get_logger(__name__)

Params = Sequence[tuple[str, Any]]

_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_utc(value: Any) -> datetime:
    """Convert a UTCDate value from either back end to an aware datetime.

    Remote devices send ISO 8601 strings, which may carry seven
    fractional digits and a ``Z`` suffix. Local drivers return datetimes;
    naive ones are taken to be UTC.

    Raises:
        DriverFailure: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    try:
        text = _FRACTION.sub(r"\1", str(value).strip())
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise DriverFailure(f"Invalid UTCDate value {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def format_utc(value: datetime) -> str:
    """Render a datetime as the ISO 8601 UTC string Alpaca expects."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.replace(tzinfo=None).isoformat(timespec="microseconds") + "Z"


class Device:
    """Facade over one instrument, backed by a local driver or a remote device.

    Business context: Client code (imaging sequencers, observatory
    automation) is written once against these classes. Whether a member
    is served by an old V1 driver through the capability shim or by an
    Alpaca server across the network is decided when the facade is
    built, never at the call site.

    Example:
        >>> camera = Camera.remote("192.168.1.20", 11111, 0)
        >>> camera.connect()
        >>> camera.name
        'ZWO ASI294MC Pro'
        >>> focuser = Focuser.local(driver)
        >>> focuser.connected = True  # Link on a V1 driver
    """

    DEVICE_TYPE: ClassVar[DeviceType]
    #: Operational properties assembled into DeviceState when the back
    #: end predates the native DeviceState member.
    DEVICE_STATE_MEMBERS: ClassVar[tuple[str, ...]] = ()

    def __init__(self, backend: Backend) -> None:
        if backend.device_type is not self.DEVICE_TYPE:
            raise ValueError(
                f"{type(self).__name__} requires a {self.DEVICE_TYPE.value} back "
                f"end, got {backend.device_type.value}"
            )
        self._backend = backend

    # -- construction -------------------------------------------------------

    @classmethod
    def local(cls, driver: Any) -> Self:
        """Build a facade over a local driver handle."""
        return cls(LocalBackend.for_driver(cls.DEVICE_TYPE, driver))

    @classmethod
    def remote(
        cls,
        host: str,
        port: int,
        device_number: int = 0,
        *,
        scheme: str = "http",
        api_version: int = 1,
        session: ClientSession | None = None,
        timeouts: TimeoutPolicy | None = None,
        http: requests.Session | None = None,
        user_agent: str | None = None,
    ) -> Self:
        """Build a facade over an Alpaca device.

        Args:
            host: Server host name or IP address.
            port: Server port.
            device_number: Alpaca device number on that server.
            scheme: ``http`` or ``https``.
            api_version: Alpaca API version in request paths.
            session: Client identity; a fresh ClientSession by default.
            timeouts: Seconds per timeout tier.
            http: requests.Session to share between facades.
            user_agent: ``User-Agent`` header override.
        """
        endpoint = DeviceEndpoint.remote(
            host,
            port,
            cls.DEVICE_TYPE,
            device_number,
            scheme=scheme,
            api_version=api_version,
        )
        kwargs: dict[str, Any] = {}
        if user_agent is not None:
            kwargs["user_agent"] = user_agent
        adapter = TransportAdapter(
            session or ClientSession(), timeouts=timeouts, http=http, **kwargs
        )
        return cls(RemoteBackend(adapter, endpoint))

    @property
    def backend(self) -> Backend:
        return self._backend

    # -- access helpers ---------------------------------------------------

    def _context(self, member: str) -> LogContext:
        return LogContext(member=member, **self._backend.log_fields)

    def _get(self, member: str, tier: TimeoutTier = TimeoutTier.STANDARD) -> Any:
        with self._context(member):
            return self._backend.read(member, (), tier, MemberKind.PROPERTY)

    def _put(
        self,
        member: str,
        value: Any,
        tier: TimeoutTier = TimeoutTier.STANDARD,
    ) -> None:
        with self._context(member):
            self._backend.write(member, ((member, value),), tier, MemberKind.PROPERTY)

    def _query(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
    ) -> Any:
        with self._context(member):
            return self._backend.read(member, params, tier, MemberKind.METHOD)

    def _call(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
    ) -> Any:
        with self._context(member):
            return self._backend.write(member, params, tier, MemberKind.METHOD)

    # -- connection -------------------------------------------------------

    @property
    def connected(self) -> bool:
        """Connection state; see ClientSession.manage_connect_locally."""
        with self._context("Connected"):
            return self._backend.get_connected()

    @connected.setter
    def connected(self, value: bool) -> None:
        with self._context("Connected"):
            self._backend.set_connected(bool(value))

    @property
    def has_connect_and_device_state(self) -> bool:
        """True if Connect(), Disconnect(), Connecting and DeviceState are native."""
        return has_connect_and_device_state(
            self.DEVICE_TYPE, self._backend.interface_version()
        )

    def _native_connect(self) -> bool:
        if self._backend.manages_connection_locally:
            return False
        return self.has_connect_and_device_state

    def connect(self) -> None:
        """Start connecting; falls back to ``Connected = True`` on older devices."""
        if self._native_connect():
            self._call("Connect", tier=TimeoutTier.ESTABLISH)
        else:
            self.connected = True

    def disconnect(self) -> None:
        """Start disconnecting; falls back to ``Connected = False``."""
        if self._native_connect():
            self._call("Disconnect", tier=TimeoutTier.ESTABLISH)
        else:
            self.connected = False

    @property
    def connecting(self) -> bool:
        """True while an asynchronous connect or disconnect is in progress."""
        if self._native_connect():
            return bool(self._get("Connecting"))
        return False

    @property
    def device_state(self) -> list[StateValue]:
        """Operational state snapshot.

        Older devices have no DeviceState member; for them the snapshot is
        assembled from DEVICE_STATE_MEMBERS, leaving out members the
        device does not implement, and stamped with the current time.
        """
        if self.has_connect_and_device_state:
            strict = self._backend.strict_casing
            return [
                _state_value(item, strict) for item in self._get("DeviceState") or []
            ]
        return self._emulated_device_state()

    def _emulated_device_state(self) -> list[StateValue]:
        state: list[StateValue] = []
        for member in self.DEVICE_STATE_MEMBERS:
            try:
                state.append(StateValue(member, self._get(member)))
            except UnsupportedOperation:
                logger.debug("Omitting unsupported state member", member=member)
        state.append(StateValue("TimeStamp", datetime.now(UTC)))
        return state

    # -- identity -----------------------------------------------------------

    @property
    def description(self) -> str:
        return str(self._get("Description"))

    @property
    def driver_info(self) -> str:
        return str(self._get("DriverInfo"))

    @property
    def driver_version(self) -> str:
        return str(self._get("DriverVersion"))

    @property
    def interface_version(self) -> int:
        """Interface version, read from the device on every access."""
        with self._context("InterfaceVersion"):
            return self._backend.interface_version()

    @property
    def name(self) -> str:
        return str(self._get("Name"))

    @property
    def supported_actions(self) -> list[str]:
        """Names accepted by action(); empty for devices predating the list."""
        return [str(action) for action in self._get("SupportedActions") or []]

    # -- device-specific extensions -------------------------------------

    def action(self, action_name: str, action_parameters: str = "") -> str:
        """Invoke a device-specific action."""
        return str(
            self._call(
                "Action",
                (("Action", action_name), ("Parameters", action_parameters)),
            )
        )

    def command_blind(self, command: str, raw: bool = False) -> None:
        """Send a command without waiting for a response."""
        self._call("CommandBlind", (("Command", command), ("Raw", raw)))

    def command_bool(self, command: str, raw: bool = False) -> bool:
        """Send a command and return its boolean response."""
        return bool(self._call("CommandBool", (("Command", command), ("Raw", raw))))

    def command_string(self, command: str, raw: bool = False) -> str:
        """Send a command and return its string response."""
        return str(self._call("CommandString", (("Command", command), ("Raw", raw))))

    def __repr__(self) -> str:
        fields = " ".join(f"{k}={v}" for k, v in self._backend.log_fields.items())
        return f"<{type(self).__name__} {fields}>"


def _state_value(item: Any, strict_casing: bool) -> StateValue:
    if isinstance(item, StateValue):
        return item
    return StateValue(
        str(field_value(item, "Name", strict_casing)),
        field_value(item, "Value", strict_casing),
    )
