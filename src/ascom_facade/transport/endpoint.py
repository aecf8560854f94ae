"""Device endpoints and timeout tiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ascom_facade.types import DeviceType

#: Alpaca API path segment preceding the version number.
API_PATH = "api"

DEFAULT_ESTABLISH_TIMEOUT = 5.0
DEFAULT_STANDARD_TIMEOUT = 10.0
DEFAULT_LONG_TIMEOUT = 100.0


class BackendKind(Enum):
    """Where a device's members are executed."""

    LOCAL = "local"
    REMOTE = "remote"


class TimeoutTier(Enum):
    """Timeout class chosen by the facade for each member.

    ESTABLISH is used only for connect and disconnect transitions, LONG
    for members that block for a long time on the device (exposure
    control, image download, synchronous slews), STANDARD for the rest.
    """

    ESTABLISH = "establish"
    STANDARD = "standard"
    LONG = "long"


@dataclass(frozen=True)
class TimeoutPolicy:
    """Seconds allowed for each tier."""

    establish: float = DEFAULT_ESTABLISH_TIMEOUT
    standard: float = DEFAULT_STANDARD_TIMEOUT
    long: float = DEFAULT_LONG_TIMEOUT

    def seconds(self, tier: TimeoutTier) -> float:
        """Return the timeout for a tier."""
        if tier is TimeoutTier.ESTABLISH:
            return self.establish
        if tier is TimeoutTier.LONG:
            return self.long
        return self.standard


@dataclass(frozen=True)
class DeviceEndpoint:
    """Identity of one instrument. Immutable.

    A LOCAL endpoint carries the driver handle. A REMOTE endpoint carries
    the scheme, host, port, device type and device number used to build
    request URLs.

    Example:
        >>> ep = DeviceEndpoint.remote("192.168.1.20", 11111, DeviceType.SWITCH, 0)
        >>> ep.member_url("GetSwitchValue", strict_casing=False)
        'http://192.168.1.20:11111/api/v1/switch/0/getswitchvalue'
    """

    kind: BackendKind
    device_type: DeviceType
    device_number: int = 0
    driver: Any = None
    scheme: str = "http"
    host: str = ""
    port: int = 0
    api_version: int = 1

    @classmethod
    def local(cls, device_type: DeviceType, driver: Any) -> DeviceEndpoint:
        """Endpoint for a locally registered driver handle."""
        return cls(BackendKind.LOCAL, device_type, driver=driver)

    @classmethod
    def remote(
        cls,
        host: str,
        port: int,
        device_type: DeviceType,
        device_number: int,
        scheme: str = "http",
        api_version: int = 1,
    ) -> DeviceEndpoint:
        """Endpoint for a device reached over the Alpaca protocol."""
        if device_number < 0:
            raise ValueError(f"Device number must be >= 0, got {device_number}")
        return cls(
            BackendKind.REMOTE,
            device_type,
            device_number=device_number,
            scheme=scheme.lower(),
            host=host,
            port=port,
            api_version=api_version,
        )

    @property
    def base_url(self) -> str:
        """``{scheme}://{host}:{port}``; IPv6 hosts are bracketed."""
        host = self.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"{self.scheme}://{host}:{self.port}"

    @property
    def device_url(self) -> str:
        """URL prefix shared by every member of this device."""
        return (
            f"{self.base_url}/{API_PATH}/v{self.api_version}/"
            f"{self.device_type.url_segment}/{self.device_number}"
        )

    def member_url(self, member: str, strict_casing: bool) -> str:
        """Full URL for a member.

        Args:
            member: Member name as declared, e.g. ``"CanSetTracking"``.
            strict_casing: Send the name exactly as declared instead of
                lower-casing it.
        """
        name = member if strict_casing else member.lower()
        return f"{self.device_url}/{name}"

    def __str__(self) -> str:
        if self.kind is BackendKind.LOCAL:
            return f"local {self.device_type.value} ({type(self.driver).__name__})"
        return f"{self.device_url}"
