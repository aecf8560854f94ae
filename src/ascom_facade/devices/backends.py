"""Local and remote back ends behind the device facades.

A facade never talks to a driver or to HTTP directly. It names a member,
its parameters (as ordered key/value pairs) and a timeout tier, and the
back end decides how to execute it:

- LocalBackend routes through a CapabilityShim. Parameter keys are
  dropped and the values are passed positionally to the driver.
- RemoteBackend routes through a TransportAdapter. Keys become query or
  form parameters; the tier selects the HTTP timeout.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

from ascom_facade.capabilities import CapabilityShim
from ascom_facade.transport import (
    DeviceEndpoint,
    ImageArrayCompression,
    ImageArrayTransferType,
    TimeoutTier,
    TransportAdapter,
)
from ascom_facade.types import Access, DeviceType, MemberKind

Params = Sequence[tuple[str, Any]]


@runtime_checkable
class Backend(Protocol):
    """Execution target of a device facade."""

    device_type: DeviceType

    @property
    def log_fields(self) -> dict[str, Any]:
        """Key/values identifying the device in log records."""
        ...  # pragma: no cover

    @property
    def manages_connection_locally(self) -> bool:
        """True if ``Connected`` is tracked without contacting the device."""
        ...  # pragma: no cover

    @property
    def strict_casing(self) -> bool:
        """True if field names in structured values must match exactly."""
        ...  # pragma: no cover

    def interface_version(self) -> int:
        """Interface version reported by the device, read on every call."""
        ...  # pragma: no cover

    def read(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        """Read a property or call a query method."""
        ...  # pragma: no cover

    def write(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        """Write a property or call an action method."""
        ...  # pragma: no cover

    def get_connected(self) -> bool:
        """Read ``Connected``."""
        ...  # pragma: no cover

    def set_connected(self, value: bool) -> None:
        """Write ``Connected``."""
        ...  # pragma: no cover

    def image_array(
        self,
        transfer: ImageArrayTransferType,
        compression: ImageArrayCompression,
        member: str = "ImageArray",
    ) -> npt.NDArray[Any]:
        """Fetch the camera image from ImageArray or ImageArrayVariant."""
        ...  # pragma: no cover


class LocalBackend:
    """Back end for a locally registered driver handle."""

    def __init__(self, shim: CapabilityShim) -> None:
        self.shim = shim
        self.device_type = shim.device_type

    @classmethod
    def for_driver(cls, device_type: DeviceType, driver: Any) -> LocalBackend:
        """Wrap a driver handle in a shim with the device type's policy table."""
        return cls(CapabilityShim(driver, device_type))

    @property
    def endpoint(self) -> DeviceEndpoint:
        return DeviceEndpoint.local(self.device_type, self.shim.driver)

    @property
    def log_fields(self) -> dict[str, Any]:
        return {
            "device_type": self.device_type.value,
            "backend": "local",
            "driver": type(self.shim.driver).__name__,
        }

    @property
    def manages_connection_locally(self) -> bool:
        return False

    @property
    def strict_casing(self) -> bool:
        return False

    def interface_version(self) -> int:
        return self.shim.interface_version()

    def read(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        if kind is MemberKind.PROPERTY:
            return self.shim.get(member)
        return self.shim.invoke(member, *(value for _, value in params))

    def write(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        if kind is MemberKind.PROPERTY:
            if len(params) != 1:
                raise ValueError(f"Property {member} takes exactly one value")
            self.shim.set(member, params[0][1])
            return None
        return self.shim.invoke(member, *(value for _, value in params))

    def get_connected(self) -> bool:
        return bool(self.shim.get("Connected"))

    def set_connected(self, value: bool) -> None:
        self.shim.set("Connected", value)

    def image_array(
        self,
        transfer: ImageArrayTransferType,
        compression: ImageArrayCompression,
        member: str = "ImageArray",
    ) -> npt.NDArray[Any]:
        return np.asarray(self.shim.get(member))


class RemoteBackend:
    """Back end for a device reached through the Alpaca protocol."""

    def __init__(self, adapter: TransportAdapter, endpoint: DeviceEndpoint) -> None:
        self.adapter = adapter
        self.endpoint = endpoint
        self.device_type = endpoint.device_type

    @property
    def log_fields(self) -> dict[str, Any]:
        return {
            "device_type": self.device_type.value,
            "device_number": self.endpoint.device_number,
            "client_id": self.adapter.client_session.client_id,
            "backend": "remote",
        }

    @property
    def manages_connection_locally(self) -> bool:
        return self.adapter.client_session.manage_connect_locally

    @property
    def strict_casing(self) -> bool:
        return self.adapter.client_session.strict_casing

    def interface_version(self) -> int:
        return int(self.read("InterfaceVersion"))

    def read(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        return self.adapter.execute(self.endpoint, member, Access.READ, params, tier)

    def write(
        self,
        member: str,
        params: Params = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
        kind: MemberKind = MemberKind.PROPERTY,
    ) -> Any:
        return self.adapter.execute(self.endpoint, member, Access.WRITE, params, tier)

    def get_connected(self) -> bool:
        return self.adapter.get_connected(self.endpoint)

    def set_connected(self, value: bool) -> None:
        self.adapter.set_connected(self.endpoint, value)

    def image_array(
        self,
        transfer: ImageArrayTransferType,
        compression: ImageArrayCompression,
        member: str = "ImageArray",
    ) -> npt.NDArray[Any]:
        return self.adapter.fetch_image(self.endpoint, member, transfer, compression)
