"""Safety monitor facade."""

from __future__ import annotations

from ascom_facade.devices.base import Device
from ascom_facade.types import DeviceType


class SafetyMonitor(Device):
    DEVICE_TYPE = DeviceType.SAFETY_MONITOR
    DEVICE_STATE_MEMBERS = ("IsSafe",)

    @property
    def is_safe(self) -> bool:
        """True when conditions allow the observatory to operate."""
        return bool(self._get("IsSafe"))
