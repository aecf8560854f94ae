"""Focuser facade.

V1 focusers expose their connection as ``Link``; the capability table
maps ``Connected`` onto it, so ``focuser.connected`` works for every
interface version.
"""

from __future__ import annotations

from ascom_facade.devices.base import Device
from ascom_facade.types import DeviceType


class Focuser(Device):
    """Absolute or relative focuser."""

    DEVICE_TYPE = DeviceType.FOCUSER
    DEVICE_STATE_MEMBERS = ("IsMoving", "Position", "Temperature")

    @property
    def absolute(self) -> bool:
        """True for absolute focusers; move() then takes a step position."""
        return bool(self._get("Absolute"))

    @property
    def is_moving(self) -> bool:
        return bool(self._get("IsMoving"))

    @property
    def max_increment(self) -> int:
        return int(self._get("MaxIncrement"))

    @property
    def max_step(self) -> int:
        return int(self._get("MaxStep"))

    @property
    def position(self) -> int:
        return int(self._get("Position"))

    @property
    def step_size(self) -> float:
        return float(self._get("StepSize"))

    @property
    def temp_comp(self) -> bool:
        return bool(self._get("TempComp"))

    @temp_comp.setter
    def temp_comp(self, value: bool) -> None:
        self._put("TempComp", bool(value))

    @property
    def temp_comp_available(self) -> bool:
        return bool(self._get("TempCompAvailable"))

    @property
    def temperature(self) -> float:
        return float(self._get("Temperature"))

    def halt(self) -> None:
        self._call("Halt")

    def move(self, position: int) -> None:
        """Move to ``position`` (absolute) or by ``position`` steps (relative)."""
        self._call("Move", (("Position", int(position)),))
