"""Filter wheel facade."""

from __future__ import annotations

from ascom_facade.devices.base import Device
from ascom_facade.types import DeviceType

#: Position reported while the wheel is moving.
MOVING_POSITION = -1


class FilterWheel(Device):
    DEVICE_TYPE = DeviceType.FILTER_WHEEL
    DEVICE_STATE_MEMBERS = ("Position",)

    @property
    def focus_offsets(self) -> list[int]:
        return [int(offset) for offset in self._get("FocusOffsets")]

    @property
    def names(self) -> list[str]:
        return [str(name) for name in self._get("Names")]

    @property
    def position(self) -> int:
        """Current slot (0-based), or MOVING_POSITION while moving."""
        return int(self._get("Position"))

    @position.setter
    def position(self, value: int) -> None:
        self._put("Position", int(value))
