"""Switch facade with boolean/continuous value emulation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ascom_facade.devices.backends import Backend
from ascom_facade.devices.base import Device
from ascom_facade.emulation import SwitchValueEmulator
from ascom_facade.errors import UnsupportedOperation
from ascom_facade.types import DeviceType, StateValue


class _NativeSwitch:
    """Direct switch members, without emulation."""

    def __init__(self, device: Switch) -> None:
        self._device = device

    def get_switch(self, switch_id: int) -> bool:
        return bool(self._device._query("GetSwitch", (("Id", switch_id),)))

    def set_switch(self, switch_id: int, state: bool) -> None:
        self._device._call("SetSwitch", (("Id", switch_id), ("State", state)))

    def get_switch_value(self, switch_id: int) -> float:
        return float(self._device._query("GetSwitchValue", (("Id", switch_id),)))

    def set_switch_value(self, switch_id: int, value: float) -> None:
        self._device._call("SetSwitchValue", (("Id", switch_id), ("Value", value)))

    def min_switch_value(self, switch_id: int) -> float:
        return float(self._device._query("MinSwitchValue", (("Id", switch_id),)))

    def max_switch_value(self, switch_id: int) -> float:
        return float(self._device._query("MaxSwitchValue", (("Id", switch_id),)))

    def switch_step(self, switch_id: int) -> float:
        return float(self._device._query("SwitchStep", (("Id", switch_id),)))


class Switch(Device):
    """A bank of numbered switches, each boolean or multi-valued.

    The continuous accessors (get/set_switch_value, min/max_switch_value,
    switch_step) fall back to the boolean accessors when the back end
    reports them unsupported, presenting a two-state switch as the range
    0.0 to 1.0 with a step of 1.0.
    """

    DEVICE_TYPE = DeviceType.SWITCH

    def __init__(self, backend: Backend) -> None:
        super().__init__(backend)
        self._values = SwitchValueEmulator(_NativeSwitch(self))

    @property
    def max_switch(self) -> int:
        """Number of switches; ids run from 0 to max_switch - 1."""
        return int(self._get("MaxSwitch"))

    def can_write(self, switch_id: int) -> bool:
        return bool(self._query("CanWrite", (("Id", switch_id),)))

    def get_switch(self, switch_id: int) -> bool:
        return self._values.get_switch(switch_id)

    def set_switch(self, switch_id: int, state: bool) -> None:
        self._values.set_switch(switch_id, state)

    def get_switch_name(self, switch_id: int) -> str:
        return str(self._query("GetSwitchName", (("Id", switch_id),)))

    def set_switch_name(self, switch_id: int, name: str) -> None:
        self._call("SetSwitchName", (("Id", switch_id), ("Name", name)))

    def get_switch_description(self, switch_id: int) -> str:
        return str(self._query("GetSwitchDescription", (("Id", switch_id),)))

    def get_switch_value(self, switch_id: int) -> float:
        return self._values.get_switch_value(switch_id)

    def set_switch_value(self, switch_id: int, value: float) -> None:
        self._values.set_switch_value(switch_id, value)

    def min_switch_value(self, switch_id: int) -> float:
        return self._values.min_switch_value(switch_id)

    def max_switch_value(self, switch_id: int) -> float:
        return self._values.max_switch_value(switch_id)

    def switch_step(self, switch_id: int) -> float:
        return self._values.switch_step(switch_id)

    # -- asynchronous members (interface version 3) -----------------------

    def can_async(self, switch_id: int) -> bool:
        return bool(self._query("CanAsync", (("Id", switch_id),)))

    def set_async(self, switch_id: int, state: bool) -> None:
        self._call("SetAsync", (("Id", switch_id), ("State", state)))

    def set_async_value(self, switch_id: int, value: float) -> None:
        self._call("SetAsyncValue", (("Id", switch_id), ("Value", value)))

    def state_change_complete(self, switch_id: int) -> bool:
        return bool(self._query("StateChangeComplete", (("Id", switch_id),)))

    def cancel_async(self, switch_id: int) -> None:
        self._call("CancelAsync", (("Id", switch_id),))

    def _emulated_device_state(self) -> list[StateValue]:
        state: list[StateValue] = []
        for switch_id in range(self.max_switch):
            entries: list[tuple[str, Any]] = [
                (f"GetSwitch{switch_id}", self.get_switch),
                (f"GetSwitchValue{switch_id}", self.get_switch_value),
            ]
            for name, read in entries:
                try:
                    state.append(StateValue(name, read(switch_id)))
                except UnsupportedOperation:
                    continue
        state.append(StateValue("TimeStamp", datetime.now(UTC)))
        return state
