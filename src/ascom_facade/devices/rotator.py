"""Rotator facade."""

from __future__ import annotations

from ascom_facade.devices.base import Device
from ascom_facade.types import DeviceType


class Rotator(Device):
    """Camera field rotator.

    ``position`` is the sky position angle, offset from the mechanical
    angle by the last sync(). MechanicalPosition, MoveMechanical and Sync
    exist from interface version 3.
    """

    DEVICE_TYPE = DeviceType.ROTATOR
    DEVICE_STATE_MEMBERS = ("IsMoving", "MechanicalPosition", "Position")

    @property
    def can_reverse(self) -> bool:
        return bool(self._get("CanReverse"))

    @property
    def is_moving(self) -> bool:
        return bool(self._get("IsMoving"))

    @property
    def mechanical_position(self) -> float:
        return float(self._get("MechanicalPosition"))

    @property
    def position(self) -> float:
        return float(self._get("Position"))

    @property
    def reverse(self) -> bool:
        return bool(self._get("Reverse"))

    @reverse.setter
    def reverse(self, value: bool) -> None:
        self._put("Reverse", bool(value))

    @property
    def step_size(self) -> float:
        return float(self._get("StepSize"))

    @property
    def target_position(self) -> float:
        return float(self._get("TargetPosition"))

    def halt(self) -> None:
        self._call("Halt")

    def move(self, position: float) -> None:
        """Rotate by ``position`` degrees relative to the current angle."""
        self._call("Move", (("Position", position),))

    def move_absolute(self, position: float) -> None:
        self._call("MoveAbsolute", (("Position", position),))

    def move_mechanical(self, position: float) -> None:
        self._call("MoveMechanical", (("Position", position),))

    def sync(self, position: float) -> None:
        self._call("Sync", (("Position", position),))
