"""Cover calibrator facade.

CoverMoving and CalibratorChanging were added in interface version 2.
For older devices they are derived from CoverState and CalibratorState
by CoverCalibratorEmulator.
"""

from __future__ import annotations

from ascom_facade.devices.backends import Backend
from ascom_facade.devices.base import Device
from ascom_facade.emulation import (
    CalibratorStatus,
    CoverCalibratorEmulator,
    CoverStatus,
)
from ascom_facade.transport import TimeoutTier
from ascom_facade.types import DeviceType


class CoverCalibrator(Device):
    """Telescope dust cover with an optional flat-field light source."""

    DEVICE_TYPE = DeviceType.COVER_CALIBRATOR
    DEVICE_STATE_MEMBERS = (
        "Brightness",
        "CalibratorState",
        "CoverState",
    )

    def __init__(self, backend: Backend) -> None:
        super().__init__(backend)
        self._emulator = CoverCalibratorEmulator(self)

    @property
    def brightness(self) -> int:
        return int(self._get("Brightness"))

    @property
    def max_brightness(self) -> int:
        return int(self._get("MaxBrightness"))

    @property
    def calibrator_state(self) -> CalibratorStatus:
        return CalibratorStatus(int(self._get("CalibratorState")))

    @property
    def cover_state(self) -> CoverStatus:
        return CoverStatus(int(self._get("CoverState")))

    def native_calibrator_changing(self) -> bool:
        return bool(self._get("CalibratorChanging"))

    def native_cover_moving(self) -> bool:
        return bool(self._get("CoverMoving"))

    @property
    def calibrator_changing(self) -> bool:
        """True while the light source is warming up or changing brightness."""
        return self._emulator.calibrator_changing()

    @property
    def cover_moving(self) -> bool:
        """True while the cover is opening or closing."""
        return self._emulator.cover_moving()

    def calibrator_on(self, brightness: int) -> None:
        self._call("CalibratorOn", (("Brightness", int(brightness)),))

    def calibrator_off(self) -> None:
        self._call("CalibratorOff")

    def open_cover(self) -> None:
        self._call("OpenCover", tier=TimeoutTier.LONG)

    def close_cover(self) -> None:
        self._call("CloseCover", tier=TimeoutTier.LONG)

    def halt_cover(self) -> None:
        self._call("HaltCover")
