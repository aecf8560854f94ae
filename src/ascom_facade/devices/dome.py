"""Dome facade."""

from __future__ import annotations

from enum import IntEnum

from ascom_facade.devices.base import Device
from ascom_facade.transport import TimeoutTier
from ascom_facade.types import DeviceType

LONG = TimeoutTier.LONG


class ShutterState(IntEnum):
    OPEN = 0
    CLOSED = 1
    OPENING = 2
    CLOSING = 3
    ERROR = 4


class Dome(Device):
    """Observatory dome or roll-off roof.

    Shutter and slew commands return once started; poll
    ``shutter_status`` and ``slewing``.
    """

    DEVICE_TYPE = DeviceType.DOME
    DEVICE_STATE_MEMBERS = (
        "Altitude",
        "AtHome",
        "AtPark",
        "Azimuth",
        "ShutterStatus",
        "Slewing",
    )

    @property
    def altitude(self) -> float:
        return float(self._get("Altitude"))

    @property
    def at_home(self) -> bool:
        return bool(self._get("AtHome"))

    @property
    def at_park(self) -> bool:
        return bool(self._get("AtPark"))

    @property
    def azimuth(self) -> float:
        return float(self._get("Azimuth"))

    @property
    def can_find_home(self) -> bool:
        return bool(self._get("CanFindHome"))

    @property
    def can_park(self) -> bool:
        return bool(self._get("CanPark"))

    @property
    def can_set_altitude(self) -> bool:
        return bool(self._get("CanSetAltitude"))

    @property
    def can_set_azimuth(self) -> bool:
        return bool(self._get("CanSetAzimuth"))

    @property
    def can_set_park(self) -> bool:
        return bool(self._get("CanSetPark"))

    @property
    def can_set_shutter(self) -> bool:
        return bool(self._get("CanSetShutter"))

    @property
    def can_slave(self) -> bool:
        return bool(self._get("CanSlave"))

    @property
    def can_sync_azimuth(self) -> bool:
        return bool(self._get("CanSyncAzimuth"))

    @property
    def shutter_status(self) -> ShutterState:
        return ShutterState(int(self._get("ShutterStatus")))

    @property
    def slaved(self) -> bool:
        return bool(self._get("Slaved"))

    @slaved.setter
    def slaved(self, value: bool) -> None:
        self._put("Slaved", bool(value))

    @property
    def slewing(self) -> bool:
        return bool(self._get("Slewing"))

    def abort_slew(self) -> None:
        self._call("AbortSlew")

    def open_shutter(self) -> None:
        self._call("OpenShutter")

    def close_shutter(self) -> None:
        self._call("CloseShutter")

    def find_home(self) -> None:
        self._call("FindHome", tier=LONG)

    def park(self) -> None:
        self._call("Park", tier=LONG)

    def set_park(self) -> None:
        self._call("SetPark")

    def slew_to_altitude(self, altitude: float) -> None:
        self._call("SlewToAltitude", (("Altitude", altitude),))

    def slew_to_azimuth(self, azimuth: float) -> None:
        self._call("SlewToAzimuth", (("Azimuth", azimuth),))

    def sync_to_azimuth(self, azimuth: float) -> None:
        self._call("SyncToAzimuth", (("Azimuth", azimuth),))
