"""Device facades - one class per instrument type over a local or remote back end."""

from ascom_facade.devices.backends import Backend, LocalBackend, RemoteBackend
from ascom_facade.devices.base import Device, format_utc, parse_utc
from ascom_facade.devices.camera import Camera, CameraState, SensorType
from ascom_facade.devices.covercalibrator import CoverCalibrator
from ascom_facade.devices.dome import Dome, ShutterState
from ascom_facade.devices.filterwheel import FilterWheel
from ascom_facade.devices.focuser import Focuser
from ascom_facade.devices.observingconditions import ObservingConditions
from ascom_facade.devices.rotator import Rotator
from ascom_facade.devices.safetymonitor import SafetyMonitor
from ascom_facade.devices.switch import Switch
from ascom_facade.devices.telescope import (
    AlignmentMode,
    EquatorialCoordinateType,
    GuideDirection,
    PierSide,
    Telescope,
    TelescopeAxis,
)
from ascom_facade.types import DeviceType

#: Facade class for each device type that has one.
DEVICE_CLASSES: dict[DeviceType, type[Device]] = {
    DeviceType.CAMERA: Camera,
    DeviceType.COVER_CALIBRATOR: CoverCalibrator,
    DeviceType.DOME: Dome,
    DeviceType.FILTER_WHEEL: FilterWheel,
    DeviceType.FOCUSER: Focuser,
    DeviceType.OBSERVING_CONDITIONS: ObservingConditions,
    DeviceType.ROTATOR: Rotator,
    DeviceType.SAFETY_MONITOR: SafetyMonitor,
    DeviceType.SWITCH: Switch,
    DeviceType.TELESCOPE: Telescope,
}

__all__ = [
    # Back ends
    "Backend",
    "LocalBackend",
    "RemoteBackend",
    # Base
    "Device",
    "DEVICE_CLASSES",
    "format_utc",
    "parse_utc",
    # Facades
    "Camera",
    "CoverCalibrator",
    "Dome",
    "FilterWheel",
    "Focuser",
    "ObservingConditions",
    "Rotator",
    "SafetyMonitor",
    "Switch",
    "Telescope",
    # Enums
    "AlignmentMode",
    "CameraState",
    "EquatorialCoordinateType",
    "GuideDirection",
    "PierSide",
    "SensorType",
    "ShutterState",
    "TelescopeAxis",
]
