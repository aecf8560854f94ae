"""Camera facade.

Exposure control and image download use the LONG timeout tier. Members
introduced in interface versions 2 and 3 (gain, offset, readout modes,
sensor information) are gated by the capability tables when the camera
is a local driver of an older version.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

import numpy.typing as npt

from ascom_facade.devices.backends import Backend
from ascom_facade.devices.base import Device
from ascom_facade.devices.telescope import GuideDirection
from ascom_facade.transport import (
    ImageArrayCompression,
    ImageArrayTransferType,
    TimeoutTier,
)
from ascom_facade.types import DeviceType

LONG = TimeoutTier.LONG


class CameraState(IntEnum):
    IDLE = 0
    WAITING = 1
    EXPOSING = 2
    READING = 3
    DOWNLOAD = 4
    ERROR = 5


class SensorType(IntEnum):
    MONOCHROME = 0
    COLOR = 1
    RGGB = 2
    CMYG = 3
    CMYG2 = 4
    LRGB = 5


class Camera(Device):
    """Imaging camera.

    Args:
        backend: Local or remote back end.
        image_transfer: Preferred image transfer mode for remote cameras.
        image_compression: Compression accepted on remote image responses.
    """

    DEVICE_TYPE = DeviceType.CAMERA
    DEVICE_STATE_MEMBERS = (
        "CameraState",
        "CCDTemperature",
        "CoolerPower",
        "HeatSinkTemperature",
        "ImageReady",
        "IsPulseGuiding",
        "PercentCompleted",
    )

    def __init__(
        self,
        backend: Backend,
        image_transfer: ImageArrayTransferType = ImageArrayTransferType.BEST_AVAILABLE,
        image_compression: ImageArrayCompression = ImageArrayCompression.NONE,
    ) -> None:
        super().__init__(backend)
        self.image_transfer = image_transfer
        self.image_compression = image_compression

    # -- sensor ---------------------------------------------------------

    @property
    def camera_x_size(self) -> int:
        return int(self._get("CameraXSize"))

    @property
    def camera_y_size(self) -> int:
        return int(self._get("CameraYSize"))

    @property
    def pixel_size_x(self) -> float:
        return float(self._get("PixelSizeX"))

    @property
    def pixel_size_y(self) -> float:
        return float(self._get("PixelSizeY"))

    @property
    def max_adu(self) -> int:
        return int(self._get("MaxADU"))

    @property
    def electrons_per_adu(self) -> float:
        return float(self._get("ElectronsPerADU"))

    @property
    def full_well_capacity(self) -> float:
        return float(self._get("FullWellCapacity"))

    @property
    def has_shutter(self) -> bool:
        return bool(self._get("HasShutter"))

    @property
    def sensor_name(self) -> str:
        return str(self._get("SensorName"))

    @property
    def sensor_type(self) -> SensorType:
        return SensorType(int(self._get("SensorType")))

    @property
    def bayer_offset_x(self) -> int:
        return int(self._get("BayerOffsetX"))

    @property
    def bayer_offset_y(self) -> int:
        return int(self._get("BayerOffsetY"))

    # -- binning and subframe -------------------------------------------

    @property
    def can_asymmetric_bin(self) -> bool:
        return bool(self._get("CanAsymmetricBin"))

    @property
    def bin_x(self) -> int:
        return int(self._get("BinX"))

    @bin_x.setter
    def bin_x(self, value: int) -> None:
        self._put("BinX", int(value))

    @property
    def bin_y(self) -> int:
        return int(self._get("BinY"))

    @bin_y.setter
    def bin_y(self, value: int) -> None:
        self._put("BinY", int(value))

    @property
    def max_bin_x(self) -> int:
        return int(self._get("MaxBinX"))

    @property
    def max_bin_y(self) -> int:
        return int(self._get("MaxBinY"))

    @property
    def num_x(self) -> int:
        return int(self._get("NumX"))

    @num_x.setter
    def num_x(self, value: int) -> None:
        self._put("NumX", int(value))

    @property
    def num_y(self) -> int:
        return int(self._get("NumY"))

    @num_y.setter
    def num_y(self, value: int) -> None:
        self._put("NumY", int(value))

    @property
    def start_x(self) -> int:
        return int(self._get("StartX"))

    @start_x.setter
    def start_x(self, value: int) -> None:
        self._put("StartX", int(value))

    @property
    def start_y(self) -> int:
        return int(self._get("StartY"))

    @start_y.setter
    def start_y(self, value: int) -> None:
        self._put("StartY", int(value))

    # -- gain, offset, readout -------------------------------------------

    @property
    def gain(self) -> int:
        return int(self._get("Gain"))

    @gain.setter
    def gain(self, value: int) -> None:
        self._put("Gain", int(value))

    @property
    def gain_min(self) -> int:
        return int(self._get("GainMin"))

    @property
    def gain_max(self) -> int:
        return int(self._get("GainMax"))

    @property
    def gains(self) -> list[str]:
        return [str(g) for g in self._get("Gains")]

    @property
    def offset(self) -> int:
        return int(self._get("Offset"))

    @offset.setter
    def offset(self, value: int) -> None:
        self._put("Offset", int(value))

    @property
    def offset_min(self) -> int:
        return int(self._get("OffsetMin"))

    @property
    def offset_max(self) -> int:
        return int(self._get("OffsetMax"))

    @property
    def offsets(self) -> list[str]:
        return [str(o) for o in self._get("Offsets")]

    @property
    def can_fast_readout(self) -> bool:
        return bool(self._get("CanFastReadout"))

    @property
    def fast_readout(self) -> bool:
        return bool(self._get("FastReadout"))

    @fast_readout.setter
    def fast_readout(self, value: bool) -> None:
        self._put("FastReadout", bool(value))

    @property
    def readout_mode(self) -> int:
        return int(self._get("ReadoutMode"))

    @readout_mode.setter
    def readout_mode(self, value: int) -> None:
        self._put("ReadoutMode", int(value))

    @property
    def readout_modes(self) -> list[str]:
        return [str(m) for m in self._get("ReadoutModes")]

    # -- cooling ----------------------------------------------------------

    @property
    def can_get_cooler_power(self) -> bool:
        return bool(self._get("CanGetCoolerPower"))

    @property
    def can_set_ccd_temperature(self) -> bool:
        return bool(self._get("CanSetCCDTemperature"))

    @property
    def ccd_temperature(self) -> float:
        return float(self._get("CCDTemperature"))

    @property
    def heat_sink_temperature(self) -> float:
        return float(self._get("HeatSinkTemperature"))

    @property
    def cooler_on(self) -> bool:
        return bool(self._get("CoolerOn"))

    @cooler_on.setter
    def cooler_on(self, value: bool) -> None:
        self._put("CoolerOn", bool(value))

    @property
    def cooler_power(self) -> float:
        return float(self._get("CoolerPower"))

    @property
    def set_ccd_temperature(self) -> float:
        return float(self._get("SetCCDTemperature"))

    @set_ccd_temperature.setter
    def set_ccd_temperature(self, value: float) -> None:
        self._put("SetCCDTemperature", value)

    # -- exposure ---------------------------------------------------------

    @property
    def camera_state(self) -> CameraState:
        return CameraState(int(self._get("CameraState")))

    @property
    def can_abort_exposure(self) -> bool:
        return bool(self._get("CanAbortExposure"))

    @property
    def can_stop_exposure(self) -> bool:
        return bool(self._get("CanStopExposure"))

    @property
    def exposure_min(self) -> float:
        return float(self._get("ExposureMin"))

    @property
    def exposure_max(self) -> float:
        return float(self._get("ExposureMax"))

    @property
    def exposure_resolution(self) -> float:
        return float(self._get("ExposureResolution"))

    @property
    def sub_exposure_duration(self) -> float:
        return float(self._get("SubExposureDuration"))

    @sub_exposure_duration.setter
    def sub_exposure_duration(self, value: float) -> None:
        self._put("SubExposureDuration", value)

    @property
    def percent_completed(self) -> int:
        return int(self._get("PercentCompleted"))

    @property
    def image_ready(self) -> bool:
        return bool(self._get("ImageReady"))

    @property
    def last_exposure_duration(self) -> float:
        return float(self._get("LastExposureDuration"))

    @property
    def last_exposure_start_time(self) -> str:
        return str(self._get("LastExposureStartTime"))

    def start_exposure(self, duration: float, light: bool = True) -> None:
        """Begin an exposure; poll image_ready for completion."""
        self._call("StartExposure", (("Duration", duration), ("Light", light)), LONG)

    def stop_exposure(self) -> None:
        self._call("StopExposure", tier=LONG)

    def abort_exposure(self) -> None:
        self._call("AbortExposure", tier=LONG)

    @property
    def can_pulse_guide(self) -> bool:
        return bool(self._get("CanPulseGuide"))

    @property
    def is_pulse_guiding(self) -> bool:
        return bool(self._get("IsPulseGuiding"))

    def pulse_guide(self, direction: GuideDirection, duration_ms: int) -> None:
        self._call(
            "PulseGuide", (("Direction", int(direction)), ("Duration", duration_ms))
        )

    # -- image ------------------------------------------------------------

    def image_array(self) -> npt.NDArray[Any]:
        """Download the last image.

        Returns:
            Array indexed ``[x, y]`` for monochrome sensors or
            ``[x, y, plane]`` for colour sensors delivering three planes.
        """
        with self._context("ImageArray"):
            return self.backend.image_array(
                self.image_transfer, self.image_compression
            )

    def image_array_variant(self) -> npt.NDArray[Any]:
        """Download the last image through ImageArrayVariant."""
        with self._context("ImageArrayVariant"):
            return self.backend.image_array(
                self.image_transfer, self.image_compression, "ImageArrayVariant"
            )
