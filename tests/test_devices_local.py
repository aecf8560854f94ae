"""Tests for the device facades over local driver handles.

Drivers are tests.helpers.FakeDriver instances; members are resolved by
name the same way a late-bound driver object is.

Test Categories:
    - Back end protocol compliance and construction
    - Version-gated members through the facade
    - Connect/DeviceState fallbacks
    - Switch and cover calibrator emulation
    - Telescope rate collections and dates
"""

from __future__ import annotations

from datetime import UTC, datetime

import numpy as np
import pytest

from ascom_facade.capabilities import CapabilityShim
from ascom_facade.devices import (
    Backend,
    Camera,
    CameraState,
    CoverCalibrator,
    Dome,
    FilterWheel,
    Focuser,
    LocalBackend,
    ObservingConditions,
    Rotator,
    SafetyMonitor,
    ShutterState,
    Switch,
    Telescope,
    TelescopeAxis,
)
from ascom_facade.emulation import CalibratorStatus, CoverStatus
from ascom_facade.errors import DriverFailure, InvalidState, UnsupportedOperation
from ascom_facade.ordinal import DriveRate, IndexOutOfRange, Rate
from ascom_facade.types import DeviceType, StateValue
from tests.helpers import FakeDriver, assert_implements_protocol

# =========================================================================
# Back end
# =========================================================================


class TestLocalBackend:
    """LocalBackend construction and protocol."""

    def test_implements_backend_protocol(self) -> None:
        """LocalBackend satisfies Backend."""
        backend = LocalBackend.for_driver(DeviceType.FOCUSER, FakeDriver())
        assert_implements_protocol(backend, Backend)
        assert backend.manages_connection_locally is False

    def test_log_fields(self) -> None:
        """Log fields name the device type and driver class."""
        backend = LocalBackend(CapabilityShim(FakeDriver(), DeviceType.DOME))
        assert backend.log_fields == {
            "device_type": "Dome",
            "backend": "local",
            "driver": "FakeDriver",
        }

    def test_wrong_device_type_rejected(self) -> None:
        """A facade refuses a back end of another device type."""
        backend = LocalBackend.for_driver(DeviceType.FOCUSER, FakeDriver())
        with pytest.raises(ValueError, match="Camera"):
            Camera(backend)

    def test_property_write_takes_one_value(self) -> None:
        """Property writes carry exactly one parameter."""
        backend = LocalBackend.for_driver(DeviceType.FOCUSER, FakeDriver())
        with pytest.raises(ValueError):
            backend.write("TempComp", ())


# =========================================================================
# Identity and version gating
# =========================================================================


class TestVersionGatedMembers:
    """Members older drivers lack, seen through the facades."""

    def test_v1_camera_identity_defaults(self) -> None:
        """A V1 camera has empty identity strings and no actions."""
        driver = FakeDriver(Name="should not be read")
        camera = Camera.local(driver)
        assert camera.interface_version == 1
        assert camera.name == ""
        assert camera.supported_actions == []
        assert camera.can_fast_readout is False
        assert not driver.touched("Name")

    def test_v1_camera_gain_unsupported(self) -> None:
        """Gain arrived in version 2."""
        driver = FakeDriver(Gain=100)
        with pytest.raises(UnsupportedOperation):
            Camera.local(driver).gain = 120
        assert driver.members["Gain"] == 100

    def test_v3_camera_members(self) -> None:
        """Later cameras pass straight through."""
        driver = FakeDriver(
            InterfaceVersion=3, Gain=100, Offset=20, CameraState=2, BinX=1
        )
        camera = Camera.local(driver)
        camera.gain = 150
        assert camera.gain == 150
        assert camera.offset == 20
        assert camera.camera_state is CameraState.EXPOSING
        camera.bin_x = 2
        assert driver.members["BinX"] == 2

    def test_camera_sensor_and_cooling_members(self) -> None:
        """Sensor, shutter and cooling capabilities read through."""
        driver = FakeDriver(
            InterfaceVersion=3,
            CanAsymmetricBin=True,
            CanGetCoolerPower=False,
            CanPulseGuide=True,
            CanSetCCDTemperature=True,
            ElectronsPerADU=1.5,
            FullWellCapacity=50000,
            HasShutter=False,
            HeatSinkTemperature=21,
        )
        camera = Camera.local(driver)
        assert camera.can_asymmetric_bin is True
        assert camera.can_get_cooler_power is False
        assert camera.can_pulse_guide is True
        assert camera.can_set_ccd_temperature is True
        assert camera.electrons_per_adu == 1.5
        assert camera.full_well_capacity == 50000.0
        assert isinstance(camera.full_well_capacity, float)
        assert camera.has_shutter is False
        assert camera.heat_sink_temperature == 21.0

    def test_camera_emulated_state_includes_heat_sink(self) -> None:
        """A V3 camera's state snapshot carries HeatSinkTemperature."""
        driver = FakeDriver(
            InterfaceVersion=3,
            CameraState=0,
            CCDTemperature=-10.0,
            HeatSinkTemperature=18.5,
            ImageReady=False,
            IsPulseGuiding=False,
            PercentCompleted=0,
        )
        state = Camera.local(driver).device_state
        names = [item.name for item in state]
        assert "HeatSinkTemperature" in names
        assert "CoolerPower" not in names
        assert StateValue("HeatSinkTemperature", 18.5) in state

    def test_camera_exposure_methods(self) -> None:
        """Method parameters are passed positionally."""
        exposures: list[tuple[float, bool]] = []
        driver = FakeDriver(
            InterfaceVersion=3,
            StartExposure=lambda duration, light: exposures.append((duration, light)),
        )
        Camera.local(driver).start_exposure(2.5, light=False)
        assert exposures == [(2.5, False)]

    def test_camera_image_array(self) -> None:
        """Local images are returned as arrays."""
        driver = FakeDriver(InterfaceVersion=3, ImageArray=[[1, 2], [3, 4]])
        image = Camera.local(driver).image_array()
        assert isinstance(image, np.ndarray)
        assert image.shape == (2, 2)

    def test_rotator_move_mechanical_gated(self) -> None:
        """MoveMechanical arrived in rotator version 3."""
        rotator = Rotator.local(FakeDriver(InterfaceVersion=2))
        with pytest.raises(UnsupportedOperation):
            rotator.move_mechanical(45.0)

    def test_driver_errors_reach_caller(self) -> None:
        """Driver failures surface as taxonomy errors."""

        class ParkedError(Exception):
            hresult = 0x80040408

        driver = FakeDriver(InterfaceVersion=3, AbortSlew=ParkedError("parked"))
        with pytest.raises(InvalidState):
            Telescope.local(driver).abort_slew()


# =========================================================================
# Connection
# =========================================================================


class TestConnection:
    """Connected, Connect() and DeviceState on local drivers."""

    def test_v1_focuser_connected_via_link(self) -> None:
        """Focuser V1 drivers use Link for Connected."""
        driver = FakeDriver(Link=False)
        focuser = Focuser.local(driver)
        focuser.connected = True
        assert driver.members["Link"] is True
        assert focuser.connected is True

    def test_connect_falls_back_to_connected(self) -> None:
        """Before version 4 a camera connects through Connected."""
        driver = FakeDriver(InterfaceVersion=3, Connected=False)
        camera = Camera.local(driver)
        camera.connect()
        assert driver.members["Connected"] is True
        assert camera.connecting is False
        camera.disconnect()
        assert driver.members["Connected"] is False
        assert not driver.touched("Connect")

    def test_native_connect(self) -> None:
        """Version 4 cameras use Connect() and Connecting."""
        calls: list[str] = []
        driver = FakeDriver(
            InterfaceVersion=4,
            Connect=lambda: calls.append("connect"),
            Disconnect=lambda: calls.append("disconnect"),
            Connecting=True,
        )
        camera = Camera.local(driver)
        camera.connect()
        assert camera.connecting is True
        camera.disconnect()
        assert calls == ["connect", "disconnect"]
        assert not driver.touched("Connected")

    def test_emulated_device_state(self) -> None:
        """Older devices get DeviceState assembled from their properties."""
        driver = FakeDriver(InterfaceVersion=3, IsMoving=False, Position=1200)
        state = Focuser.local(driver).device_state
        names = [item.name for item in state]
        assert names == ["IsMoving", "Position", "TimeStamp"]
        assert state[1].value == 1200
        assert isinstance(state[-1].value, datetime)
        assert not driver.touched("DeviceState")

    def test_native_device_state(self) -> None:
        """Devices above the threshold return their own DeviceState."""
        native = [StateValue("Position", 3)]
        driver = FakeDriver(InterfaceVersion=3, DeviceState=native)
        assert FilterWheel.local(driver).device_state == native

    def test_safety_monitor_state(self) -> None:
        """A V1 safety monitor reports IsSafe and a time stamp."""
        monitor = SafetyMonitor.local(FakeDriver(IsSafe=True))
        assert monitor.is_safe is True
        state = monitor.device_state
        assert state[0] == StateValue("IsSafe", True)
        assert state[-1].name == "TimeStamp"


# =========================================================================
# Emulation through the facades
# =========================================================================


class TestSwitchFacade:
    """Boolean switches expose the continuous accessors."""

    @pytest.fixture
    def switch(self) -> tuple[Switch, FakeDriver]:
        """Two-switch bank implementing only GetSwitch/SetSwitch."""
        states = {0: False, 1: True}
        driver = FakeDriver(
            InterfaceVersion=2,
            MaxSwitch=2,
            GetSwitch=states.__getitem__,
            SetSwitch=states.__setitem__,
            GetSwitchValue=NotImplementedError("boolean only"),
            SetSwitchValue=NotImplementedError("boolean only"),
        )
        return Switch.local(driver), driver

    def test_set_value_switches_on(self, switch: tuple[Switch, FakeDriver]) -> None:
        """0.7 turns the switch on and reads back as 1.0."""
        facade, _ = switch
        facade.set_switch_value(0, 0.7)
        assert facade.get_switch(0) is True
        assert facade.get_switch_value(0) == 1.0

    def test_range(self, switch: tuple[Switch, FakeDriver]) -> None:
        """Missing range members present 0.0 to 1.0 in steps of 1.0."""
        facade, _ = switch
        assert facade.min_switch_value(1) == 0.0
        assert facade.max_switch_value(1) == 1.0
        assert facade.switch_step(1) == 1.0

    def test_async_gated(self, switch: tuple[Switch, FakeDriver]) -> None:
        """Asynchronous members need version 3."""
        facade, _ = switch
        with pytest.raises(UnsupportedOperation):
            facade.set_async(0, True)

    def test_value_fault_not_emulated(self) -> None:
        """A fault inside GetSwitchValue propagates instead of falling back."""

        class Hardware:
            pass

        hardware = Hardware()

        def get_switch_value(switch_id: int) -> float:
            return float(hardware.read(switch_id))  # type: ignore[attr-defined]

        driver = FakeDriver(
            InterfaceVersion=2,
            MaxSwitch=1,
            GetSwitch=lambda switch_id: False,
            GetSwitchValue=get_switch_value,
        )
        with pytest.raises(DriverFailure) as info:
            Switch.local(driver).get_switch_value(0)
        assert not isinstance(info.value, UnsupportedOperation)
        assert not driver.touched("GetSwitch")

    def test_device_state(self, switch: tuple[Switch, FakeDriver]) -> None:
        """Emulated DeviceState lists each switch and its value."""
        facade, _ = switch
        names = [item.name for item in facade.device_state]
        assert names == [
            "GetSwitch0",
            "GetSwitchValue0",
            "GetSwitch1",
            "GetSwitchValue1",
            "TimeStamp",
        ]


class TestCoverCalibratorFacade:
    """CoverMoving and CalibratorChanging on version 1 devices."""

    def test_emulated_from_state(self) -> None:
        """Derived from CoverState and CalibratorState."""
        driver = FakeDriver(
            CoverState=int(CoverStatus.MOVING),
            CalibratorState=int(CalibratorStatus.READY),
            CoverMoving=False,
        )
        device = CoverCalibrator.local(driver)
        assert device.cover_moving is True
        assert device.calibrator_changing is False
        assert not driver.touched("CoverMoving")

    def test_native_on_v2(self) -> None:
        """Version 2 devices report the members themselves."""
        driver = FakeDriver(
            InterfaceVersion=2,
            CoverMoving=True,
            CalibratorChanging=False,
            CoverState=int(CoverStatus.OPEN),
        )
        device = CoverCalibrator.local(driver)
        assert device.cover_moving is True
        assert not driver.touched("CoverState")

    def test_calibrator_on(self) -> None:
        """CalibratorOn passes the brightness."""
        levels: list[int] = []
        driver = FakeDriver(InterfaceVersion=2, CalibratorOn=levels.append)
        CoverCalibrator.local(driver).calibrator_on(128)
        assert levels == [128]


# =========================================================================
# Telescope
# =========================================================================


class TestTelescopeFacade:
    """Rate collections, dates and coordinates."""

    def test_tracking_rates(self) -> None:
        """TrackingRates is a 1-based collection."""
        driver = FakeDriver(InterfaceVersion=3, TrackingRates=[0, 2])
        rates = Telescope.local(driver).tracking_rates
        assert rates.count == 2
        assert rates.item(2) is DriveRate.SOLAR
        with pytest.raises(IndexOutOfRange):
            rates.item(0)

    def test_axis_rates(self) -> None:
        """AxisRates is queried per axis."""
        axes: list[int] = []

        def axis_rates(axis: int) -> list[dict[str, float]]:
            axes.append(axis)
            return [{"Minimum": 0.0, "Maximum": 2.0}]

        driver = FakeDriver(InterfaceVersion=3, AxisRates=axis_rates)
        rates = Telescope.local(driver).axis_rates(TelescopeAxis.SECONDARY)
        assert rates.item(1) == Rate(0.0, 2.0)
        assert axes == [1]

    def test_utc_date(self) -> None:
        """Naive driver datetimes are UTC; writes pass datetimes through."""
        driver = FakeDriver(InterfaceVersion=3, UTCDate=datetime(2024, 3, 1, 22, 0))
        telescope = Telescope.local(driver)
        assert telescope.utc_date == datetime(2024, 3, 1, 22, 0, tzinfo=UTC)
        stamp = datetime(2025, 1, 1, tzinfo=UTC)
        telescope.utc_date = stamp
        assert driver.members["UTCDate"] == stamp

    def test_v1_can_park_default(self) -> None:
        """CanPark is False on V1 mounts."""
        assert Telescope.local(FakeDriver()).can_park is False

    def test_slew_to_coordinates(self) -> None:
        """Coordinates are passed in declaration order."""
        targets: list[tuple[float, float]] = []
        driver = FakeDriver(
            InterfaceVersion=3,
            SlewToCoordinates=lambda ra, dec: targets.append((ra, dec)),
        )
        Telescope.local(driver).slew_to_coordinates(5.5, -5.4)
        assert targets == [(5.5, -5.4)]

    def test_rate_offsets_and_refraction(self) -> None:
        """Tracking offsets, refraction and settle time are read and written."""
        driver = FakeDriver(
            InterfaceVersion=3,
            CanSetDeclinationRate=True,
            CanSetRightAscensionRate=False,
            CanSlewAltAzAsync=True,
            CanSyncAltAz=False,
            DeclinationRate=0.0,
            RightAscensionRate=0.0,
            DoesRefraction=False,
            SlewSettleTime=0,
        )
        telescope = Telescope.local(driver)
        assert telescope.can_set_declination_rate is True
        assert telescope.can_set_right_ascension_rate is False
        assert telescope.can_slew_alt_az_async is True
        assert telescope.can_sync_alt_az is False
        telescope.declination_rate = 1.25
        telescope.right_ascension_rate = -0.5
        telescope.does_refraction = True
        telescope.slew_settle_time = 5
        assert driver.members["DeclinationRate"] == 1.25
        assert driver.members["RightAscensionRate"] == -0.5
        assert telescope.does_refraction is True
        assert telescope.slew_settle_time == 5


class TestDomeFacade:
    """Dome shutter and slaving."""

    def test_shutter_and_slaved(self) -> None:
        """Shutter status maps to ShutterState; Slaved is writable."""
        driver = FakeDriver(InterfaceVersion=2, ShutterStatus=1, Slaved=False)
        dome = Dome.local(driver)
        assert dome.shutter_status is ShutterState.CLOSED
        dome.slaved = True
        assert driver.members["Slaved"] is True


class TestObservingConditionsFacade:
    """Weather station sensors and metadata."""

    def test_sensors(self) -> None:
        """Sensor readings are floats."""
        driver = FakeDriver(Temperature=4, Humidity=81.5, WindSpeed=3.2)
        station = ObservingConditions.local(driver)
        assert station.temperature == 4.0
        assert isinstance(station.temperature, float)
        assert station.humidity == 81.5
        assert station.wind_speed == 3.2

    def test_missing_sensor_unsupported(self) -> None:
        """Sensors the station lacks raise UnsupportedOperation."""
        station = ObservingConditions.local(FakeDriver(Temperature=4.0))
        with pytest.raises(UnsupportedOperation):
            _ = station.sky_quality

    def test_average_period(self) -> None:
        driver = FakeDriver(AveragePeriod=0.0)
        station = ObservingConditions.local(driver)
        station.average_period = 0.25
        assert driver.members["AveragePeriod"] == 0.25
        assert station.average_period == 0.25

    def test_sensor_metadata(self) -> None:
        """SensorDescription and TimeSinceLastUpdate take the sensor name."""
        asked: list[str] = []

        def describe(name: str) -> str:
            asked.append(name)
            return "Boltwood cloud sensor"

        driver = FakeDriver(
            SensorDescription=describe,
            TimeSinceLastUpdate=lambda name: 12 if name else 3,
        )
        station = ObservingConditions.local(driver)
        assert station.sensor_description("CloudCover") == "Boltwood cloud sensor"
        assert asked == ["CloudCover"]
        assert station.time_since_last_update("CloudCover") == 12.0
        assert station.time_since_last_update() == 3.0

    def test_refresh(self) -> None:
        calls: list[str] = []
        driver = FakeDriver(Refresh=lambda: calls.append("refresh"))
        ObservingConditions.local(driver).refresh()
        assert calls == ["refresh"]

    def test_emulated_state_skips_missing_sensors(self) -> None:
        """Only the sensors the station implements appear in DeviceState."""
        driver = FakeDriver(Pressure=1013.0, Temperature=6.5)
        state = ObservingConditions.local(driver).device_state
        names = [item.name for item in state]
        assert names == ["Pressure", "Temperature", "TimeStamp"]
        assert not driver.touched("DeviceState")
