"""Telescope (mount) facade."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from ascom_facade.devices.backends import RemoteBackend
from ascom_facade.devices.base import Device, format_utc, parse_utc
from ascom_facade.ordinal import AxisRates, DriveRate, TrackingRates
from ascom_facade.transport import TimeoutTier
from ascom_facade.types import DeviceType

LONG = TimeoutTier.LONG


class AlignmentMode(IntEnum):
    ALT_AZ = 0
    POLAR = 1
    GERMAN_POLAR = 2


class EquatorialCoordinateType(IntEnum):
    OTHER = 0
    TOPOCENTRIC = 1
    J2000 = 2
    J2050 = 3
    B1950 = 4


class PierSide(IntEnum):
    UNKNOWN = -1
    EAST = 0
    WEST = 1


class TelescopeAxis(IntEnum):
    PRIMARY = 0
    SECONDARY = 1
    TERTIARY = 2


class GuideDirection(IntEnum):
    NORTH = 0
    SOUTH = 1
    EAST = 2
    WEST = 3


class Telescope(Device):
    """Equatorial or alt-az mount.

    Synchronous slews, parking and homing block on the device and use the
    LONG timeout tier; their Async variants return immediately and the
    caller polls ``slewing``.
    """

    DEVICE_TYPE = DeviceType.TELESCOPE
    DEVICE_STATE_MEMBERS = (
        "Altitude",
        "AtHome",
        "AtPark",
        "Azimuth",
        "Declination",
        "IsPulseGuiding",
        "RightAscension",
        "SideOfPier",
        "SiderealTime",
        "Slewing",
        "Tracking",
        "UTCDate",
    )

    # -- configuration --------------------------------------------------

    @property
    def alignment_mode(self) -> AlignmentMode:
        return AlignmentMode(int(self._get("AlignmentMode")))

    @property
    def aperture_area(self) -> float:
        return float(self._get("ApertureArea"))

    @property
    def aperture_diameter(self) -> float:
        return float(self._get("ApertureDiameter"))

    @property
    def focal_length(self) -> float:
        return float(self._get("FocalLength"))

    @property
    def equatorial_system(self) -> EquatorialCoordinateType:
        return EquatorialCoordinateType(int(self._get("EquatorialSystem")))

    @property
    def site_elevation(self) -> float:
        return float(self._get("SiteElevation"))

    @site_elevation.setter
    def site_elevation(self, value: float) -> None:
        self._put("SiteElevation", value)

    @property
    def site_latitude(self) -> float:
        return float(self._get("SiteLatitude"))

    @site_latitude.setter
    def site_latitude(self, value: float) -> None:
        self._put("SiteLatitude", value)

    @property
    def site_longitude(self) -> float:
        return float(self._get("SiteLongitude"))

    @site_longitude.setter
    def site_longitude(self, value: float) -> None:
        self._put("SiteLongitude", value)

    # -- capabilities ---------------------------------------------------

    @property
    def can_find_home(self) -> bool:
        return bool(self._get("CanFindHome"))

    @property
    def can_park(self) -> bool:
        return bool(self._get("CanPark"))

    @property
    def can_unpark(self) -> bool:
        return bool(self._get("CanUnpark"))

    @property
    def can_set_park(self) -> bool:
        return bool(self._get("CanSetPark"))

    @property
    def can_set_pier_side(self) -> bool:
        return bool(self._get("CanSetPierSide"))

    @property
    def can_set_guide_rates(self) -> bool:
        return bool(self._get("CanSetGuideRates"))

    @property
    def can_set_tracking(self) -> bool:
        return bool(self._get("CanSetTracking"))

    @property
    def can_set_declination_rate(self) -> bool:
        return bool(self._get("CanSetDeclinationRate"))

    @property
    def can_set_right_ascension_rate(self) -> bool:
        return bool(self._get("CanSetRightAscensionRate"))

    @property
    def can_pulse_guide(self) -> bool:
        return bool(self._get("CanPulseGuide"))

    @property
    def can_slew(self) -> bool:
        return bool(self._get("CanSlew"))

    @property
    def can_slew_async(self) -> bool:
        return bool(self._get("CanSlewAsync"))

    @property
    def can_slew_alt_az(self) -> bool:
        return bool(self._get("CanSlewAltAz"))

    @property
    def can_slew_alt_az_async(self) -> bool:
        return bool(self._get("CanSlewAltAzAsync"))

    @property
    def can_sync(self) -> bool:
        return bool(self._get("CanSync"))

    @property
    def can_sync_alt_az(self) -> bool:
        return bool(self._get("CanSyncAltAz"))

    def can_move_axis(self, axis: TelescopeAxis) -> bool:
        return bool(self._query("CanMoveAxis", (("Axis", int(axis)),)))

    # -- position and state -----------------------------------------------

    @property
    def altitude(self) -> float:
        return float(self._get("Altitude"))

    @property
    def azimuth(self) -> float:
        return float(self._get("Azimuth"))

    @property
    def right_ascension(self) -> float:
        return float(self._get("RightAscension"))

    @property
    def declination(self) -> float:
        return float(self._get("Declination"))

    @property
    def sidereal_time(self) -> float:
        return float(self._get("SiderealTime"))

    @property
    def at_home(self) -> bool:
        return bool(self._get("AtHome"))

    @property
    def at_park(self) -> bool:
        return bool(self._get("AtPark"))

    @property
    def slewing(self) -> bool:
        return bool(self._get("Slewing"))

    @property
    def is_pulse_guiding(self) -> bool:
        return bool(self._get("IsPulseGuiding"))

    @property
    def side_of_pier(self) -> PierSide:
        return PierSide(int(self._get("SideOfPier")))

    @side_of_pier.setter
    def side_of_pier(self, value: PierSide) -> None:
        self._put("SideOfPier", int(value), LONG)

    def destination_side_of_pier(
        self, right_ascension: float, declination: float
    ) -> PierSide:
        return PierSide(
            int(
                self._query(
                    "DestinationSideOfPier",
                    (("RightAscension", right_ascension), ("Declination", declination)),
                )
            )
        )

    @property
    def utc_date(self) -> datetime:
        return parse_utc(self._get("UTCDate"))

    @utc_date.setter
    def utc_date(self, value: datetime) -> None:
        if isinstance(self.backend, RemoteBackend):
            self._put("UTCDate", format_utc(value))
        else:
            self._put("UTCDate", value)

    # -- tracking -------------------------------------------------------

    @property
    def tracking(self) -> bool:
        return bool(self._get("Tracking"))

    @tracking.setter
    def tracking(self, value: bool) -> None:
        self._put("Tracking", bool(value))

    @property
    def tracking_rate(self) -> DriveRate:
        return DriveRate(int(self._get("TrackingRate")))

    @tracking_rate.setter
    def tracking_rate(self, value: DriveRate) -> None:
        self._put("TrackingRate", int(value))

    @property
    def tracking_rates(self) -> TrackingRates:
        """Supported tracking rates; unknown values from the device are skipped."""
        return TrackingRates.from_values(self._get("TrackingRates") or [])

    def axis_rates(self, axis: TelescopeAxis) -> AxisRates:
        """Supported MoveAxis rate ranges for an axis."""
        return AxisRates.from_values(
            self._query("AxisRates", (("Axis", int(axis)),)) or [],
            strict_casing=self.backend.strict_casing,
        )

    @property
    def guide_rate_declination(self) -> float:
        return float(self._get("GuideRateDeclination"))

    @guide_rate_declination.setter
    def guide_rate_declination(self, value: float) -> None:
        self._put("GuideRateDeclination", value)

    @property
    def guide_rate_right_ascension(self) -> float:
        return float(self._get("GuideRateRightAscension"))

    @guide_rate_right_ascension.setter
    def guide_rate_right_ascension(self, value: float) -> None:
        self._put("GuideRateRightAscension", value)

    @property
    def declination_rate(self) -> float:
        """Declination tracking offset in arcseconds per SI second."""
        return float(self._get("DeclinationRate"))

    @declination_rate.setter
    def declination_rate(self, value: float) -> None:
        self._put("DeclinationRate", value)

    @property
    def right_ascension_rate(self) -> float:
        """Right ascension tracking offset in seconds of RA per sidereal second."""
        return float(self._get("RightAscensionRate"))

    @right_ascension_rate.setter
    def right_ascension_rate(self, value: float) -> None:
        self._put("RightAscensionRate", value)

    @property
    def does_refraction(self) -> bool:
        return bool(self._get("DoesRefraction"))

    @does_refraction.setter
    def does_refraction(self, value: bool) -> None:
        self._put("DoesRefraction", bool(value))

    @property
    def slew_settle_time(self) -> int:
        """Extra seconds Slewing stays True after a slew completes."""
        return int(self._get("SlewSettleTime"))

    @slew_settle_time.setter
    def slew_settle_time(self, value: int) -> None:
        self._put("SlewSettleTime", int(value))

    # -- targets ------------------------------------------------------------

    @property
    def target_right_ascension(self) -> float:
        return float(self._get("TargetRightAscension"))

    @target_right_ascension.setter
    def target_right_ascension(self, value: float) -> None:
        self._put("TargetRightAscension", value)

    @property
    def target_declination(self) -> float:
        return float(self._get("TargetDeclination"))

    @target_declination.setter
    def target_declination(self, value: float) -> None:
        self._put("TargetDeclination", value)

    # -- motion -------------------------------------------------------------

    def abort_slew(self) -> None:
        self._call("AbortSlew")

    def move_axis(self, axis: TelescopeAxis, rate: float) -> None:
        self._call("MoveAxis", (("Axis", int(axis)), ("Rate", rate)))

    def pulse_guide(self, direction: GuideDirection, duration_ms: int) -> None:
        self._call(
            "PulseGuide", (("Direction", int(direction)), ("Duration", duration_ms))
        )

    def find_home(self) -> None:
        self._call("FindHome", tier=LONG)

    def park(self) -> None:
        self._call("Park", tier=LONG)

    def unpark(self) -> None:
        self._call("Unpark", tier=LONG)

    def set_park(self) -> None:
        self._call("SetPark")

    def slew_to_coordinates(self, right_ascension: float, declination: float) -> None:
        self._call(
            "SlewToCoordinates",
            (("RightAscension", right_ascension), ("Declination", declination)),
            LONG,
        )

    def slew_to_coordinates_async(
        self, right_ascension: float, declination: float
    ) -> None:
        self._call(
            "SlewToCoordinatesAsync",
            (("RightAscension", right_ascension), ("Declination", declination)),
        )

    def slew_to_alt_az(self, azimuth: float, altitude: float) -> None:
        self._call(
            "SlewToAltAz", (("Azimuth", azimuth), ("Altitude", altitude)), LONG
        )

    def slew_to_alt_az_async(self, azimuth: float, altitude: float) -> None:
        self._call("SlewToAltAzAsync", (("Azimuth", azimuth), ("Altitude", altitude)))

    def slew_to_target(self) -> None:
        self._call("SlewToTarget", tier=LONG)

    def slew_to_target_async(self) -> None:
        self._call("SlewToTargetAsync")

    def sync_to_coordinates(self, right_ascension: float, declination: float) -> None:
        self._call(
            "SyncToCoordinates",
            (("RightAscension", right_ascension), ("Declination", declination)),
        )

    def sync_to_alt_az(self, azimuth: float, altitude: float) -> None:
        self._call("SyncToAltAz", (("Azimuth", azimuth), ("Altitude", altitude)))

    def sync_to_target(self) -> None:
        self._call("SyncToTarget")
