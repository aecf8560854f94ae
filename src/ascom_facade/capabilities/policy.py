"""Static member policy tables keyed by device type.

Each facade member has one MemberPolicy describing what happens when the
local driver reports an interface version older than the one that
introduced the member:

- MANDATORY: always call through; the driver is trusted
- FROM_VERSION: below ``min_version`` either return a fixed default or
  raise UnsupportedOperation, without calling the driver
- OPTIONAL: call through and let the driver's own "not implemented"
  signal propagate

The tables are data, derived from the interface version history of each
device type, and never inferred at runtime. Members missing from a
table are MANDATORY.

Example:
    table = policy_table(DeviceType.CAMERA)
    policy = table.lookup("Gain")
    if not policy.is_available(version):
        value = policy.resolve_default()  # raises UnsupportedOperation
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from ascom_facade.errors import UnsupportedOperation
from ascom_facade.types import DeviceType


class PolicyKind(Enum):
    """How a member behaves across interface versions."""

    MANDATORY = "mandatory"
    FROM_VERSION = "from_version"
    OPTIONAL = "optional"


class Fallback(Enum):
    """What a FROM_VERSION member does below its introduction version."""

    DEFAULT = "default"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class MemberPolicy:
    """Policy for one facade member.

    Attributes:
        kind: Policy variant.
        min_version: First interface version implementing the member.
            Only meaningful for FROM_VERSION.
        fallback: DEFAULT or UNSUPPORTED below ``min_version``.
        default: Value returned for a DEFAULT fallback. Sequences are
            stored as tuples and handed out as fresh lists.
        legacy_name: Driver member used instead of the facade member
            name below ``legacy_below`` (e.g. Focuser V1 ``Link``).
        legacy_below: Version below which ``legacy_name`` applies.
    """

    kind: PolicyKind
    min_version: int = 1
    fallback: Fallback = Fallback.UNSUPPORTED
    default: Any = None
    legacy_name: str | None = None
    legacy_below: int = 0

    def is_available(self, version: int) -> bool:
        """Return True if the driver should be called at this version."""
        if self.kind is PolicyKind.FROM_VERSION:
            return version >= self.min_version
        return True

    def driver_member(self, member: str, version: int) -> str:
        """Name of the driver member to call for a facade member."""
        if self.legacy_name is not None and version < self.legacy_below:
            return self.legacy_name
        return member

    def resolve_default(self, member: str = "", version: int | None = None) -> Any:
        """Return the documented default or raise UnsupportedOperation.

        Args:
            member: Facade member name, used in the error message.
            version: Interface version that triggered the fallback.

        Returns:
            A copy of the default value for DEFAULT fallbacks.

        Raises:
            UnsupportedOperation: For UNSUPPORTED fallbacks.
        """
        if self.fallback is Fallback.UNSUPPORTED:
            raise UnsupportedOperation(
                f"{member or 'This member'} is not available in interface "
                f"version {version if version is not None else '<unknown>'}; "
                f"it was introduced in version {self.min_version}"
            )
        if isinstance(self.default, tuple):
            return list(self.default)
        return self.default


MANDATORY = MemberPolicy(PolicyKind.MANDATORY)
OPTIONAL = MemberPolicy(PolicyKind.OPTIONAL)


def since(version: int, *, default: Any = Fallback.UNSUPPORTED) -> MemberPolicy:
    """Build a FROM_VERSION policy.

    Args:
        version: Interface version that introduced the member.
        default: Value to return below that version. Leave unset to raise
            UnsupportedOperation instead.

    Example:
        >>> since(2).resolve_default("Gain", 1)
        Traceback (most recent call last):
        ...
        ascom_facade.errors.UnsupportedOperation: Gain is not available ...
        >>> since(2, default=False).resolve_default()
        False
    """
    if default is Fallback.UNSUPPORTED:
        return MemberPolicy(PolicyKind.FROM_VERSION, min_version=version)
    return MemberPolicy(
        PolicyKind.FROM_VERSION,
        min_version=version,
        fallback=Fallback.DEFAULT,
        default=default,
    )


# =============================================================================
# Connect / DeviceState capability
# =============================================================================

#: Highest interface version of each device type that predates the
#: Connect(), Disconnect(), Connecting and DeviceState members.
CONNECT_AND_DEVICE_STATE_THRESHOLD: Mapping[DeviceType, int] = MappingProxyType(
    {
        DeviceType.CAMERA: 3,
        DeviceType.COVER_CALIBRATOR: 1,
        DeviceType.DOME: 2,
        DeviceType.FILTER_WHEEL: 2,
        DeviceType.FOCUSER: 3,
        DeviceType.OBSERVING_CONDITIONS: 1,
        DeviceType.ROTATOR: 3,
        DeviceType.SAFETY_MONITOR: 2,
        DeviceType.SWITCH: 2,
        DeviceType.TELESCOPE: 3,
        DeviceType.VIDEO: 1,
    }
)

CONNECT_MEMBERS = ("Connect", "Disconnect", "Connecting", "DeviceState")


def has_connect_and_device_state(device_type: DeviceType, version: int) -> bool:
    """Return True if the device type implements Connect/DeviceState natively.

    Example:
        >>> has_connect_and_device_state(DeviceType.CAMERA, 3)
        False
        >>> has_connect_and_device_state(DeviceType.CAMERA, 4)
        True
    """
    return version > CONNECT_AND_DEVICE_STATE_THRESHOLD[device_type]


# =============================================================================
# Tables
# =============================================================================


@dataclass(frozen=True)
class PolicyTable:
    """Immutable member policy table for one device type."""

    device_type: DeviceType
    members: Mapping[str, MemberPolicy] = field(default_factory=dict)

    def lookup(self, member: str) -> MemberPolicy:
        """Return the policy for a member; unknown members are MANDATORY."""
        return self.members.get(member, MANDATORY)

    def __contains__(self, member: object) -> bool:
        return member in self.members


_EMPTY_NAME = since(2, default="")

_COMMON: dict[str, MemberPolicy] = {
    "SupportedActions": since(2, default=()),
    "Action": OPTIONAL,
    "CommandBlind": OPTIONAL,
    "CommandBool": OPTIONAL,
    "CommandString": OPTIONAL,
}

_PER_TYPE: dict[DeviceType, dict[str, MemberPolicy]] = {
    DeviceType.CAMERA: {
        "DriverInfo": _EMPTY_NAME,
        "DriverVersion": _EMPTY_NAME,
        "Name": _EMPTY_NAME,
        "CanFastReadout": since(2, default=False),
        **dict.fromkeys(
            (
                "BayerOffsetX",
                "BayerOffsetY",
                "ExposureMax",
                "ExposureMin",
                "ExposureResolution",
                "FastReadout",
                "Gain",
                "GainMax",
                "GainMin",
                "Gains",
                "PercentCompleted",
                "ReadoutMode",
                "ReadoutModes",
                "SensorName",
                "SensorType",
            ),
            since(2),
        ),
        **dict.fromkeys(
            ("Offset", "OffsetMax", "OffsetMin", "Offsets", "SubExposureDuration"),
            since(3),
        ),
        "PulseGuide": OPTIONAL,
        "StopExposure": OPTIONAL,
        "AbortExposure": OPTIONAL,
    },
    DeviceType.FOCUSER: {
        "Description": _EMPTY_NAME,
        "DriverInfo": _EMPTY_NAME,
        "DriverVersion": _EMPTY_NAME,
        "Name": _EMPTY_NAME,
        "Connected": MemberPolicy(
            PolicyKind.MANDATORY, legacy_name="Link", legacy_below=2
        ),
        "Halt": OPTIONAL,
        "Temperature": OPTIONAL,
    },
    DeviceType.ROTATOR: {
        "Description": _EMPTY_NAME,
        "DriverInfo": _EMPTY_NAME,
        "DriverVersion": _EMPTY_NAME,
        "Name": _EMPTY_NAME,
        "MechanicalPosition": since(3),
        "MoveMechanical": since(3),
        "Sync": since(3),
        "Halt": OPTIONAL,
    },
    DeviceType.FILTER_WHEEL: {
        "Description": _EMPTY_NAME,
        "DriverInfo": _EMPTY_NAME,
        "DriverVersion": _EMPTY_NAME,
        "Name": _EMPTY_NAME,
    },
    DeviceType.DOME: {
        "DriverVersion": _EMPTY_NAME,
        "AbortSlew": OPTIONAL,
        "CloseShutter": OPTIONAL,
        "OpenShutter": OPTIONAL,
        "FindHome": OPTIONAL,
        "Park": OPTIONAL,
    },
    DeviceType.TELESCOPE: {
        "SupportedActions": since(3, default=()),
        **dict.fromkeys(
            (
                "AtPark",
                "CanFindHome",
                "CanPark",
                "CanSetGuideRates",
                "CanSetPark",
                "CanSetPierSide",
                "CanUnpark",
            ),
            since(2, default=False),
        ),
        **dict.fromkeys(
            (
                "AlignmentMode",
                "ApertureArea",
                "ApertureDiameter",
                "EquatorialSystem",
                "FocalLength",
                "GuideRateDeclination",
                "GuideRateRightAscension",
                "SiteElevation",
                "SiteLatitude",
                "SiteLongitude",
                "TrackingRate",
                "TrackingRates",
                "AxisRates",
                "DestinationSideOfPier",
                "FindHome",
                "SlewToAltAz",
                "SlewToAltAzAsync",
                "SyncToAltAz",
            ),
            since(2),
        ),
        "AbortSlew": OPTIONAL,
        "MoveAxis": OPTIONAL,
        "PulseGuide": OPTIONAL,
        "SlewToCoordinates": OPTIONAL,
        "SlewToCoordinatesAsync": OPTIONAL,
        "SlewToTarget": OPTIONAL,
        "SlewToTargetAsync": OPTIONAL,
        "SyncToCoordinates": OPTIONAL,
        "SyncToTarget": OPTIONAL,
    },
    DeviceType.SWITCH: {
        **dict.fromkeys(
            (
                "CanAsync",
                "SetAsync",
                "SetAsyncValue",
                "StateChangeComplete",
                "CancelAsync",
            ),
            since(3),
        ),
        "SetSwitchValue": OPTIONAL,
        "GetSwitchValue": OPTIONAL,
        "MinSwitchValue": OPTIONAL,
        "MaxSwitchValue": OPTIONAL,
        "SwitchStep": OPTIONAL,
    },
    DeviceType.COVER_CALIBRATOR: {
        "CoverMoving": since(2),
        "CalibratorChanging": since(2),
    },
    DeviceType.OBSERVING_CONDITIONS: dict.fromkeys(
        (
            "CloudCover",
            "DewPoint",
            "Humidity",
            "Pressure",
            "RainRate",
            "SkyBrightness",
            "SkyQuality",
            "SkyTemperature",
            "StarFWHM",
            "Temperature",
            "WindDirection",
            "WindGust",
            "WindSpeed",
        ),
        OPTIONAL,
    ),
}


def _build_table(device_type: DeviceType) -> PolicyTable:
    members: dict[str, MemberPolicy] = dict(_COMMON)
    connect_policy = since(CONNECT_AND_DEVICE_STATE_THRESHOLD[device_type] + 1)
    members.update(dict.fromkeys(CONNECT_MEMBERS, connect_policy))
    members.update(_PER_TYPE.get(device_type, {}))
    return PolicyTable(device_type, MappingProxyType(members))


POLICY_TABLES: Mapping[DeviceType, PolicyTable] = MappingProxyType(
    {device_type: _build_table(device_type) for device_type in DeviceType}
)


def policy_table(device_type: DeviceType) -> PolicyTable:
    """Return the policy table for a device type."""
    return POLICY_TABLES[device_type]
