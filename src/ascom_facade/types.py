"""Shared value types for facades, back ends and the capability tables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Any

from ascom_facade.errors import DriverFailure


class DeviceType(StrEnum):
    """Device kinds addressable through a facade.

    The value is the canonical interface name; ``url_segment`` is the
    form used in Alpaca request paths.
    """

    CAMERA = "Camera"
    COVER_CALIBRATOR = "CoverCalibrator"
    DOME = "Dome"
    FILTER_WHEEL = "FilterWheel"
    FOCUSER = "Focuser"
    OBSERVING_CONDITIONS = "ObservingConditions"
    ROTATOR = "Rotator"
    SAFETY_MONITOR = "SafetyMonitor"
    SWITCH = "Switch"
    TELESCOPE = "Telescope"
    VIDEO = "Video"

    @property
    def url_segment(self) -> str:
        """Lower-case name used in ``/api/v1/{device_type}/...`` paths."""
        return self.value.lower()

    @classmethod
    def parse(cls, name: str) -> DeviceType:
        """Look up a device type case-insensitively.

        Raises:
            ValueError: If the name is not a known device type.
        """
        for member in cls:
            if member.value.lower() == name.lower():
                return member
        raise ValueError(f"Unknown device type: {name!r}")


class Access(Enum):
    """Direction of a member access: GET on the wire, or PUT."""

    READ = "read"
    WRITE = "write"


class MemberKind(Enum):
    """Whether a member is a property or a method on a local driver."""

    PROPERTY = "property"
    METHOD = "method"


@dataclass(frozen=True)
class StateValue:
    """One named entry of a DeviceState list."""

    name: str
    value: Any


def field_value(item: Any, name: str, strict_casing: bool = False) -> Any:
    """Read a named field of a structured value from either back end.

    Remote devices send nested JSON objects (``{"Name": .., "Value": ..}``),
    local drivers return objects exposing the same names as attributes.
    JSON keys are matched case-insensitively unless ``strict_casing`` is
    set, the same rule applied to the response envelope.

    Raises:
        DriverFailure: If the field is missing.
    """
    if isinstance(item, Mapping):
        if name in item:
            return item[name]
        if not strict_casing:
            lowered = name.lower()
            for key, value in item.items():
                if isinstance(key, str) and key.lower() == lowered:
                    return value
        raise DriverFailure(f"Response object has no {name!r} field: {item!r}")
    try:
        return getattr(item, name)
    except AttributeError as exc:
        raise DriverFailure(
            f"{type(item).__name__} value has no {name!r} member"
        ) from exc
