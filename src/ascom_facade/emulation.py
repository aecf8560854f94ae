"""Synthesised members for back ends that implement only one representation.

Each emulator wraps a native accessor set and tries the native member
first. It falls back only when the back end raises UnsupportedOperation;
every other error, including transport faults, propagates unchanged.

SwitchValueEmulator presents a boolean-only switch as a two-state
continuous control on the unit interval:

    min = 0.0, max = 1.0, step = 1.0
    value = 1.0 if state else 0.0
    set value v  ->  state = v >= 0.5

CoverCalibratorEmulator derives CoverMoving and CalibratorChanging from
the state members of pre-V2 cover calibrators.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import Protocol, TypeVar, runtime_checkable

from ascom_facade.errors import UnsupportedOperation
from ascom_facade.observability import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

#: Continuous range presented for a boolean switch.
BOOLEAN_MIN_VALUE = 0.0
BOOLEAN_MAX_VALUE = 1.0
BOOLEAN_STEP = 1.0
#: Values at or above this threshold switch a boolean switch on.
BOOLEAN_ON_THRESHOLD = 0.5


def _with_fallback(
    member: str, native: Callable[[], T], fallback: Callable[[], T]
) -> T:
    try:
        return native()
    except UnsupportedOperation:
        logger.debug("Native member unsupported, emulating", member=member)
        return fallback()


# =============================================================================
# Switch
# =============================================================================


@runtime_checkable
class SwitchAccessors(Protocol):
    """Native switch members used by SwitchValueEmulator."""

    def get_switch(self, switch_id: int) -> bool:
        ...  # pragma: no cover

    def set_switch(self, switch_id: int, state: bool) -> None:
        ...  # pragma: no cover

    def get_switch_value(self, switch_id: int) -> float:
        ...  # pragma: no cover

    def set_switch_value(self, switch_id: int, value: float) -> None:
        ...  # pragma: no cover

    def min_switch_value(self, switch_id: int) -> float:
        ...  # pragma: no cover

    def max_switch_value(self, switch_id: int) -> float:
        ...  # pragma: no cover

    def switch_step(self, switch_id: int) -> float:
        ...  # pragma: no cover


class SwitchValueEmulator:
    """Continuous switch accessors with a boolean fallback.

    Example:
        >>> values = SwitchValueEmulator(native)
        >>> values.set_switch_value(0, 0.7)  # native unsupported
        >>> values.get_switch_value(0)
        1.0
    """

    def __init__(self, native: SwitchAccessors) -> None:
        self.native = native

    def get_switch(self, switch_id: int) -> bool:
        return self.native.get_switch(switch_id)

    def set_switch(self, switch_id: int, state: bool) -> None:
        self.native.set_switch(switch_id, state)

    def get_switch_value(self, switch_id: int) -> float:
        return _with_fallback(
            "GetSwitchValue",
            lambda: float(self.native.get_switch_value(switch_id)),
            lambda: BOOLEAN_MAX_VALUE
            if self.native.get_switch(switch_id)
            else BOOLEAN_MIN_VALUE,
        )

    def set_switch_value(self, switch_id: int, value: float) -> None:
        _with_fallback(
            "SetSwitchValue",
            lambda: self.native.set_switch_value(switch_id, value),
            lambda: self.native.set_switch(switch_id, value >= BOOLEAN_ON_THRESHOLD),
        )

    def min_switch_value(self, switch_id: int) -> float:
        return _with_fallback(
            "MinSwitchValue",
            lambda: float(self.native.min_switch_value(switch_id)),
            lambda: BOOLEAN_MIN_VALUE,
        )

    def max_switch_value(self, switch_id: int) -> float:
        return _with_fallback(
            "MaxSwitchValue",
            lambda: float(self.native.max_switch_value(switch_id)),
            lambda: BOOLEAN_MAX_VALUE,
        )

    def switch_step(self, switch_id: int) -> float:
        return _with_fallback(
            "SwitchStep",
            lambda: float(self.native.switch_step(switch_id)),
            lambda: BOOLEAN_STEP,
        )


# =============================================================================
# Cover calibrator
# =============================================================================


class CoverStatus(IntEnum):
    """Cover state of a cover calibrator."""

    NOT_PRESENT = 0
    CLOSED = 1
    MOVING = 2
    OPEN = 3
    UNKNOWN = 4
    ERROR = 5


class CalibratorStatus(IntEnum):
    """Calibrator state of a cover calibrator."""

    NOT_PRESENT = 0
    OFF = 1
    NOT_READY = 2
    READY = 3
    UNKNOWN = 4
    ERROR = 5


@runtime_checkable
class CoverCalibratorAccessors(Protocol):
    """Native cover calibrator members used by CoverCalibratorEmulator."""

    def native_cover_moving(self) -> bool:
        ...  # pragma: no cover

    def native_calibrator_changing(self) -> bool:
        ...  # pragma: no cover

    @property
    def cover_state(self) -> CoverStatus:
        ...  # pragma: no cover

    @property
    def calibrator_state(self) -> CalibratorStatus:
        ...  # pragma: no cover


class CoverCalibratorEmulator:
    """CoverMoving and CalibratorChanging for pre-V2 cover calibrators."""

    def __init__(self, native: CoverCalibratorAccessors) -> None:
        self.native = native

    def cover_moving(self) -> bool:
        return _with_fallback(
            "CoverMoving",
            self.native.native_cover_moving,
            lambda: self.native.cover_state == CoverStatus.MOVING,
        )

    def calibrator_changing(self) -> bool:
        return _with_fallback(
            "CalibratorChanging",
            self.native.native_calibrator_changing,
            lambda: self.native.calibrator_state == CalibratorStatus.NOT_READY,
        )
