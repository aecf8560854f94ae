"""Version-aware adapter over a late-bound local driver handle.

The shim is the local back end's single entry point. For every access it
reads the driver's InterfaceVersion, looks up the member's policy and
then either calls through, returns the documented default, or raises
UnsupportedOperation without touching the driver.

Driver exceptions are translated into the shared taxonomy and chained
to the original exception. Nothing is retried.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ascom_facade.capabilities.policy import (
    MemberPolicy,
    PolicyTable,
    policy_table,
)
from ascom_facade.errors import AscomError, ErrorTranslator, UnsupportedOperation
from ascom_facade.observability import get_logger
from ascom_facade.types import DeviceType

logger = get_logger(__name__)

#: Version assumed for drivers whose InterfaceVersion cannot be read.
LEGACY_INTERFACE_VERSION = 1


class CapabilityShim:
    """Pass-through, default or unsupported, decided per member and version.

    Business context: A client built against the current interfaces must
    be able to drive a V1 focuser or a V2 camera without special-casing
    each member. The shim hides version gaps behind documented defaults
    where the interface history defines one and behind
    UnsupportedOperation everywhere else.

    The driver is any object exposing members by name (``Gain``,
    ``StartExposure``, ...) and, from V2 on, ``InterfaceVersion``. The
    version is re-read on every operation because drivers may be
    swapped or reconnected between calls.

    Example:
        >>> shim = CapabilityShim(driver, DeviceType.CAMERA)
        >>> shim.get("CanFastReadout")   # False on a V1 driver
        False
        >>> shim.invoke("StartExposure", 2.0, True)
    """

    def __init__(
        self,
        driver: Any,
        device_type: DeviceType,
        table: PolicyTable | None = None,
    ) -> None:
        self.driver = driver
        self.device_type = device_type
        self.table = table or policy_table(device_type)

    # -- version ----------------------------------------------------------

    def interface_version(self) -> int:
        """Read the driver's interface version.

        Drivers predating the InterfaceVersion member raise when it is
        read; those are treated as version 1.

        Returns:
            Reported version, or 1 if it could not be read.
        """
        try:
            version = int(self.driver.InterfaceVersion)
        except Exception as exc:
            logger.debug(
                "InterfaceVersion unavailable, assuming legacy driver",
                device_type=self.device_type.value,
                error=str(exc),
            )
            return LEGACY_INTERFACE_VERSION
        return version

    # -- access -------------------------------------------------------------

    def get(self, member: str) -> Any:
        """Read a property through the member's policy.

        Args:
            member: Facade member name, e.g. ``"Gain"``.

        Returns:
            Driver value, or the documented default for a member the
            driver's version predates.

        Raises:
            AscomError: Translated driver failure, or UnsupportedOperation
                from the policy table.
        """
        target = self._resolve(member)
        if isinstance(target, _Default):
            return target.value
        return self._call(member, target, lambda: getattr(self.driver, target))

    def set(self, member: str, value: Any) -> None:
        """Write a property through the member's policy.

        Writes to a member the driver's version predates always raise
        UnsupportedOperation; defaults only apply to reads.
        """
        target = str(self._resolve(member, allow_default=False))
        self._call(member, target, lambda: setattr(self.driver, target, value))

    def invoke(self, member: str, *args: Any) -> Any:
        """Call a driver method through the member's policy.

        Args:
            member: Facade method name, e.g. ``"MoveAxis"``.
            *args: Positional arguments in interface order.

        Returns:
            Driver return value, or the documented default.
        """
        target = self._resolve(member)
        if isinstance(target, _Default):
            return target.value
        return self._call(
            member, target, lambda: getattr(self.driver, target)(*args)
        )

    # -- internals ----------------------------------------------------------

    def policy(self, member: str) -> MemberPolicy:
        """Return the policy consulted for a member."""
        return self.table.lookup(member)

    def _resolve(self, member: str, allow_default: bool = True) -> str | _Default:
        policy = self.table.lookup(member)
        version = self.interface_version()
        if not policy.is_available(version):
            logger.debug(
                "Member predates driver interface version",
                device_type=self.device_type.value,
                member=member,
                interface_version=version,
                min_version=policy.min_version,
            )
            if not allow_default:
                raise UnsupportedOperation(
                    f"{member} cannot be set on interface version {version}"
                )
            return _Default(policy.resolve_default(member, version))
        return policy.driver_member(member, version)

    def _call(self, member: str, target: str, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except AttributeError as exc:
            # Only a lookup of the member itself on the driver means
            # "not implemented"; anything raised inside the member is a fault.
            if exc.obj is self.driver and exc.name == target:
                raise UnsupportedOperation(
                    f"{member} is not implemented by this driver"
                ) from exc
            raise ErrorTranslator.from_exception(exc) from exc
        except AscomError:
            raise
        except Exception as exc:
            raise ErrorTranslator.from_exception(exc) from exc


class _Default:
    """Marker wrapping a policy default so None can be a legal default."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value
