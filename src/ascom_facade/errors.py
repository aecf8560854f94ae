"""Exception taxonomy and error translation for ascom-facade.

Every failed facade member access surfaces as exactly one of five error
kinds, whichever back end produced it:

- UnsupportedOperation: the member is not implemented by the back end
- InvalidArgument: a parameter value was rejected
- NotConnected: the device is not connected
- InvalidState: a precondition failed (parked, slaved, busy, cancelled)
- DriverFailure: anything else, carrying the raw diagnostic text

TransportError is a DriverFailure raised only for transport-level faults
(refused connection, elapsed timeout, malformed envelope). It is never
produced from a device-reported error number.

Example:
    from ascom_facade.errors import ErrorTranslator, UnsupportedOperation

    try:
        ErrorTranslator.check(0x400, "Gain is not implemented", origin="remote")
    except UnsupportedOperation as exc:
        print(exc.number, exc.message)
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar

# =============================================================================
# Constants
# =============================================================================

#: Offset applied to Alpaca error numbers when they travel as COM HRESULTs.
COM_ERROR_OFFSET: int = 0x80040000

#: First and last error numbers reserved for driver-specific errors.
DRIVER_ERROR_BASE: int = 0x500
DRIVER_ERROR_MAX: int = 0xFFF

#: Error number used when a device returns a null value where one is required.
NULL_VALUE_ERROR: int = 0xFFF


class AlpacaErrorCode(IntEnum):
    """Reserved Alpaca error numbers."""

    SUCCESS = 0x0
    NOT_IMPLEMENTED = 0x400
    INVALID_VALUE = 0x401
    VALUE_NOT_SET = 0x402
    NOT_CONNECTED = 0x407
    INVALID_WHILE_PARKED = 0x408
    INVALID_WHILE_SLAVED = 0x409
    INVALID_OPERATION = 0x40B
    ACTION_NOT_IMPLEMENTED = 0x40C
    OPERATION_CANCELLED = 0x40E
    UNSPECIFIED_ERROR = 0x4FF


# =============================================================================
# Taxonomy
# =============================================================================


class AscomError(Exception):
    """Base class for every error raised through a facade.

    Attributes:
        message: Diagnostic text, verbatim from the back end where available.
        number: Raw error number reported by the back end, or None when the
            failure did not carry one (e.g. a Python exception from a local
            driver or a transport fault).
        origin: "local", "remote" or "transport".
    """

    def __init__(
        self,
        message: str,
        number: int | None = None,
        origin: str = "local",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.number = number
        self.origin = origin

    def __str__(self) -> str:
        if self.number is None:
            return self.message
        return f"{self.message} (0x{self.number:X})"


class UnsupportedOperation(AscomError):
    """The back end does not implement the requested member."""


class InvalidArgument(AscomError):
    """A parameter value was outside its legal range or not set."""


class NotConnected(AscomError):
    """The operation requires a connected device."""


class InvalidState(AscomError):
    """The device is in a state where the operation is not allowed."""


class DriverFailure(AscomError):
    """Catch-all device failure carrying the raw diagnostic text."""


class TransportError(DriverFailure):
    """HTTP transport fault: connection refused, timeout or bad envelope."""

    def __init__(self, message: str, number: int | None = None) -> None:
        super().__init__(message, number=number, origin="transport")


class ImageDecodeError(TransportError):
    """A bulk image payload did not match its declared shape or type."""


# =============================================================================
# Translation
# =============================================================================


class ErrorTranslator:
    """Maps raw back-end failures onto the shared taxonomy.

    The table is fixed. Codes that do not appear in it, including the
    whole driver-specific range, map to DriverFailure. COM HRESULTs
    carrying the 0x80040000 offset are normalised before lookup so that
    a local driver reporting 0x80040400 is treated exactly like a remote
    device reporting 0x400.

    Business context: Client code written against the facade catches five
    exception types no matter whether the instrument sits on the local
    machine or across the network. Keeping the mapping as data makes it
    testable on its own and keeps every call site free of code checks.
    """

    TABLE: ClassVar[dict[int, type[AscomError]]] = {
        AlpacaErrorCode.NOT_IMPLEMENTED: UnsupportedOperation,
        AlpacaErrorCode.ACTION_NOT_IMPLEMENTED: UnsupportedOperation,
        AlpacaErrorCode.INVALID_VALUE: InvalidArgument,
        AlpacaErrorCode.VALUE_NOT_SET: InvalidArgument,
        AlpacaErrorCode.NOT_CONNECTED: NotConnected,
        AlpacaErrorCode.INVALID_WHILE_PARKED: InvalidState,
        AlpacaErrorCode.INVALID_WHILE_SLAVED: InvalidState,
        AlpacaErrorCode.INVALID_OPERATION: InvalidState,
        AlpacaErrorCode.OPERATION_CANCELLED: InvalidState,
    }

    @staticmethod
    def normalize(code: int) -> int:
        """Strip the COM HRESULT offset from an error number.

        Accepts both the unsigned (0x80040400) and the signed 32-bit
        (-2147220480) spelling of an HRESULT. Numbers outside the
        offset range are returned unchanged.

        Args:
            code: Raw error number as reported by the back end.

        Returns:
            Alpaca error number.

        Example:
            >>> ErrorTranslator.normalize(0x80040401)
            1025
            >>> ErrorTranslator.normalize(0x401)
            1025
        """
        unsigned = code & 0xFFFFFFFF if code < 0 else code
        if COM_ERROR_OFFSET <= unsigned <= COM_ERROR_OFFSET + DRIVER_ERROR_MAX:
            return unsigned - COM_ERROR_OFFSET
        return code

    @classmethod
    def kind_of(cls, code: int) -> type[AscomError]:
        """Return the taxonomy class for a raw error number."""
        return cls.TABLE.get(cls.normalize(code), DriverFailure)

    @classmethod
    def translate(
        cls,
        code: int,
        message: str,
        origin: str = "remote",
    ) -> AscomError:
        """Build the taxonomy error for a raw error number and message.

        Args:
            code: Raw error number (Alpaca number or COM HRESULT).
            message: Diagnostic text, kept verbatim.
            origin: Where the failure came from, "local" or "remote".

        Returns:
            Instance of exactly one of the five taxonomy classes.
        """
        number = cls.normalize(code)
        error_cls = cls.TABLE.get(number, DriverFailure)
        return error_cls(message, number=number, origin=origin)

    @classmethod
    def check(cls, code: int, message: str, origin: str = "remote") -> None:
        """Raise the translated error unless the code signals success.

        Args:
            code: Raw error number; 0 means success.
            message: Diagnostic text from the back end.
            origin: Where the failure came from.

        Raises:
            AscomError: Subclass chosen by the translation table.
        """
        if code != AlpacaErrorCode.SUCCESS:
            raise cls.translate(code, message, origin)

    @classmethod
    def from_exception(cls, exc: BaseException) -> AscomError:
        """Translate an exception raised by a local driver.

        Taxonomy errors pass through unchanged. Otherwise an integer
        ``number`` or ``hresult`` attribute is translated by code,
        NotImplementedError means unsupported, ValueError and TypeError
        mean a rejected argument, and anything else is a DriverFailure.

        Args:
            exc: Exception raised inside the driver call.

        Returns:
            Taxonomy error. Callers raise it ``from exc``.
        """
        if isinstance(exc, AscomError):
            return exc
        message = str(exc) or type(exc).__name__
        for attr in ("number", "hresult"):
            code = getattr(exc, attr, None)
            if isinstance(code, int) and not isinstance(code, bool):
                return cls.translate(code, message, origin="local")
        if isinstance(exc, NotImplementedError):
            return UnsupportedOperation(message, origin="local")
        if isinstance(exc, ValueError | TypeError):
            return InvalidArgument(message, origin="local")
        return DriverFailure(message, origin="local")


def check_response(number: int, message: str) -> None:
    """Raise the error described by a remote response, if any."""
    ErrorTranslator.check(number, message, origin="remote")
