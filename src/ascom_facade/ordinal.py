"""1-based enumerable collections for capability sets.

Tracking rates and axis rate ranges are handed back to callers as
OrdinalCollection instances, which keep the indexing and cursor contract
that COM-era clients expect:

- item(1) .. item(count) are valid, anything else raises IndexOutOfRange
- get_enumerator() rewinds the cursor and returns the collection itself
- move_next() advances and reports exhaustion, current reads the cursor
- add() is only legal while the collection is being populated

Internally items live in a plain 0-based list owned by a storage object.
Several collection handles may share one storage object; each handle has
its own cursor, and dispose() only detaches the handle it is called on.
Normal Python iteration (``for rate in rates``) is also supported and
never touches the cursor.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Generic, TypeVar

from ascom_facade.errors import InvalidArgument, InvalidState
from ascom_facade.observability import get_logger
from ascom_facade.types import field_value

logger = get_logger(__name__)

T = TypeVar("T")


class IndexOutOfRange(InvalidArgument, IndexError):
    """A 1-based index was below 1 or above the collection count."""


# =============================================================================
# Storage
# =============================================================================


class _Storage(Generic[T]):
    """Backing list shared by every handle onto one logical collection."""

    def __init__(self) -> None:
        self.items: list[T] = []
        self.sealed = False
        self.lock = threading.Lock()

    def seal(self) -> None:
        with self.lock:
            self.sealed = True

    def snapshot(self) -> tuple[T, ...]:
        """Seal and return the items as they stand."""
        with self.lock:
            self.sealed = True
            return tuple(self.items)


# =============================================================================
# Collection
# =============================================================================


class OrdinalCollection(Generic[T]):
    """Append-built, read-only-after-publication, 1-based sequence.

    Business context: Capability sets such as supported tracking rates are
    returned by value from a single query. The collection is populated
    once by the facade, sealed when it is first enumerated or handed to a
    caller, and then read concurrently without locking.

    Example:
        >>> rates = OrdinalCollection[str]()
        >>> rates.add("sidereal")
        >>> rates.add("lunar")
        >>> rates.item(1)
        'sidereal'
        >>> e = rates.get_enumerator()
        >>> while e.move_next():
        ...     print(e.current)
        sidereal
        lunar
    """

    def __init__(
        self,
        items: Iterable[T] | None = None,
        *,
        _storage: _Storage[T] | None = None,
    ) -> None:
        self._storage: _Storage[T] | None = _storage or _Storage()
        self._position = -1
        if items is not None:
            for item in items:
                self.add(item)

    # -- population -----------------------------------------------------

    def add(self, item: T) -> None:
        """Append an item while the collection is still being populated.

        Args:
            item: Value to append at position count + 1.

        Raises:
            InvalidState: If the collection has already been enumerated,
                sealed or disposed.
        """
        storage = self._live_storage()
        with storage.lock:
            if storage.sealed:
                raise InvalidState(
                    "Items cannot be added after the collection is published"
                )
            storage.items.append(item)

    def seal(self) -> OrdinalCollection[T]:
        """Close the collection for population and return it."""
        self._live_storage().seal()
        return self

    def share(self) -> OrdinalCollection[T]:
        """Return another handle onto the same items with its own cursor."""
        storage = self._live_storage()
        storage.seal()
        return type(self)(_storage=storage)

    # -- indexed access -------------------------------------------------

    @property
    def count(self) -> int:
        """Number of items."""
        return len(self._live_storage().items)

    def item(self, index: int) -> T:
        """Return the item at a 1-based index.

        Args:
            index: Position from 1 to count inclusive.

        Returns:
            Item stored at that position.

        Raises:
            IndexOutOfRange: If index < 1 or index > count.
        """
        items = self._live_storage().items
        if isinstance(index, bool) or not 1 <= index <= len(items):
            raise IndexOutOfRange(
                f"Index {index} is outside the range 1 to {len(items)}"
            )
        return items[index - 1]

    def __getitem__(self, index: int) -> T:
        return self.item(index)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[T]:
        return iter(self._live_storage().snapshot())

    def __repr__(self) -> str:
        if self._storage is None:
            return f"{type(self).__name__}(<disposed>)"
        return f"{type(self).__name__}({self._storage.items!r})"

    # -- legacy cursor --------------------------------------------------

    def get_enumerator(self) -> OrdinalCollection[T]:
        """Seal the collection, rewind the cursor and return self."""
        self.seal()
        self.reset()
        return self

    def reset(self) -> None:
        """Move the cursor back to before the first item."""
        self._live_storage()
        self._position = -1

    def move_next(self) -> bool:
        """Advance the cursor.

        Returns:
            True if the cursor now rests on an item, False once every
            item has been visited.
        """
        items = self._live_storage().items
        if self._position < len(items):
            self._position += 1
        return self._position < len(items)

    @property
    def current(self) -> T:
        """Item under the cursor.

        Raises:
            InvalidState: Before the first move_next() or after exhaustion.
        """
        items = self._live_storage().items
        if not 0 <= self._position < len(items):
            raise InvalidState("The enumerator is not positioned on an item")
        return items[self._position]

    # -- lifetime -------------------------------------------------------

    def dispose(self) -> None:
        """Detach this handle from the backing storage.

        Other handles created with share() keep their view of the items.
        Disposing twice is harmless.
        """
        self._storage = None
        self._position = -1

    def __enter__(self) -> OrdinalCollection[T]:
        return self

    def __exit__(self, *args: Any) -> None:
        self.dispose()

    def _live_storage(self) -> _Storage[T]:
        if self._storage is None:
            raise InvalidState(f"{type(self).__name__} has been disposed")
        return self._storage


# =============================================================================
# Rate collections
# =============================================================================


class DriveRate(IntEnum):
    """Telescope tracking rates."""

    SIDEREAL = 0
    LUNAR = 1
    SOLAR = 2
    KING = 3


@dataclass(frozen=True)
class Rate:
    """Axis rate range in degrees per second."""

    minimum: float
    maximum: float


class TrackingRates(OrdinalCollection[DriveRate]):
    """Supported tracking rates of a telescope."""

    @classmethod
    def from_values(cls, values: Iterable[Any]) -> TrackingRates:
        """Build the collection from raw back-end values.

        Values that are not valid DriveRate numbers are skipped.
        """
        rates = cls()
        for value in values:
            try:
                rates.add(DriveRate(int(value)))
            except (TypeError, ValueError):
                logger.debug("Skipping unknown tracking rate", value=value)
        return rates.seal()


class AxisRates(OrdinalCollection[Rate]):
    """Supported rate ranges for one telescope axis."""

    @classmethod
    def from_values(
        cls, values: Iterable[Any], strict_casing: bool = False
    ) -> AxisRates:
        """Build the collection from raw back-end values.

        Accepts Alpaca envelopes (``{"Minimum": .., "Maximum": ..}``) and
        local driver rate objects exposing ``Minimum`` and ``Maximum``.

        Raises:
            DriverFailure: If a rate lacks either bound.
        """
        rates = cls()
        for value in values:
            minimum = field_value(value, "Minimum", strict_casing)
            maximum = field_value(value, "Maximum", strict_casing)
            rates.add(Rate(float(minimum), float(maximum)))
        return rates.seal()
