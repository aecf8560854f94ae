"""Client identity for remote devices.

Each remote facade owns one ClientSession. Client numbers come from a
process-wide monotonic counter, so two live facades never share one and
a number is never handed out twice. The per-session transaction counter
is incremented under a lock; the HTTP calls themselves are not
serialised.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field

# Alpaca client IDs are unsigned 32-bit integers
_MAX_CLIENT_ID = 0xFFFFFFFF

_client_numbers = itertools.count(1)
_client_lock = threading.Lock()


def next_client_number() -> int:
    """Allocate the next process-wide client number (1, 2, 3, ...).

    Raises:
        OverflowError: If the 32-bit client number space is exhausted.
    """
    with _client_lock:
        number = next(_client_numbers)
    if number > _MAX_CLIENT_ID:
        raise OverflowError("Client number space exhausted")
    return number


@dataclass
class ClientSession:
    """Per-facade identity and transaction bookkeeping.

    Attributes:
        client_id: Unique client number sent as ``ClientID``.
        manage_connect_locally: Track ``Connected`` locally and never send
            it to the device.
        strict_casing: Send member names in request paths exactly as
            declared instead of lower-casing them, and require response
            keys (including those of nested objects) to match exactly.
            Parameter keys are always sent as declared.
        connected: Locally tracked connection state.
    """

    manage_connect_locally: bool = False
    strict_casing: bool = False
    client_id: int = field(default_factory=next_client_number)
    connected: bool = False
    _transaction: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def next_transaction(self) -> int:
        """Return the next client transaction number for this session."""
        with self._lock:
            self._transaction = self._transaction % _MAX_CLIENT_ID + 1
            return self._transaction

    @property
    def last_transaction(self) -> int:
        """Most recently issued transaction number, 0 before the first call."""
        return self._transaction
