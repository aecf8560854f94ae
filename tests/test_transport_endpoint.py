"""Tests for ascom_facade.transport.endpoint and transport.session."""

from __future__ import annotations

import threading
from typing import Any
from unittest.mock import MagicMock

import pytest

from ascom_facade.devices import Focuser
from ascom_facade.transport import (
    BackendKind,
    ClientSession,
    DeviceEndpoint,
    TimeoutPolicy,
    TimeoutTier,
    next_client_number,
)
from ascom_facade.types import DeviceType
from tests.helpers import alpaca_response

# =========================================================================
# DeviceEndpoint
# =========================================================================


class TestDeviceEndpoint:
    """URL construction for remote devices."""

    def test_member_url_lowercases_by_default(self) -> None:
        """Paths use the lower-case device type and member name."""
        endpoint = DeviceEndpoint.remote("10.0.0.5", 11111, DeviceType.FILTER_WHEEL, 2)
        assert endpoint.kind is BackendKind.REMOTE
        assert (
            endpoint.member_url("FocusOffsets", strict_casing=False)
            == "http://10.0.0.5:11111/api/v1/filterwheel/2/focusoffsets"
        )

    def test_member_url_strict_casing(self) -> None:
        """Strict casing sends the member name as declared."""
        endpoint = DeviceEndpoint.remote("host", 80, DeviceType.TELESCOPE, 0)
        assert endpoint.member_url("CanSetTracking", strict_casing=True).endswith(
            "/telescope/0/CanSetTracking"
        )

    def test_ipv6_host_bracketed(self) -> None:
        """IPv6 literals are bracketed in the authority."""
        endpoint = DeviceEndpoint.remote("::1", 11111, DeviceType.CAMERA, 0)
        assert endpoint.base_url == "http://[::1]:11111"

    def test_scheme_and_api_version(self) -> None:
        """Scheme is normalised and the API version appears in the path."""
        endpoint = DeviceEndpoint.remote(
            "h", 443, DeviceType.DOME, 1, scheme="HTTPS", api_version=2
        )
        assert endpoint.device_url == "https://h:443/api/v2/dome/1"

    def test_negative_device_number_rejected(self) -> None:
        """Device numbers are non-negative."""
        with pytest.raises(ValueError):
            DeviceEndpoint.remote("h", 1, DeviceType.DOME, -1)

    def test_local_endpoint(self) -> None:
        """Local endpoints keep the driver handle."""
        driver = object()
        endpoint = DeviceEndpoint.local(DeviceType.FOCUSER, driver)
        assert endpoint.kind is BackendKind.LOCAL
        assert endpoint.driver is driver
        assert "Focuser" in str(endpoint)


class TestTimeoutPolicy:
    """Seconds per timeout tier."""

    def test_defaults(self) -> None:
        """Establish 5s, standard 10s, long 100s."""
        policy = TimeoutPolicy()
        assert policy.seconds(TimeoutTier.ESTABLISH) == 5.0
        assert policy.seconds(TimeoutTier.STANDARD) == 10.0
        assert policy.seconds(TimeoutTier.LONG) == 100.0

    def test_custom(self) -> None:
        """Each tier is configurable."""
        policy = TimeoutPolicy(establish=1.0, standard=2.0, long=3.0)
        assert policy.seconds(TimeoutTier.LONG) == 3.0


# =========================================================================
# ClientSession
# =========================================================================


class TestClientSession:
    """Client identity and transaction numbering."""

    def test_client_ids_unique(self) -> None:
        """Every session gets a distinct client number."""
        ids = {ClientSession().client_id for _ in range(10)}
        assert len(ids) == 10

    def test_client_numbers_increase(self) -> None:
        """The process-wide allocator is monotonic."""
        first = next_client_number()
        second = next_client_number()
        assert second > first > 0

    def test_transactions_start_at_one(self) -> None:
        """Transaction numbers run 1, 2, 3 per session."""
        session = ClientSession()
        assert session.last_transaction == 0
        assert [session.next_transaction() for _ in range(3)] == [1, 2, 3]
        assert session.last_transaction == 3

    def test_transactions_unique_across_threads(self) -> None:
        """Concurrent callers never share a number and each sees them rise."""
        session = ClientSession()
        per_thread: list[list[int]] = []
        lock = threading.Lock()

        def worker() -> None:
            numbers = [session.next_transaction() for _ in range(500)]
            with lock:
                per_thread.append(numbers)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        seen = [number for numbers in per_thread for number in numbers]
        assert sorted(seen) == list(range(1, 4001))
        for numbers in per_thread:
            assert numbers == sorted(numbers)
        assert session.last_transaction == 4000

    def test_shared_session_requests_across_threads(self, http: MagicMock) -> None:
        """Facades sharing a session send distinct ClientTransactionIDs."""
        session = ClientSession()
        sent: list[int] = []
        lock = threading.Lock()

        def get(url: str, **kwargs: Any) -> MagicMock:
            with lock:
                sent.append(int(dict(kwargs["params"])["ClientTransactionID"]))
            return alpaca_response(1)

        http.get.side_effect = get
        focusers = [
            Focuser.remote("127.0.0.1", 11111, n, session=session, http=http)
            for n in range(4)
        ]

        def worker(focuser: Focuser) -> None:
            for _ in range(100):
                _ = focuser.position

        threads = [
            threading.Thread(target=worker, args=(focuser,))
            for focuser in focusers * 2
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert sorted(sent) == list(range(1, 801))

    def test_flags(self) -> None:
        """Connection-management and casing flags default off."""
        session = ClientSession()
        assert session.manage_connect_locally is False
        assert session.strict_casing is False
        assert session.connected is False
