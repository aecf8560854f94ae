"""HTTP transport adapter for remote Alpaca devices.

Turns (endpoint, member, access, parameters, timeout tier) into one HTTP
transaction and decodes the result:

    GET|PUT {scheme}://{host}:{port}/api/v{n}/{device_type}/{number}/{member}

Reads are GET requests with query parameters, writes and method calls
are PUT requests with a form body. Every request carries ``ClientID``
and a strictly increasing ``ClientTransactionID``.

Device-reported errors (non-zero ``ErrorNumber``) go through
ErrorTranslator; transport faults (refused connections, elapsed
timeouts, non-JSON or malformed envelopes, HTTP error statuses) raise
TransportError. The two are never conflated. Nothing is retried.

Example:
    adapter = TransportAdapter(ClientSession())
    endpoint = DeviceEndpoint.remote("localhost", 11111, DeviceType.SWITCH, 0)
    value = adapter.execute(
        endpoint, "GetSwitchValue", Access.READ, [("Id", 2)]
    )
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import numpy.typing as npt
import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from ascom_facade import __version__
from ascom_facade.errors import (
    TransportError,
    UnsupportedOperation,
    check_response,
)
from ascom_facade.observability import get_logger
from ascom_facade.transport.endpoint import (
    DeviceEndpoint,
    TimeoutPolicy,
    TimeoutTier,
)
from ascom_facade.transport.imagebytes import (
    IMAGE_BYTES_MIME_TYPE,
    ImageArrayCompression,
    ImageArrayTransferType,
    accept_encoding_header,
    accept_header,
    decode_image_bytes,
    decode_json_image,
    decompress,
)
from ascom_facade.transport.session import ClientSession
from ascom_facade.types import Access

logger = get_logger(__name__)

CLIENT_ID_PARAMETER = "ClientID"
CLIENT_TRANSACTION_PARAMETER = "ClientTransactionID"

DEFAULT_USER_AGENT = f"ascom-facade/{__version__}"


def format_parameter(value: Any) -> str:
    """Render a parameter value the way Alpaca servers parse it.

    Booleans are sent as ``True``/``False``, floats in their shortest
    round-trip form, everything else with ``str()``.

    Example:
        >>> format_parameter(True)
        'True'
        >>> format_parameter(0.7)
        '0.7'
    """
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


# =============================================================================
# Envelopes
# =============================================================================


@dataclass(frozen=True)
class RequestEnvelope:
    """One outgoing transaction."""

    endpoint: DeviceEndpoint
    member: str
    access: Access
    parameters: tuple[tuple[str, Any], ...]
    client_id: int
    client_transaction_id: int

    @property
    def verb(self) -> str:
        """``GET`` for reads, ``PUT`` for writes and method calls."""
        return "GET" if self.access is Access.READ else "PUT"

    def fields(self) -> list[tuple[str, str]]:
        """Ordered key/value pairs including the identity parameters."""
        pairs = [(key, format_parameter(value)) for key, value in self.parameters]
        pairs.append((CLIENT_ID_PARAMETER, str(self.client_id)))
        pairs.append((CLIENT_TRANSACTION_PARAMETER, str(self.client_transaction_id)))
        return pairs


@dataclass(frozen=True)
class ResponseEnvelope:
    """Decoded Alpaca JSON response."""

    value: Any
    client_transaction_id: int | None
    server_transaction_id: int | None
    error_number: int
    error_message: str

    @classmethod
    def from_json(
        cls,
        payload: Any,
        strict_casing: bool = False,
    ) -> ResponseEnvelope:
        """Build an envelope from parsed JSON.

        Keys are matched case-insensitively unless ``strict_casing`` is
        set. ``ErrorNumber`` and ``ErrorMessage`` default to success when
        absent, which is what servers send for some void methods.

        Raises:
            TransportError: If the payload is not a JSON object or a
                numeric field has the wrong type.
        """
        if not isinstance(payload, Mapping):
            raise TransportError(
                f"Response is not a JSON object: {type(payload).__name__}"
            )
        if strict_casing:
            fields = dict(payload)
        else:
            fields = {key.lower(): value for key, value in payload.items()}

        def field(name: str, default: Any = None) -> Any:
            return fields.get(name if strict_casing else name.lower(), default)

        try:
            error_number = int(field("ErrorNumber", 0) or 0)
            client_tx = field("ClientTransactionID")
            server_tx = field("ServerTransactionID")
            return cls(
                value=field("Value"),
                client_transaction_id=None if client_tx is None else int(client_tx),
                server_transaction_id=None if server_tx is None else int(server_tx),
                error_number=error_number,
                error_message=str(field("ErrorMessage", "") or ""),
            )
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Malformed response envelope: {exc}") from exc

    def raise_for_error(self) -> None:
        """Raise the translated device error if ErrorNumber is non-zero."""
        check_response(self.error_number, self.error_message)


# =============================================================================
# Adapter
# =============================================================================


class TransportAdapter:
    """Executes facade member accesses against a remote Alpaca device.

    Business context: Every property read on a remote camera or mount is
    a network round trip. The adapter centralises URL building, identity
    parameters, timeout selection and response decoding so the device
    facades only name the member, its parameters and its tier.

    Thread Safety:
        Concurrent callers may share one adapter. Transaction numbers are
        allocated under the ClientSession lock; HTTP requests run
        concurrently on the shared requests.Session.

    Args:
        client_session: Identity and connection-management flags.
        timeouts: Seconds per timeout tier.
        http: requests.Session to use; a new one is created if omitted.
        user_agent: ``User-Agent`` header value.
    """

    def __init__(
        self,
        client_session: ClientSession,
        timeouts: TimeoutPolicy | None = None,
        http: requests.Session | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.client_session = client_session
        self.timeouts = timeouts or TimeoutPolicy()
        self.http = http or requests.Session()
        self.user_agent = user_agent

    # -- requests -----------------------------------------------------------

    def build_request(
        self,
        endpoint: DeviceEndpoint,
        member: str,
        access: Access,
        parameters: Iterable[tuple[str, Any]] = (),
    ) -> RequestEnvelope:
        """Allocate a transaction number and build the request envelope."""
        return RequestEnvelope(
            endpoint=endpoint,
            member=member,
            access=access,
            parameters=tuple(parameters),
            client_id=self.client_session.client_id,
            client_transaction_id=self.client_session.next_transaction(),
        )

    def execute(
        self,
        endpoint: DeviceEndpoint,
        member: str,
        access: Access,
        parameters: Iterable[tuple[str, Any]] = (),
        tier: TimeoutTier = TimeoutTier.STANDARD,
    ) -> Any:
        """Run one member access and return the decoded ``Value``.

        Args:
            endpoint: Remote device.
            member: Member name as declared, e.g. ``"SlewToCoordinates"``.
            access: READ issues GET, WRITE issues PUT.
            parameters: Member-specific key/value pairs in order.
            tier: Timeout tier chosen by the caller.

        Returns:
            The envelope's ``Value`` (None for void members).

        Raises:
            AscomError: Translated device error.
            TransportError: Transport fault or malformed envelope.
        """
        request = self.build_request(endpoint, member, access, parameters)
        response = self._send(request, tier, {"Accept": "application/json"})
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                f"{request.verb} {member} returned a non-JSON body"
            ) from exc
        envelope = ResponseEnvelope.from_json(
            payload, self.client_session.strict_casing
        )
        self._log_response(request, envelope)
        envelope.raise_for_error()
        return envelope.value

    def fetch_image(
        self,
        endpoint: DeviceEndpoint,
        member: str = "ImageArray",
        transfer: ImageArrayTransferType = ImageArrayTransferType.BEST_AVAILABLE,
        compression: ImageArrayCompression = ImageArrayCompression.NONE,
    ) -> npt.NDArray[Any]:
        """Download an image array using the LONG timeout tier.

        With GET_IMAGE_BYTES or BEST_AVAILABLE the request advertises
        ``application/imagebytes`` and the response is decoded according
        to its ``Content-Type``; servers that only speak JSON still work.

        Raises:
            UnsupportedOperation: For BASE64_HANDOFF transfers.
            AscomError: Translated device error.
            ImageDecodeError: Payload does not match its header.
            TransportError: Transport fault.
        """
        if transfer is ImageArrayTransferType.BASE64_HANDOFF:
            raise UnsupportedOperation(
                "Base64 hand-off image transfer is not supported"
            )

        request = self.build_request(endpoint, member, Access.READ)
        headers = {
            "Accept": accept_header(transfer),
            "Accept-Encoding": accept_encoding_header(compression),
        }
        response = self._send(request, TimeoutTier.LONG, headers, stream=True)
        try:
            body = response.raw.read(decode_content=False)
        except (requests.RequestException, Urllib3HTTPError, OSError) as exc:
            raise TransportError(f"Image download failed: {exc}") from exc
        finally:
            response.close()

        encoding = response.headers.get("Content-Encoding")
        content_type = response.headers.get("Content-Type", "")
        if content_type.split(";")[0].strip().lower() == IMAGE_BYTES_MIME_TYPE:
            metadata, array = decode_image_bytes(body, encoding)
            logger.debug(
                "Image received",
                transfer="imagebytes",
                shape=list(array.shape),
                dtype=str(array.dtype),
                server_transaction=metadata.server_transaction_id,
            )
            return array

        try:
            payload = json.loads(decompress(body, encoding))
        except ValueError as exc:
            raise TransportError("Image response is not valid JSON") from exc
        envelope = ResponseEnvelope.from_json(
            payload, self.client_session.strict_casing
        )
        self._log_response(request, envelope)
        envelope.raise_for_error()
        array = decode_json_image(
            dict(payload)
            if self.client_session.strict_casing
            else _canonical_image_keys(payload)
        )
        logger.debug("Image received", transfer="json", shape=list(array.shape))
        return array

    # -- connection -----------------------------------------------------------

    def get_connected(self, endpoint: DeviceEndpoint) -> bool:
        """Read ``Connected``, from the local flag when managed locally."""
        if self.client_session.manage_connect_locally:
            return self.client_session.connected
        return bool(self.execute(endpoint, "Connected", Access.READ))

    def set_connected(self, endpoint: DeviceEndpoint, value: bool) -> None:
        """Write ``Connected``.

        When the session manages the connection locally no request is
        issued and only the local flag changes. Otherwise exactly one PUT
        is sent under the ESTABLISH tier.
        """
        if self.client_session.manage_connect_locally:
            logger.debug(
                "Connected managed locally, not sent to device", connected=value
            )
        else:
            self.execute(
                endpoint,
                "Connected",
                Access.WRITE,
                [("Connected", value)],
                tier=TimeoutTier.ESTABLISH,
            )
        self.client_session.connected = value

    # -- internals ----------------------------------------------------------

    def _send(
        self,
        request: RequestEnvelope,
        tier: TimeoutTier,
        headers: dict[str, str],
        stream: bool = False,
    ) -> requests.Response:
        url = request.endpoint.member_url(
            request.member, self.client_session.strict_casing
        )
        timeout = self.timeouts.seconds(tier)
        fields = request.fields()
        headers = {"User-Agent": self.user_agent, **headers}
        logger.debug(
            "Sending request",
            verb=request.verb,
            url=url,
            tier=tier.value,
            client_transaction=request.client_transaction_id,
        )
        try:
            if request.verb == "GET":
                response = self.http.get(
                    url, params=fields, headers=headers, timeout=timeout, stream=stream
                )
            else:
                response = self.http.put(
                    url, data=fields, headers=headers, timeout=timeout, stream=stream
                )
        except requests.Timeout as exc:
            raise TransportError(
                f"{request.verb} {url} timed out after {timeout:g}s"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{request.verb} {url} failed: {exc}") from exc

        if response.status_code != 200:
            text = response.text.strip()
            response.close()
            raise TransportError(
                f"{request.verb} {url} returned HTTP {response.status_code}: {text}"
            )
        return response

    def _log_response(
        self, request: RequestEnvelope, envelope: ResponseEnvelope
    ) -> None:
        logger.debug(
            "Received response",
            member=request.member,
            client_transaction=request.client_transaction_id,
            server_transaction=envelope.server_transaction_id,
            error_number=envelope.error_number,
        )


def _canonical_image_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    canonical = {"value": "Value", "type": "Type", "rank": "Rank"}
    return {canonical.get(k.lower(), k): v for k, v in payload.items()}
