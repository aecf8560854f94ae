"""Facade configuration and factory.

Selects how remote facades reach their Alpaca server (address, timeouts,
connection handling, image transfer) and builds local facades over
driver handles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from ascom_facade import __version__
from ascom_facade.devices import DEVICE_CLASSES, Camera, Device
from ascom_facade.observability import get_logger
from ascom_facade.transport import (
    ClientSession,
    ImageArrayCompression,
    ImageArrayTransferType,
    TimeoutPolicy,
)
from ascom_facade.transport.endpoint import (
    DEFAULT_ESTABLISH_TIMEOUT,
    DEFAULT_LONG_TIMEOUT,
    DEFAULT_STANDARD_TIMEOUT,
)
from ascom_facade.types import DeviceType

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 11111  # Alpaca discovery and API default
DEFAULT_API_VERSION = 1
USER_AGENT_PRODUCT = "ascom-facade"


@dataclass
class FacadeConfig:
    """Configuration for facade creation.

    Attributes:
        scheme: ``http`` or ``https``.
        host: Alpaca server host name or address.
        port: Alpaca server port.
        api_version: Alpaca API version in request paths.
        establish_timeout: Seconds allowed for Connected/Connect requests.
        standard_timeout: Seconds allowed for ordinary member access.
        long_timeout: Seconds allowed for slews, exposures and image download.
        manage_connect_locally: Track ``Connected`` on the client without
            contacting the device.
        strict_casing: Send member names exactly as declared and require
            exact-case response keys.
        image_transfer: Preferred camera image transfer mode.
        image_compression: Compression accepted on image responses.
        user_agent_product: Product token of the User-Agent header.
        user_agent_version: Version token of the User-Agent header.
    """

    # Server address
    scheme: str = "http"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_version: int = DEFAULT_API_VERSION

    # Timeouts (seconds)
    establish_timeout: float = DEFAULT_ESTABLISH_TIMEOUT
    standard_timeout: float = DEFAULT_STANDARD_TIMEOUT
    long_timeout: float = DEFAULT_LONG_TIMEOUT

    # Client behaviour
    manage_connect_locally: bool = False
    strict_casing: bool = False

    # Camera image download
    image_transfer: ImageArrayTransferType = ImageArrayTransferType.BEST_AVAILABLE
    image_compression: ImageArrayCompression = ImageArrayCompression.NONE

    user_agent_product: str = USER_AGENT_PRODUCT
    user_agent_version: str = __version__

    @property
    def user_agent(self) -> str:
        return f"{self.user_agent_product}/{self.user_agent_version}"

    @property
    def timeouts(self) -> TimeoutPolicy:
        return TimeoutPolicy(
            establish=self.establish_timeout,
            standard=self.standard_timeout,
            long=self.long_timeout,
        )


class DeviceFactory:
    """Factory for device facades based on configuration.

    Every remote facade created by one factory gets its own ClientSession
    (and so its own client id) but shares the factory's HTTP connection
    pool.

    Thread Safety:
        Facade creation is not synchronised. Configure the global factory
        once at startup before handing it to worker threads.
    """

    def __init__(
        self,
        config: FacadeConfig | None = None,
        http: requests.Session | None = None,
    ):
        """Initialize factory.

        Args:
            config: Facade settings; defaults to FacadeConfig().
            http: Connection pool shared by remote facades; created
                lazily when None.
        """
        self.config = config or FacadeConfig()
        self._http = http

    @property
    def http(self) -> requests.Session:
        if self._http is None:
            self._http = requests.Session()
        return self._http

    def create(self, device_type: DeviceType | str, device_number: int = 0) -> Device:
        """Create a facade for a device on the configured Alpaca server.

        Args:
            device_type: Device type, or its name in any casing.
            device_number: Alpaca device number.

        Returns:
            Facade of the class registered for the device type.

        Raises:
            ValueError: If the device type is unknown or has no facade,
                or the device number is negative.
        """
        device_cls = _facade_class(device_type)
        config = self.config
        device = device_cls.remote(
            config.host,
            config.port,
            device_number,
            scheme=config.scheme,
            api_version=config.api_version,
            session=ClientSession(
                manage_connect_locally=config.manage_connect_locally,
                strict_casing=config.strict_casing,
            ),
            timeouts=config.timeouts,
            http=self.http,
            user_agent=config.user_agent,
        )
        if isinstance(device, Camera):
            device.image_transfer = config.image_transfer
            device.image_compression = config.image_compression
        logger.debug(
            "Created remote facade",
            device_type=device_cls.DEVICE_TYPE.value,
            device_number=device_number,
            host=config.host,
            port=config.port,
        )
        return device

    def wrap(self, device_type: DeviceType | str, driver: Any) -> Device:
        """Create a facade over a local driver handle.

        Raises:
            ValueError: If the device type is unknown or has no facade.
        """
        device_cls = _facade_class(device_type)
        logger.debug(
            "Created local facade",
            device_type=device_cls.DEVICE_TYPE.value,
            driver=type(driver).__name__,
        )
        return device_cls.local(driver)


def _facade_class(device_type: DeviceType | str) -> type[Device]:
    if not isinstance(device_type, DeviceType):
        device_type = DeviceType.parse(device_type)
    try:
        return DEVICE_CLASSES[device_type]
    except KeyError:
        raise ValueError(f"No facade for device type {device_type.value}") from None


# =============================================================================
# Global Singleton
# =============================================================================
# Not thread-safe. Configure once at startup before spawning threads.

_factory: DeviceFactory | None = None


def get_factory() -> DeviceFactory:
    """Get the global device factory, creating it with defaults on first use."""
    global _factory
    if _factory is None:
        _factory = DeviceFactory()
    return _factory


def configure(config: FacadeConfig) -> None:
    """Replace the global factory with one using ``config``.

    Example:
        >>> configure(FacadeConfig(host="192.168.1.20"))
        >>> camera = get_factory().create("camera", 0)
    """
    global _factory
    _factory = DeviceFactory(config)
    logger.info(
        "Facade factory configured",
        host=config.host,
        port=config.port,
        manage_connect_locally=config.manage_connect_locally,
    )
