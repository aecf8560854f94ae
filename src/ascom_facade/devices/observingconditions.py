"""Observing conditions (weather station) facade.

Every sensor is optional: a station reports UnsupportedOperation for the
readings it does not provide, and ``device_state`` leaves those out.
"""

from __future__ import annotations

from ascom_facade.devices.base import Device
from ascom_facade.types import DeviceType


class ObservingConditions(Device):
    DEVICE_TYPE = DeviceType.OBSERVING_CONDITIONS
    DEVICE_STATE_MEMBERS = (
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
    )

    @property
    def average_period(self) -> float:
        """Hours over which sensor readings are averaged; 0.0 for instantaneous."""
        return float(self._get("AveragePeriod"))

    @average_period.setter
    def average_period(self, value: float) -> None:
        self._put("AveragePeriod", value)

    # -- sensors ----------------------------------------------------------

    @property
    def cloud_cover(self) -> float:
        """Percentage of the sky covered by cloud."""
        return float(self._get("CloudCover"))

    @property
    def dew_point(self) -> float:
        return float(self._get("DewPoint"))

    @property
    def humidity(self) -> float:
        return float(self._get("Humidity"))

    @property
    def pressure(self) -> float:
        """Atmospheric pressure at the observatory in hPa."""
        return float(self._get("Pressure"))

    @property
    def rain_rate(self) -> float:
        return float(self._get("RainRate"))

    @property
    def sky_brightness(self) -> float:
        return float(self._get("SkyBrightness"))

    @property
    def sky_quality(self) -> float:
        """Sky quality in magnitudes per square arcsecond."""
        return float(self._get("SkyQuality"))

    @property
    def sky_temperature(self) -> float:
        return float(self._get("SkyTemperature"))

    @property
    def star_fwhm(self) -> float:
        return float(self._get("StarFWHM"))

    @property
    def temperature(self) -> float:
        return float(self._get("Temperature"))

    @property
    def wind_direction(self) -> float:
        """Degrees east of north the wind blows from; 0.0 when calm."""
        return float(self._get("WindDirection"))

    @property
    def wind_gust(self) -> float:
        return float(self._get("WindGust"))

    @property
    def wind_speed(self) -> float:
        return float(self._get("WindSpeed"))

    # -- sensor metadata ----------------------------------------------------

    def refresh(self) -> None:
        """Ask the station to update its readings immediately."""
        self._call("Refresh")

    def sensor_description(self, property_name: str) -> str:
        return str(self._query("SensorDescription", (("PropertyName", property_name),)))

    def time_since_last_update(self, property_name: str = "") -> float:
        """Seconds since a sensor was updated; an empty name means any sensor."""
        return float(
            self._query("TimeSinceLastUpdate", (("PropertyName", property_name),))
        )
