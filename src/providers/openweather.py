"""
OpenWeather Provider.

Resolves the free-text location through the geocoding API, then queries
the Current Weather API for those coordinates.

API Documentation:
- https://openweathermap.org/api/geocoding-api
- https://openweathermap.org/current
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Union

from pydantic import BaseModel

from providers.base import (
    LocationNotFoundError,
    ProviderRequestError,
    UnsupportedDateError,
    require_params,
)
from providers.rest import RestClient, RestError
from weather_cli.models import (
    CalendarDate,
    ParamDescriptor,
    ProviderDescriptor,
    WeatherKind,
    WeatherRecord,
)

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://api.openweathermap.org/geo/1.0/direct"
WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

DESCRIPTOR = ProviderDescriptor(
    description="OpenWeather (https://openweathermap.org/)",
    params=(
        ParamDescriptor(
            id="apikey",
            display_name="User's API key",
            description="used to authenticate user requests",
        ),
    ),
    supports_date=False,
)


class OpenWeatherError(BaseModel):
    """Error payload, e.g. {"cod": 401, "message": "Invalid API key"}."""
    cod: Union[int, str]
    message: str

    def __str__(self) -> str:
        return f"API error {self.cod}: {self.message}"


class Coords(BaseModel):
    lat: float
    lon: float


class Condition(BaseModel):
    id: int


class MainBlock(BaseModel):
    temp: float
    humidity: float


class Wind(BaseModel):
    speed: float


class CurrentWeather(BaseModel):
    weather: List[Condition]
    main: MainBlock
    wind: Wind


def _kind_from_condition_id(code: int) -> WeatherKind:
    """
    Map an OpenWeather condition id to a category.

    See https://openweathermap.org/weather-conditions
    """
    group = code // 100
    if group in (2, 3, 5):  # thunderstorm, drizzle, rain
        return WeatherKind.RAIN
    if group == 6:
        return WeatherKind.SNOW
    if group == 7:  # mist, smoke, haze, fog...
        return WeatherKind.FOG
    if code == 800:
        return WeatherKind.CLEAR
    if group == 8:
        return WeatherKind.CLOUDS
    return WeatherKind.UNKNOWN


class OpenWeatherProvider:
    """
    Provider for OpenWeather current conditions.

    Date-specific requests are not supported.
    """

    def __init__(self, apikey: str, rest: Optional[RestClient] = None) -> None:
        self._apikey = apikey
        self._rest = rest or RestClient()

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "openweather"

    @classmethod
    def describe(cls) -> ProviderDescriptor:
        return DESCRIPTOR

    @classmethod
    def from_section(
        cls,
        section: Mapping[str, str],
        rest: Optional[RestClient] = None,
    ) -> "OpenWeatherProvider":
        params = require_params(DESCRIPTOR, section)
        return cls(apikey=params["apikey"], rest=rest)

    @staticmethod
    def weather_kind(code: int) -> WeatherKind:
        return _kind_from_condition_id(code)

    def get_weather(
        self,
        location: str,
        date: Optional[CalendarDate] = None,
    ) -> WeatherRecord:
        """
        Fetch current weather for a location.

        Args:
            location: Free-text location
            date: Must be None

        Returns:
            WeatherRecord for the first geocoding match

        Raises:
            UnsupportedDateError: If a date is given
            LocationNotFoundError: If geocoding returns no match
            ProviderRequestError: If a request fails
        """
        if date is not None:
            raise UnsupportedDateError(self.name)

        coords = self._geocode(location)
        logger.debug("Resolved '%s' to %.4f, %.4f", location, coords.lat, coords.lon)

        try:
            data = self._rest.fetch(
                WEATHER_URL,
                CurrentWeather,
                OpenWeatherError,
                params={
                    "lat": f"{coords.lat:.4f}",
                    "lon": f"{coords.lon:.4f}",
                    "appid": self._apikey,
                    "units": "metric",
                },
            )
        except RestError as e:
            raise ProviderRequestError(self.name, "Failed to retrieve weather forecast") from e

        return self._to_record(data)

    def _geocode(self, location: str) -> Coords:
        try:
            matches = self._rest.fetch(
                GEOCODING_URL,
                List[Coords],
                OpenWeatherError,
                params={"q": location, "limit": 1, "appid": self._apikey},
            )
        except RestError as e:
            raise ProviderRequestError(
                self.name, f"Failed to retrieve coordinates of '{location}'"
            ) from e

        if not matches:
            raise LocationNotFoundError(self.name, location)
        return matches[0]

    def _to_record(self, data: CurrentWeather) -> WeatherRecord:
        kind = self.weather_kind(data.weather[0].id) if data.weather else WeatherKind.UNKNOWN
        return WeatherRecord(
            kind=kind,
            temperature_c=data.main.temp,
            wind_speed_mps=data.wind.speed,
            humidity_pct=data.main.humidity,
        )
