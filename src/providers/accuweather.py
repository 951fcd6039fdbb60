"""
AccuWeather Provider.

Two requests per lookup: the city search API turns the free-text location
into a location key, then the Current Conditions API is queried for it.
Only current conditions are available on the free plan.

API Documentation: https://developer.accuweather.com/apis
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal

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

LOCATION_URL = "https://dataservice.accuweather.com/locations/v1/cities/search"
CONDITIONS_URL = "https://dataservice.accuweather.com/currentconditions/v1"

# Convert km/h to m/s
KMH_TO_MS = 1.0 / 3.6

DESCRIPTOR = ProviderDescriptor(
    description="AccuWeather (https://www.accuweather.com/)",
    params=(
        ParamDescriptor(
            id="apikey",
            display_name="User's API key",
            description="used to authenticate user requests",
        ),
    ),
    supports_date=False,
)

# WeatherIcon numbers, see https://developer.accuweather.com/weather-icons
ICON_KINDS = {
    WeatherKind.CLEAR: {1, 2, 30, 31, 33, 34},
    WeatherKind.CLOUDS: {3, 4, 5, 6, 7, 8, 32, 35, 36, 37, 38},
    WeatherKind.FOG: {11},
    WeatherKind.RAIN: {12, 13, 14, 15, 16, 17, 18, 39, 40, 41, 42},
    WeatherKind.SNOW: {19, 20, 21, 22, 23, 24, 25, 26, 29, 43, 44},
}

PRECIPITATION_KINDS = {
    "Rain": WeatherKind.RAIN,
    "Snow": WeatherKind.SNOW,
    "Ice": WeatherKind.SNOW,
    "Mixed": WeatherKind.SNOW,
}


class _PascalModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class AccuWeatherError(_PascalModel):
    """Error payload, e.g. {"Code": "Unauthorized", "Message": "..."}."""
    code: str
    message: str

    def __str__(self) -> str:
        return f"API error '{self.code}': {self.message}"


class Location(_PascalModel):
    key: str


class Value(_PascalModel):
    value: float


class ValueEntry(_PascalModel):
    metric: Value


class Wind(_PascalModel):
    speed: ValueEntry


class Condition(_PascalModel):
    weather_icon: Optional[int] = None
    temperature: ValueEntry
    relative_humidity: float
    wind: Wind
    precipitation_type: Optional[str] = None


def _kind_from_icon(icon: Optional[int]) -> WeatherKind:
    """Map an AccuWeather icon number to a category."""
    for kind, icons in ICON_KINDS.items():
        if icon in icons:
            return kind
    return WeatherKind.UNKNOWN


class AccuWeatherProvider:
    """Provider for AccuWeather current conditions."""

    def __init__(self, apikey: str, rest: Optional[RestClient] = None) -> None:
        self._apikey = apikey
        self._rest = rest or RestClient()

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "accuweather"

    @classmethod
    def describe(cls) -> ProviderDescriptor:
        return DESCRIPTOR

    @classmethod
    def from_section(
        cls,
        section: Mapping[str, str],
        rest: Optional[RestClient] = None,
    ) -> "AccuWeatherProvider":
        params = require_params(DESCRIPTOR, section)
        return cls(apikey=params["apikey"], rest=rest)

    @staticmethod
    def weather_kind(code: Optional[int]) -> WeatherKind:
        return _kind_from_icon(code)

    def get_weather(
        self,
        location: str,
        date: Optional[CalendarDate] = None,
    ) -> WeatherRecord:
        """
        Fetch current conditions for a location.

        Raises:
            UnsupportedDateError: If a date is given
            LocationNotFoundError: If the city search has no match
            ProviderRequestError: If a request fails
        """
        if date is not None:
            raise UnsupportedDateError(self.name)

        location_key = self._location_key(location)
        logger.debug("Location key for '%s': %s", location, location_key)

        try:
            conditions = self._rest.fetch(
                f"{CONDITIONS_URL}/{location_key}",
                List[Condition],
                AccuWeatherError,
                params={"apikey": self._apikey, "details": "true"},
            )
        except RestError as e:
            raise ProviderRequestError(self.name, "Could not obtain forecast data") from e

        if not conditions:
            raise ProviderRequestError(self.name, "No current condition entries")
        return self._to_record(conditions[0])

    def _location_key(self, location: str) -> str:
        try:
            matches = self._rest.fetch(
                LOCATION_URL,
                List[Location],
                AccuWeatherError,
                params={"apikey": self._apikey, "q": location},
            )
        except RestError as e:
            raise ProviderRequestError(
                self.name, f"Could not obtain location key for {location}"
            ) from e

        if not matches:
            raise LocationNotFoundError(self.name, location)
        return matches[0].key

    def _to_record(self, condition: Condition) -> WeatherRecord:
        kind = PRECIPITATION_KINDS.get(condition.precipitation_type or "")
        if kind is None:
            kind = self.weather_kind(condition.weather_icon)
        return WeatherRecord(
            kind=kind,
            temperature_c=condition.temperature.metric.value,
            wind_speed_mps=condition.wind.speed.metric.value * KMH_TO_MS,
            humidity_pct=condition.relative_humidity,
        )
