"""
WeatherAPI.com Provider.

The only built-in provider with date support:
- current.json: current conditions (no date)
- history.json: past days and today
- forecast.json: future days (up to 14 days ahead)

Locations are passed as free text; the API resolves them itself.

API Documentation: https://www.weatherapi.com/docs/
"""
from __future__ import annotations

import logging
from datetime import date as dt_date
from typing import List, Mapping, Optional

from pydantic import BaseModel

from providers.base import ProviderRequestError, require_params
from providers.rest import RestClient, RestError
from weather_cli.models import (
    CalendarDate,
    ParamDescriptor,
    ProviderDescriptor,
    WeatherKind,
    WeatherRecord,
)

logger = logging.getLogger(__name__)

BASE_URL = "http://api.weatherapi.com/v1"

# Convert km/h to m/s
KMH_TO_MS = 1.0 / 3.6

# Hour of day used for date-specific requests
NOON = 12

DESCRIPTOR = ProviderDescriptor(
    description="WeatherAPI.com (https://www.weatherapi.com/)",
    params=(
        ParamDescriptor(
            id="apikey",
            display_name="User's API key",
            description="used to authenticate user requests",
        ),
    ),
    supports_date=True,
)

# Condition codes, see https://www.weatherapi.com/docs/weather_conditions.json
CLEAR_CODES = {1000}
CLOUD_CODES = {1003, 1006, 1009}
FOG_CODES = {1030, 1135, 1147}
RAIN_CODES = {
    1063, 1072, 1087, 1150, 1153, 1168, 1171, 1180, 1183, 1186, 1189,
    1192, 1195, 1198, 1201, 1240, 1243, 1246, 1273, 1276,
}
SNOW_CODES = {
    1066, 1069, 1114, 1117, 1204, 1207, 1210, 1213, 1216, 1219, 1222,
    1225, 1237, 1249, 1252, 1255, 1258, 1261, 1264, 1279, 1282,
}


class ApiErrorInner(BaseModel):
    code: int
    message: str


class WeatherApiError(BaseModel):
    """Error payload, e.g. {"error": {"code": 2006, "message": "..."}}."""
    error: ApiErrorInner

    def __str__(self) -> str:
        return f"API call error {self.error.code}: {self.error.message}"


class ConditionCode(BaseModel):
    code: int


class Current(BaseModel):
    temp_c: float
    wind_kph: float
    humidity: float
    condition: ConditionCode


class CurrentResponse(BaseModel):
    current: Current


class Hour(BaseModel):
    time: str  # "2024-01-01 12:00"
    temp_c: float
    wind_kph: float
    humidity: float
    condition: ConditionCode


class Day(BaseModel):
    avgtemp_c: float
    maxwind_kph: float
    avghumidity: float
    condition: ConditionCode


class ForecastDay(BaseModel):
    date: str
    day: Day
    hour: List[Hour] = []


class Forecast(BaseModel):
    forecastday: List[ForecastDay]


class ForecastResponse(BaseModel):
    forecast: Forecast


def _kind_from_code(code: int) -> WeatherKind:
    """Map a WeatherAPI.com condition code to a category."""
    if code in CLEAR_CODES:
        return WeatherKind.CLEAR
    if code in CLOUD_CODES:
        return WeatherKind.CLOUDS
    if code in FOG_CODES:
        return WeatherKind.FOG
    if code in RAIN_CODES:
        return WeatherKind.RAIN
    if code in SNOW_CODES:
        return WeatherKind.SNOW
    return WeatherKind.UNKNOWN


class WeatherApiProvider:
    """Provider for WeatherAPI.com current, historical and forecast data."""

    def __init__(self, apikey: str, rest: Optional[RestClient] = None) -> None:
        self._apikey = apikey
        self._rest = rest or RestClient()

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "weatherapi"

    @classmethod
    def describe(cls) -> ProviderDescriptor:
        return DESCRIPTOR

    @classmethod
    def from_section(
        cls,
        section: Mapping[str, str],
        rest: Optional[RestClient] = None,
    ) -> "WeatherApiProvider":
        params = require_params(DESCRIPTOR, section)
        return cls(apikey=params["apikey"], rest=rest)

    @staticmethod
    def weather_kind(code: int) -> WeatherKind:
        return _kind_from_code(code)

    def get_weather(
        self,
        location: str,
        date: Optional[CalendarDate] = None,
    ) -> WeatherRecord:
        """
        Fetch weather for a location, optionally on a given day.

        For a date, the noon hour is used when the response contains hourly
        entries, otherwise the day aggregate.

        Raises:
            ProviderRequestError: If the request fails or the day is missing
        """
        if date is None:
            return self._current(location)
        return self._for_day(location, date)

    def _current(self, location: str) -> WeatherRecord:
        try:
            data = self._rest.fetch(
                f"{BASE_URL}/current.json",
                CurrentResponse,
                WeatherApiError,
                params={"key": self._apikey, "q": location},
            )
        except RestError as e:
            raise ProviderRequestError(self.name, "Could not obtain current weather") from e

        current = data.current
        return WeatherRecord(
            kind=self.weather_kind(current.condition.code),
            temperature_c=current.temp_c,
            wind_speed_mps=current.wind_kph * KMH_TO_MS,
            humidity_pct=current.humidity,
        )

    def _for_day(self, location: str, date: CalendarDate) -> WeatherRecord:
        endpoint = "forecast.json" if _is_future(date) else "history.json"
        logger.debug("Requesting %s for %s", endpoint, date)
        try:
            data = self._rest.fetch(
                f"{BASE_URL}/{endpoint}",
                ForecastResponse,
                WeatherApiError,
                params={"key": self._apikey, "q": location, "dt": str(date)},
            )
        except RestError as e:
            raise ProviderRequestError(
                self.name, f"Could not obtain weather for {date}"
            ) from e

        days = data.forecast.forecastday
        if not days:
            raise ProviderRequestError(self.name, f"No forecast entries for {date}")
        day = days[0]

        hour = _noon_entry(day.hour)
        if hour is not None:
            return WeatherRecord(
                kind=self.weather_kind(hour.condition.code),
                temperature_c=hour.temp_c,
                wind_speed_mps=hour.wind_kph * KMH_TO_MS,
                humidity_pct=hour.humidity,
            )
        return WeatherRecord(
            kind=self.weather_kind(day.day.condition.code),
            temperature_c=day.day.avgtemp_c,
            wind_speed_mps=day.day.maxwind_kph * KMH_TO_MS,
            humidity_pct=day.day.avghumidity,
        )


def _is_future(date: CalendarDate) -> bool:
    # Compared as tuples; impossible days like 02-31 are left to the API.
    today = dt_date.today()
    return (date.year, date.month, date.day) > (today.year, today.month, today.day)


def _noon_entry(hours: List[Hour]) -> Optional[Hour]:
    suffix = f" {NOON:02d}:00"
    for hour in hours:
        if hour.time.endswith(suffix):
            return hour
    return None
