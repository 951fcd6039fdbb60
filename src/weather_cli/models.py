"""
Value types shared by all weather providers.

Defines the normalized weather record returned to callers, the static
descriptors each provider publishes about its configuration, and the
calendar date used for date-specific requests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Tuple

# Flat provider configuration: parameter id -> raw string value
ConfigSection = Dict[str, str]


class WeatherKind(str, Enum):
    """Coarse weather category, common to all vendors."""
    UNKNOWN = "unknown"
    CLEAR = "clear"
    CLOUDS = "clouds"
    FOG = "fog"
    RAIN = "rain"
    SNOW = "snow"


@dataclass(frozen=True)
class WeatherRecord:
    """
    Normalized weather observation.

    Produced once per successful provider request, regardless of vendor.
    """
    kind: WeatherKind
    temperature_c: float
    wind_speed_mps: float
    humidity_pct: float

    def __str__(self) -> str:
        return (
            f"Weather: {self.kind.value}\n"
            f"Temperature: {self.temperature_c:.1f} C\n"
            f"Wind speed: {self.wind_speed_mps:.1f} m/s\n"
            f"Humidity: {self.humidity_pct:.0f}%"
        )


@dataclass(frozen=True)
class ParamDescriptor:
    """One required configuration key of a provider."""
    id: str
    display_name: str
    description: str


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of a provider type and its configuration."""
    description: str
    params: Tuple[ParamDescriptor, ...] = field(default_factory=tuple)
    supports_date: bool = False  # historical/forecast requests

    def param_ids(self) -> Tuple[str, ...]:
        """Parameter ids in declaration order."""
        return tuple(p.id for p in self.params)


class DateParseError(ValueError):
    """Raised when a calendar date string cannot be parsed."""
    pass


@dataclass(frozen=True)
class CalendarDate:
    """
    Calendar date parsed from and printed as YYYY-MM-DD.

    Only component ranges are checked; 2023-02-31 is accepted.
    """
    year: int
    month: int
    day: int

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    @classmethod
    def parse(cls, text: str) -> "CalendarDate":
        """
        Parse a date from "YYYY-MM-DD" form.

        Args:
            text: Date string

        Returns:
            Parsed CalendarDate

        Raises:
            DateParseError: If the string has the wrong number of components
                or a component is not a valid number
        """
        parts = text.strip().split("-")
        if len(parts) != 3:
            raise DateParseError("Invalid number of date components")

        year = _parse_component(parts[0], "year", 0, 9999)
        month = _parse_component(parts[1], "month", 1, 12)
        day = _parse_component(parts[2], "day", 1, 31)
        return cls(year=year, month=month, day=day)

    @classmethod
    def from_date(cls, value: date) -> "CalendarDate":
        return cls(year=value.year, month=value.month, day=value.day)

    @classmethod
    def today(cls) -> "CalendarDate":
        """Current local date."""
        return cls.from_date(date.today())

    def to_date(self) -> date:
        """Convert to datetime.date (raises ValueError for impossible dates)."""
        return date(self.year, self.month, self.day)


def _parse_component(raw: str, name: str, low: int, high: int) -> int:
    if not raw.isdigit():
        raise DateParseError(f"Error parsing date's {name} component")
    value = int(raw)
    if not low <= value <= high:
        raise DateParseError(f"Error parsing date's {name} component")
    return value
