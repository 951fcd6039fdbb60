"""
Weather provider protocol and error taxonomy.

Defines the interface that all weather providers must implement,
enabling the command layer to treat every vendor identically.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from providers.rest import RestClient
    from weather_cli.models import (
        CalendarDate,
        ProviderDescriptor,
        WeatherKind,
        WeatherRecord,
    )


@runtime_checkable
class WeatherProvider(Protocol):
    """
    Protocol for weather data providers.

    Providers are constructed from a flat string section (see
    `from_section`) and never touch the network until `get_weather`
    is called. Uses structural subtyping (PEP 544).

    Example:
        >>> provider = OpenWeatherProvider.from_section({"apikey": "..."})
        >>> record = provider.get_weather("London", None)
    """

    @property
    def name(self) -> str:
        """
        Provider identifier.

        Returns:
            Registry name like "openweather", "weatherapi"
        """
        ...

    @classmethod
    def describe(cls) -> "ProviderDescriptor":
        """Static description of the provider and its parameters."""
        ...

    @classmethod
    def from_section(
        cls,
        section: Mapping[str, str],
        rest: Optional["RestClient"] = None,
    ) -> "WeatherProvider":
        """
        Create a provider from its configuration section.

        Args:
            section: Parameter id -> value mapping; not retained
            rest: Optional REST client (a default one is created otherwise)

        Raises:
            MissingParameterError: If a declared parameter is absent
        """
        ...

    @staticmethod
    def weather_kind(code: Any) -> "WeatherKind":
        """Map a vendor weather code to a category."""
        ...

    def get_weather(
        self,
        location: str,
        date: Optional["CalendarDate"] = None,
    ) -> "WeatherRecord":
        """
        Fetch weather for a location.

        Args:
            location: Free-text location, e.g. "Washington"
            date: Day of interest; None means current conditions

        Returns:
            Normalized weather record

        Raises:
            UnsupportedDateError: If a date is given and the vendor has none
            LocationNotFoundError: If the location cannot be resolved
            ProviderRequestError: If a request fails
        """
        ...


class ConfigError(ValueError):
    """Base exception for provider configuration errors."""
    pass


class MissingParameterError(ConfigError):
    """Raised when a declared parameter has no value."""

    def __init__(self, param_id: str) -> None:
        self.param_id = param_id
        super().__init__(f"Missing parameter '{param_id}'")


class UnknownParameterError(ConfigError):
    """Raised when a parameter is not declared by the provider."""

    def __init__(self, param_id: str) -> None:
        self.param_id = param_id
        super().__init__(f"Unknown parameter '{param_id}'")


class BadSyntaxError(ConfigError):
    """Raised when a parameter token is not of the form <name>=<value>."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Argument '{token}' cannot be parsed as '<name>=<value>' parameter"
        )


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ProviderNotFoundError(ProviderError):
    """Raised when an unknown provider is requested."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"No such provider: {name}")


class UnsupportedDateError(ProviderError):
    """Raised when a date is requested from a provider without date support."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            provider, "Sorry, requesting weather for specific date isn't supported"
        )


class LocationNotFoundError(ProviderError):
    """Raised when a location lookup returns no results."""

    def __init__(self, provider: str, location: str) -> None:
        self.location = location
        super().__init__(provider, f"Could not resolve location '{location}'")


class ProviderRequestError(ProviderError):
    """Raised when a provider request fails; chained to the RestError."""

    pass


def require_params(
    descriptor: "ProviderDescriptor",
    section: Mapping[str, str],
) -> Dict[str, str]:
    """
    Check a section against a descriptor.

    Args:
        descriptor: Provider descriptor listing required parameters
        section: Configuration section

    Returns:
        Copy of the declared parameters' values

    Raises:
        MissingParameterError: For the first absent id in descriptor order
    """
    values: Dict[str, str] = {}
    for param in descriptor.params:
        if param.id not in section:
            raise MissingParameterError(param.id)
        values[param.id] = section[param.id]
    return values
