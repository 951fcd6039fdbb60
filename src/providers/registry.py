"""
Provider registry and configuration collection.

The registry is a name-keyed catalog of provider factories. It holds no
vendor-specific logic: new vendors are added by registering another
provider class in `default_registry`.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type

from providers.base import (
    BadSyntaxError,
    MissingParameterError,
    ProviderNotFoundError,
    UnknownParameterError,
    WeatherProvider,
)
from weather_cli.models import ConfigSection, ProviderDescriptor

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


class DuplicateProviderError(RuntimeError):
    """Raised when a provider name is registered twice (build defect)."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Provider {name} already registered")


class ProviderFactory:
    """
    Factory companion to a provider class.

    Holds only the provider type and forwards to its static operations.
    """

    def __init__(self, provider_cls: Type[WeatherProvider]) -> None:
        self._provider_cls = provider_cls

    def describe(self) -> ProviderDescriptor:
        return self._provider_cls.describe()

    def construct(self, section: Mapping[str, str], rest=None) -> WeatherProvider:
        """
        Create a provider instance bound to a configuration section.

        Raises:
            MissingParameterError: If a declared parameter is absent
        """
        return self._provider_cls.from_section(section, rest=rest)

    def __repr__(self) -> str:
        return f"ProviderFactory({self._provider_cls.__name__})"


class ProviderRegistry:
    """
    Catalog of provider factories keyed by name.

    Iteration is always in lexicographic name order so that listings
    are stable between invocations.

    Example:
        >>> registry = ProviderRegistry()
        >>> registry.add_provider("openweather", OpenWeatherProvider)
        >>> registry.lookup("openweather").describe().description
        'OpenWeather (https://openweathermap.org/)'
    """

    def __init__(self) -> None:
        self._factories: Dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """
        Add a named factory.

        Raises:
            DuplicateProviderError: If the name is already registered
        """
        if name in self._factories:
            raise DuplicateProviderError(name)
        self._factories[name] = factory

    def add_provider(self, name: str, provider_cls: Type[WeatherProvider]) -> None:
        """Register a provider class under a name."""
        self.register(name, ProviderFactory(provider_cls))

    def lookup(self, name: str) -> Optional[ProviderFactory]:
        return self._factories.get(name)

    def get(self, name: str) -> ProviderFactory:
        """
        Look up a factory, failing for unknown names.

        Raises:
            ProviderNotFoundError: If no provider has this name
        """
        factory = self.lookup(name)
        if factory is None:
            raise ProviderNotFoundError(name)
        return factory

    def iterate(self) -> List[Tuple[str, ProviderFactory]]:
        """Return (name, factory) pairs ordered by name."""
        return sorted(self._factories.items())

    def names(self) -> List[str]:
        return [name for name, _ in self.iterate()]

    def __iter__(self) -> Iterator[Tuple[str, ProviderFactory]]:
        return iter(self.iterate())

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def default_registry() -> ProviderRegistry:
    """Registry with all built-in providers."""
    from providers.accuweather import AccuWeatherProvider
    from providers.openweather import OpenWeatherProvider
    from providers.weatherapi import WeatherApiProvider

    registry = ProviderRegistry()
    registry.add_provider("openweather", OpenWeatherProvider)
    registry.add_provider("weatherapi", WeatherApiProvider)
    registry.add_provider("accuweather", AccuWeatherProvider)
    return registry


def collect_section(
    descriptor: ProviderDescriptor,
    tokens: Sequence[str],
    prompt: Prompt = input,
) -> ConfigSection:
    """
    Build a configuration section from "<name>=<value>" tokens.

    Without tokens, every declared parameter is asked for interactively
    in descriptor order.

    Args:
        descriptor: Descriptor of the provider being configured
        tokens: Command-line parameter tokens
        prompt: Callable used for interactive answers

    Returns:
        New configuration section

    Raises:
        BadSyntaxError: If a token has no '='
        UnknownParameterError: If a token names an undeclared parameter
        MissingParameterError: For the first declared parameter left without value
    """
    if not tokens:
        return _prompt_section(descriptor, prompt)

    declared = set(descriptor.param_ids())
    section: ConfigSection = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep:
            raise BadSyntaxError(token)
        if key not in declared:
            raise UnknownParameterError(key)
        section[key] = value

    for param_id in descriptor.param_ids():
        if param_id not in section:
            raise MissingParameterError(param_id)
    return section


def _prompt_section(descriptor: ProviderDescriptor, prompt: Prompt) -> ConfigSection:
    section: ConfigSection = {}
    for param in descriptor.params:
        answer = prompt(f"{param.display_name} ({param.description}): ").strip()
        if not answer:
            raise MissingParameterError(param.id)
        section[param.id] = answer
    logger.debug("Collected %d parameters interactively", len(section))
    return section
