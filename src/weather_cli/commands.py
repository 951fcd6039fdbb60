"""
CLI verbs: configure, get, clear and list.

Each command works on a ProviderRegistry and a ConfigStore and leaves
persistence to the caller: the store is only written after the command
succeeded.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from providers.base import ConfigError, ProviderError
from providers.registry import ProviderRegistry, collect_section
from weather_cli.models import CalendarDate, WeatherRecord
from weather_cli.store import ConfigStore

if TYPE_CHECKING:
    from providers.rest import RestClient

logger = logging.getLogger(__name__)

# Location used to check a new configuration with a real request
DEFAULT_CONFIGURE_LOCATION = "London"

CLEAR_ALL = "all"
DATE_NOW = "now"


class CommandError(Exception):
    """Raised when a command cannot be carried out as requested."""
    pass


def configure_provider(
    registry: ProviderRegistry,
    store: ConfigStore,
    provider: str,
    parameters: Sequence[str],
    prompt: Callable[[str], str] = input,
    rest: Optional["RestClient"] = None,
    reference_location: str = DEFAULT_CONFIGURE_LOCATION,
) -> None:
    """
    Configure a provider from "<name>=<value>" parameters or interactively.

    The new section is checked with one live request before it is stored.
    If the store was empty, the provider also becomes the active one.

    Raises:
        ProviderNotFoundError: If the provider is not registered
        ConfigError: If the parameters are invalid
        CommandError: If the validation request fails (chained to the cause)
    """
    factory = registry.get(provider)
    section = collect_section(factory.describe(), parameters, prompt)

    try:
        instance = factory.construct(section, rest=rest)
        instance.get_weather(reference_location, None)
    except (ConfigError, ProviderError) as e:
        raise CommandError(f"When configuring {provider}") from e

    if store.is_empty():
        store.active = provider
    store.set_section(provider, section)
    logger.info("Provider '%s' configured", provider)


def parse_date(text: str) -> Optional[CalendarDate]:
    """Parse a --date argument; "now" means current conditions."""
    if text == DATE_NOW:
        return None
    return CalendarDate.parse(text)


def get_forecast(
    registry: ProviderRegistry,
    store: ConfigStore,
    address: str,
    date: str = DATE_NOW,
    provider: Optional[str] = None,
    set_default: bool = False,
    rest: Optional["RestClient"] = None,
) -> WeatherRecord:
    """
    Get weather at an address using the given or the active provider.

    Raises:
        CommandError: If no provider can be determined or it isn't configured
        ProviderNotFoundError: If the provider is not registered
        DateParseError: If the date is malformed
        ProviderError: If the provider request fails
    """
    if set_default and provider is None:
        raise CommandError("'--set-default' works only with '--provider' argument")

    provider_name = provider or store.active
    if provider_name is None:
        raise CommandError(
            "Active provider not specified. Please use '--provider <name> --set-default' "
            "to specify new default one"
        )

    factory = registry.get(provider_name)
    section = store.section(provider_name)
    if section is None:
        raise CommandError(f"Missing config for provider '{provider_name}'")

    forecast_date = parse_date(date)

    try:
        instance = factory.construct(section, rest=rest)
    except (ConfigError, ProviderError) as e:
        raise CommandError(f"When trying to construct provider '{provider_name}'") from e

    record = instance.get_weather(address, forecast_date)

    if set_default:
        store.active = provider_name
    return record


def clear_providers(
    registry: ProviderRegistry,
    store: ConfigStore,
    providers: Sequence[str],
) -> None:
    """
    Remove stored sections of the named providers ("all" for every provider).

    Removing a registered provider without a section is a no-op. Names are
    checked before anything is removed.

    Raises:
        CommandError: If no provider names are given
        ProviderNotFoundError: If a name is neither registered nor "all"
    """
    if not providers:
        raise CommandError("No providers specified; use 'all' to clear every provider")

    names: List[str] = []
    for name in providers:
        if name == CLEAR_ALL:
            names.extend(registry.names())
        else:
            registry.get(name)
            names.append(name)

    for name in names:
        if store.remove_section(name):
            logger.info("Cleared configuration of '%s'", name)

    if store.active is not None and not store.has_section(store.active):
        store.active = None


def list_providers(registry: ProviderRegistry, store: ConfigStore) -> str:
    """Describe every registered provider, in name order."""
    blocks = []
    for name, factory in registry.iterate():
        descriptor = factory.describe()
        flags = []
        if store.has_section(name):
            flags.append("configured")
        if store.active == name:
            flags.append("active")
        header = name + (f" [{', '.join(flags)}]" if flags else "")

        lines = [header, f"  {descriptor.description}"]
        lines.append(
            "  Dates: " + ("supported" if descriptor.supports_date else "current conditions only")
        )
        if descriptor.params:
            lines.append("  Parameters:")
            for param in descriptor.params:
                lines.append(f"    {param.id} - {param.display_name}, {param.description}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
