"""
CLI entry point for weather-cli.

Thin layer that wires together configuration, registry, and commands.
Business logic lives in commands and providers, this module only handles:
- Argument parsing
- Logging setup
- Loading and saving the configuration file
- Error rendering and exit codes
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from providers.base import ConfigError, ProviderError
from providers.registry import ProviderRegistry, default_registry
from providers.rest import RestClient, RestError
from weather_cli.commands import (
    DATE_NOW,
    CommandError,
    clear_providers,
    configure_provider,
    get_forecast,
    list_providers,
)
from weather_cli.config import Settings
from weather_cli.models import DateParseError
from weather_cli.store import ConfigStore, StoreError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# httpx logs full request URLs at INFO, query strings carry API keys
QUIET_LOGGERS = ("httpx", "httpcore")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="weather-cli",
        description="Command-line client for weather forecast services",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to alternative config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    configure = sub.add_parser(
        "configure",
        help="Configure specified forecast provider",
        description=(
            "Configuration is specified as a sequence of '<name>=<value>' entries. "
            "If no values are specified, runs in interactive mode."
        ),
    )
    configure.add_argument("provider", help="Name of provider to configure")
    configure.add_argument(
        "parameters",
        nargs="*",
        metavar="NAME=VALUE",
        help="Configuration parameters",
    )

    get = sub.add_parser("get", help="Get weather data using specified provider")
    get.add_argument("address", help="Address of location for which weather is requested")
    get.add_argument(
        "-d",
        "--date",
        default=DATE_NOW,
        help="Date as YYYY-MM-DD, or 'now' for current conditions (default: now)",
    )
    get.add_argument(
        "-p",
        "--provider",
        help="Use specified provider instead of default one",
    )
    get.add_argument(
        "-s",
        "--set-default",
        action="store_true",
        help="Set provider given by '--provider' as default one",
    )

    clear = sub.add_parser("clear", help="Clear configuration of specified or all providers")
    clear.add_argument(
        "providers",
        nargs="+",
        help="Names of providers to clear; 'all' clears every provider",
    )

    sub.add_parser("list", help="List available providers and their parameters")
    return parser


def setup_logging(verbose: bool, level: str = "WARNING") -> None:
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def format_error(error: BaseException) -> str:
    """Render an error followed by its chain of causes."""
    lines = [f"Error: {error}"]
    seen = {id(error)}
    cause = error.__cause__ or error.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"Caused by: {cause}")
        cause = cause.__cause__ or cause.__context__
    return "\n".join(lines)


def main(
    argv: Optional[List[str]] = None,
    registry: Optional[ProviderRegistry] = None,
    prompt: Callable[[str], str] = input,
) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)
        registry: Provider registry (built-in providers if None)
        prompt: Callable used for interactive configuration

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as e:
        print(format_error(e), file=sys.stderr)
        return 1
    setup_logging(args.verbose, settings.log_level)

    if registry is None:
        registry = default_registry()
    config_path = args.config or settings.resolved_config_path()

    try:
        store = ConfigStore.load(config_path)
        with RestClient(timeout=settings.timeout) as rest:
            _run_command(args, registry, store, rest, prompt, settings)
        if store.modified:
            store.save()
    except (CommandError, ConfigError, ProviderError, RestError, StoreError, DateParseError) as e:
        logger.debug("Command failed", exc_info=True)
        print(format_error(e), file=sys.stderr)
        return 1
    return 0


def _run_command(
    args: argparse.Namespace,
    registry: ProviderRegistry,
    store: ConfigStore,
    rest: RestClient,
    prompt: Callable[[str], str],
    settings: Settings,
) -> None:
    if args.command == "configure":
        configure_provider(
            registry,
            store,
            args.provider,
            args.parameters,
            prompt=prompt,
            rest=rest,
            reference_location=settings.reference_location,
        )
    elif args.command == "get":
        record = get_forecast(
            registry,
            store,
            args.address,
            date=args.date,
            provider=args.provider,
            set_default=args.set_default,
            rest=rest,
        )
        print(record)
    elif args.command == "clear":
        clear_providers(registry, store, args.providers)
    elif args.command == "list":
        print(list_providers(registry, store))


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
