"""
Persisted provider configuration.

Stores one flat string section per configured provider plus the name of
the active provider in a JSON file:

    {"current": "openweather", "providers": {"openweather": {"apikey": "..."}}}
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from weather_cli.models import ConfigSection

logger = logging.getLogger(__name__)

ACTIVE_ENTRY = "current"
PROVIDERS_ENTRY = "providers"


class StoreError(Exception):
    """Error loading or saving the configuration file."""
    pass


class ConfigStore:
    """
    In-memory view of the configuration file.

    Mutations only mark the store as modified; `save` writes it back.
    """

    def __init__(
        self,
        path: Union[str, Path],
        sections: Optional[Dict[str, ConfigSection]] = None,
        active: Optional[str] = None,
    ) -> None:
        self.path = Path(path)
        self._sections: Dict[str, ConfigSection] = dict(sections or {})
        self._active = active
        self.modified = False

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ConfigStore":
        """
        Load the store from a JSON file; a missing file gives an empty store.

        Raises:
            StoreError: If the path is not a file or its content is invalid
        """
        path = Path(path)
        if not path.exists():
            logger.debug("No config file at %s, starting empty", path)
            return cls(path)
        if not path.is_file():
            raise StoreError(f"Path '{path}' exists yet points not to file")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StoreError(f"When reading config file '{path}': {e}") from e
        except json.JSONDecodeError as e:
            raise StoreError(f"When parsing config file '{path}': {e}") from e

        sections, active = _parse_document(data, path)
        return cls(path, sections, active)

    def section(self, name: str) -> Optional[ConfigSection]:
        """Copy of a provider's section, or None if not configured."""
        section = self._sections.get(name)
        return dict(section) if section is not None else None

    def sections(self) -> Dict[str, ConfigSection]:
        return {name: dict(values) for name, values in self._sections.items()}

    def has_section(self, name: str) -> bool:
        return name in self._sections

    def set_section(self, name: str, section: ConfigSection) -> None:
        self._sections[name] = dict(section)
        self.modified = True

    def remove_section(self, name: str) -> bool:
        """Remove a section; absent sections are ignored. Returns True if removed."""
        if self._sections.pop(name, None) is None:
            return False
        self.modified = True
        return True

    @property
    def active(self) -> Optional[str]:
        return self._active

    @active.setter
    def active(self, name: Optional[str]) -> None:
        if name != self._active:
            self._active = name
            self.modified = True

    def is_empty(self) -> bool:
        return not self._sections and self._active is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self._active is not None:
            data[ACTIVE_ENTRY] = self._active
        data[PROVIDERS_ENTRY] = {
            name: dict(sorted(values.items()))
            for name, values in sorted(self._sections.items())
        }
        return data

    def save(self) -> None:
        """
        Write the store back, replacing the file atomically.

        Raises:
            StoreError: If the directory or file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"When creating config directory {self.path.parent}: {e}") from e

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self.to_dict(), f, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StoreError(f"When writing configuration to {self.path}: {e}") from e

        self.modified = False
        logger.info("Configuration saved to %s", self.path)


def _parse_document(data: Any, path: Path):
    if not isinstance(data, dict):
        raise StoreError(f"Invalid config file '{path}': expected a JSON object")

    active = data.get(ACTIVE_ENTRY)
    if active is not None and not isinstance(active, str):
        raise StoreError(f"Invalid config file '{path}': '{ACTIVE_ENTRY}' must be a string")

    raw_sections = data.get(PROVIDERS_ENTRY, {})
    if not isinstance(raw_sections, dict):
        raise StoreError(f"Invalid config file '{path}': '{PROVIDERS_ENTRY}' must be an object")

    sections: Dict[str, ConfigSection] = {}
    for name, values in raw_sections.items():
        if not isinstance(values, dict) or not all(
            isinstance(v, str) for v in values.values()
        ):
            raise StoreError(
                f"Invalid config file '{path}': section '{name}' must map names to strings"
            )
        sections[name] = dict(values)
    return sections, active
