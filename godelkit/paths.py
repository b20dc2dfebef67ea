"""File naming for plugins and helpers for locator and resolver lists."""

from __future__ import annotations

import os
from typing import Iterable, Optional

from godelkit.models import Locator


def plugin_file_name(locator: Locator) -> str:
    """Return ``group-product-version`` for the locator."""
    return f"{locator.group}-{locator.product}-{locator.version}"


def plugin_path(plugin_dir: str, locator: Locator) -> str:
    """Return the path of the plugin file for the locator within the plugin directory."""
    return os.path.join(plugin_dir, plugin_file_name(locator))


def config_provider_file_name(locator: Locator) -> str:
    """Return the file name for a configuration provider."""
    return plugin_file_name(locator) + ".yml"


def sort_locators(locators: Iterable[Locator]) -> list[Locator]:
    """Return the locators ordered by their string form."""
    return sorted(locators, key=str)


def uniquify(values: Optional[Iterable[str]]) -> Optional[list[str]]:
    """Return the values with duplicates removed, keeping first occurrences in order."""
    if values is None:
        return None
    return list(dict.fromkeys(values))