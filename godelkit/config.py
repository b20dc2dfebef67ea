"""Turning configuration into parameters, combining task configuration and reading config files."""

from __future__ import annotations

import copy
import json
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from godelkit.models import (
    ConfigProviderLocatorConfig,
    ConfigProviderLocatorWithResolverConfig,
    GodelConfig,
    Locator,
    LocatorConfig,
    LocatorWithResolverConfig,
    NamesPathsConfig,
    PluginsConfig,
    SinglePluginConfig,
    TasksConfig,
    TasksConfigProvidersConfig,
    load_godel_config,
    load_yaml,
    upgrade_v0_config,
)
from godelkit.paths import uniquify

GODEL_CONFIG_YML = "godel.yml"

_MACHINE_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}

PathLike = Union[str, "os.PathLike[str]"]


class ConfigError(ValueError):
    """Raised when configuration is invalid or cannot be read."""


@dataclass
class LocatorParam:
    """A parsed locator with checksums keyed by OS/architecture."""

    locator: Locator
    checksums: dict[str, str] = field(default_factory=dict)

    def group_and_product(self) -> str:
        """Return ``group:product`` of the locator."""
        return self.locator.group_and_product()


@dataclass
class LocatorWithResolverParam:
    """A parsed locator and the resolver template to fetch it with, if any."""

    locator_with_checksums: LocatorParam
    resolver: Optional[str] = None


@dataclass
class SinglePluginParam:
    """A parsed plugin with its assets."""

    locator_with_resolver: LocatorWithResolverParam
    assets: list[LocatorWithResolverParam] = field(default_factory=list)


@dataclass
class PluginsParam:
    """Parsed plugin configuration."""

    default_resolvers: list[str] = field(default_factory=list)
    plugins: list[SinglePluginParam] = field(default_factory=list)


@dataclass
class TasksConfigProvidersParam:
    """Parsed task configuration providers."""

    default_resolvers: list[str] = field(default_factory=list)
    config_providers: list[LocatorWithResolverParam] = field(default_factory=list)


def _current_os_arch() -> str:
    system = platform.system().lower()
    machine = platform.machine().lower()
    return f"{system}-{_MACHINE_ARCH.get(machine, machine)}"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _check_os_arch(key: str) -> None:
    parts = key.split("-")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"{_quote(key)} is not of the form os-arch")


def locator_param(config: LocatorConfig) -> LocatorParam:
    """Parse a locator configuration of the form ``group:product:version``."""
    parts = config.id.split(":")
    if len(parts) != 3:
        raise ConfigError(
            "locator ID must consist of 3 colon-delimited components "
            f"([group]:[product]:[version]), but had {len(parts)}: {_quote(config.id)}"
        )
    checksums: dict[str, str] = {}
    for key, value in config.checksums.items():
        try:
            _check_os_arch(key)
        except ValueError as exc:
            raise ConfigError(
                f"invalid OSArch specified in checksum key for {config.id}: {exc}"
            ) from exc
        checksums[key] = value
    group, product, version = parts
    return LocatorParam(Locator(group, product, version), checksums)


def provider_locator_config(
    config: ConfigProviderLocatorConfig, os_arch: Optional[str] = None
) -> LocatorConfig:
    """Turn a provider locator into a locator whose checksum, if any, is keyed by ``os_arch``."""
    if os_arch is None:
        os_arch = _current_os_arch()
    checksums = {os_arch: config.checksum} if config.checksum else {}
    return LocatorConfig(id=config.id, checksums=checksums)


def locator_with_resolver_param(config: LocatorWithResolverConfig) -> LocatorWithResolverParam:
    """Parse a locator with its optional resolver."""
    try:
        locator = locator_param(config.locator)
    except ConfigError as exc:
        raise ConfigError(f"invalid locator: {exc}") from exc
    return LocatorWithResolverParam(locator, config.resolver or None)


def provider_locator_with_resolver_param(
    config: ConfigProviderLocatorWithResolverConfig, os_arch: Optional[str] = None
) -> LocatorWithResolverParam:
    """Parse a configuration provider; its checksum is keyed by ``os_arch``."""
    locator = provider_locator_config(config.locator, os_arch)
    return locator_with_resolver_param(LocatorWithResolverConfig(locator, config.resolver))


def single_plugin_param(config: SinglePluginConfig) -> SinglePluginParam:
    """Parse one plugin configuration and its assets."""
    return SinglePluginParam(
        locator_with_resolver_param(config.locator_with_resolver),
        [locator_with_resolver_param(asset) for asset in config.assets],
    )


def plugins_param(config: PluginsConfig) -> PluginsParam:
    """Parse a plugins configuration."""
    return PluginsParam(
        list(config.default_resolvers),
        [single_plugin_param(plugin) for plugin in config.plugins],
    )


def tasks_config_providers_param(
    config: TasksConfigProvidersConfig, os_arch: Optional[str] = None
) -> TasksConfigProvidersParam:
    """Parse the task configuration providers."""
    return TasksConfigProvidersParam(
        list(config.default_resolvers),
        [provider_locator_with_resolver_param(p, os_arch) for p in config.config_providers],
    )


def _override_keys(plugins: list[SinglePluginConfig]) -> set[str]:
    keys = set()
    for plugin in plugins:
        if not plugin.override:
            continue
        try:
            keys.add(locator_param(plugin.locator).group_and_product())
        except ConfigError:
            continue
    return keys


def combine_tasks_config(base: TasksConfig, *args: TasksConfig) -> TasksConfig:
    """Combine task configurations onto ``base``; later values win.

    Resolvers are appended without duplicates, default task entries are merged, and
    plugins from ``args`` marked ``override`` replace base plugins of the same group
    and product. ``base`` is left unchanged.
    """
    result = copy.deepcopy(base)
    added_plugins: list[SinglePluginConfig] = []
    for cfg in args:
        result.default_tasks.default_resolvers = uniquify(
            result.default_tasks.default_resolvers + cfg.default_tasks.default_resolvers
        )
        result.default_tasks.tasks.update(copy.deepcopy(cfg.default_tasks.tasks))
        result.plugins.default_resolvers = uniquify(
            result.plugins.default_resolvers + cfg.plugins.default_resolvers
        )
        added_plugins.extend(copy.deepcopy(cfg.plugins.plugins))

    overridden = _override_keys(added_plugins)

    def kept(plugin: SinglePluginConfig) -> bool:
        try:
            key = locator_param(plugin.locator).group_and_product()
        except ConfigError:
            return True
        return key not in overridden

    result.plugins.plugins = [p for p in result.plugins.plugins if kept(p)] + added_plugins
    return result


def _config_version(cfg_bytes: bytes) -> str:
    try:
        data = load_yaml(cfg_bytes)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        return ""
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")
    version: Any = data.get("version")
    if version is None:
        return ""
    if isinstance(version, (dict, list)):
        raise ConfigError("version must be a scalar")
    return str(version)


def upgrade_config(cfg_bytes: bytes) -> bytes:
    """Upgrade configuration bytes to the current form; current configuration is returned as is."""
    version = _config_version(cfg_bytes)
    if version not in ("", "0"):
        raise ConfigError(f"unsupported version: {version}")
    try:
        return upgrade_v0_config(cfg_bytes)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def read_godel_config(path: PathLike) -> GodelConfig:
    """Read the configuration file; a missing file gives an empty configuration."""
    cfg_path = Path(path)
    if not cfg_path.exists():
        return GodelConfig()
    try:
        data = cfg_path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"failed to read file {cfg_path}: {exc}") from exc
    try:
        upgraded = upgrade_config(data)
    except ConfigError as exc:
        raise ConfigError(f"failed to upgrade configuration: {exc}") from exc
    try:
        return load_godel_config(upgraded)
    except ValueError as exc:
        raise ConfigError(f"failed to unmarshal gödel config YAML: {exc}") from exc


def read_godel_config_excludes(path: PathLike) -> NamesPathsConfig:
    """Read only the ``exclude`` section of the configuration file.

    Other keys are ignored, so this tolerates configuration it does not otherwise understand.
    A missing file gives an empty result.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        return NamesPathsConfig()
    try:
        data = load_yaml(cfg_path.read_bytes())
    except (OSError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        return NamesPathsConfig()
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")
    try:
        return NamesPathsConfig.from_dict(data.get("exclude"))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc