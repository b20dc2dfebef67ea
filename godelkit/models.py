"""Configuration data model for the launcher, with YAML loading and dumping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

import yaml

_NULL_TAG = "tag:yaml.org,2002:null"


class _ConfigLoader(yaml.SafeLoader):
    """Safe loader that resolves only nulls implicitly; other plain scalars stay text."""


_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == _NULL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

_TRUE_WORDS = frozenset("y Y yes Yes YES true True TRUE on On ON".split())
_FALSE_WORDS = frozenset("n N no No NO false False FALSE off Off OFF".split())


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, list):
        return "sequence"
    return f"scalar {value!r}"


def _mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    raise ValueError(f"cannot unmarshal {_kind(value)} into {what}")


def _sequence(value: Any, what: str) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    raise ValueError(f"cannot unmarshal {_kind(value)} into {what}")


def _string(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"cannot unmarshal {_kind(value)} into {what}")


def _boolean(value: Any, what: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_WORDS:
            return True
        if value in _FALSE_WORDS:
            return False
    raise ValueError(f"cannot unmarshal {_kind(value)} into {what}")


def _string_list(value: Any, what: str) -> list[str]:
    return [_string(item, what) for item in _sequence(value, what)]


def _string_map(value: Any, what: str) -> dict[str, str]:
    return {_string(k, what): _string(v, what) for k, v in _mapping(value, what).items()}


def _compact(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Build a mapping from the pairs, leaving out empty values."""
    return {key: value for key, value in pairs if value}


def _sorted_map(values: dict[str, Any]) -> dict[str, Any]:
    return dict(sorted(values.items()))


@dataclass(frozen=True)
class Locator:
    """Identifies an artifact by group, product and version."""

    group: str
    product: str
    version: str

    def group_and_product(self) -> str:
        """Return ``group:product``."""
        return f"{self.group}:{self.product}"

    def __str__(self) -> str:
        return f"{self.group}:{self.product}:{self.version}"


@dataclass
class LocatorConfig:
    """Locator identifier with optional checksums keyed by OS/architecture."""

    id: str = ""
    checksums: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> LocatorConfig:
        data = _mapping(data, "locator")
        return cls(
            id=_string(data.get("id"), "locator id"),
            checksums=_string_map(data.get("checksums"), "locator checksums"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact([("id", self.id), ("checksums", _sorted_map(self.checksums))])


@dataclass
class ConfigProviderLocatorConfig:
    """Locator for a configuration provider; holds at most one checksum."""

    id: str = ""
    checksum: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> ConfigProviderLocatorConfig:
        data = _mapping(data, "provider locator")
        return cls(
            id=_string(data.get("id"), "provider locator id"),
            checksum=_string(data.get("checksum"), "provider locator checksum"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact([("id", self.id), ("checksum", self.checksum)])


def _locator_fields(data: dict) -> tuple[LocatorConfig, str]:
    return LocatorConfig.from_dict(data.get("locator")), _string(data.get("resolver"), "resolver")


@dataclass
class LocatorWithResolverConfig:
    """A locator together with an optional resolver template."""

    locator: LocatorConfig = field(default_factory=LocatorConfig)
    resolver: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> LocatorWithResolverConfig:
        locator, resolver = _locator_fields(_mapping(data, "locator with resolver"))
        return cls(locator=locator, resolver=resolver)

    def to_dict(self) -> dict[str, Any]:
        return _compact([("locator", self.locator.to_dict()), ("resolver", self.resolver)])


@dataclass
class ConfigProviderLocatorWithResolverConfig:
    """A configuration provider locator together with an optional resolver."""

    locator: ConfigProviderLocatorConfig = field(default_factory=ConfigProviderLocatorConfig)
    resolver: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> ConfigProviderLocatorWithResolverConfig:
        data = _mapping(data, "provider")
        return cls(
            locator=ConfigProviderLocatorConfig.from_dict(data.get("locator")),
            resolver=_string(data.get("resolver"), "resolver"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact([("locator", self.locator.to_dict()), ("resolver", self.resolver)])


def _locator_list(value: Any, what: str) -> list[LocatorWithResolverConfig]:
    return [LocatorWithResolverConfig.from_dict(item) for item in _sequence(value, what)]


@dataclass
class NamesPathsConfig:
    """Name patterns and paths that select files."""

    names: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> NamesPathsConfig:
        data = _mapping(data, "exclude")
        return cls(
            names=_string_list(data.get("names"), "exclude names"),
            paths=_string_list(data.get("paths"), "exclude paths"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact([("names", list(self.names)), ("paths", list(self.paths))])


@dataclass
class SingleDefaultTaskConfig:
    """Overrides for one default task; locator and resolver replace the defaults when set."""

    locator: LocatorConfig = field(default_factory=LocatorConfig)
    resolver: str = ""
    exclude_all_default_assets: bool = False
    default_assets_to_exclude: list[str] = field(default_factory=list)
    assets: list[LocatorWithResolverConfig] = field(default_factory=list)

    @property
    def locator_with_resolver(self) -> LocatorWithResolverConfig:
        return LocatorWithResolverConfig(self.locator, self.resolver)

    @classmethod
    def from_dict(cls, data: Any) -> SingleDefaultTaskConfig:
        data = _mapping(data, "default task")
        locator, resolver = _locator_fields(data)
        return cls(
            locator=locator,
            resolver=resolver,
            exclude_all_default_assets=_boolean(
                data.get("exclude-all-default-assets"), "exclude-all-default-assets"
            ),
            default_assets_to_exclude=_string_list(
                data.get("exclude-default-assets"), "exclude-default-assets"
            ),
            assets=_locator_list(data.get("assets"), "assets"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [
                ("locator", self.locator.to_dict()),
                ("resolver", self.resolver),
                ("exclude-all-default-assets", self.exclude_all_default_assets),
                ("exclude-default-assets", list(self.default_assets_to_exclude)),
                ("assets", [asset.to_dict() for asset in self.assets]),
            ]
        )


@dataclass
class DefaultTasksConfig:
    """Resolvers and per-task overrides for the default tasks."""

    default_resolvers: list[str] = field(default_factory=list)
    tasks: dict[str, SingleDefaultTaskConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> DefaultTasksConfig:
        data = _mapping(data, "default-tasks")
        return cls(
            default_resolvers=_string_list(data.get("resolvers"), "default-tasks resolvers"),
            tasks={
                _string(key, "default-tasks key"): SingleDefaultTaskConfig.from_dict(value)
                for key, value in _mapping(data.get("tasks"), "default-tasks tasks").items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [
                ("resolvers", list(self.default_resolvers)),
                ("tasks", {k: v.to_dict() for k, v in sorted(self.tasks.items())}),
            ]
        )


@dataclass
class SinglePluginConfig:
    """One plugin: its locator, resolver, override flag and assets."""

    locator: LocatorConfig = field(default_factory=LocatorConfig)
    resolver: str = ""
    override: bool = False
    assets: list[LocatorWithResolverConfig] = field(default_factory=list)

    @property
    def locator_with_resolver(self) -> LocatorWithResolverConfig:
        return LocatorWithResolverConfig(self.locator, self.resolver)

    @classmethod
    def from_dict(cls, data: Any) -> SinglePluginConfig:
        data = _mapping(data, "plugin")
        locator, resolver = _locator_fields(data)
        return cls(
            locator=locator,
            resolver=resolver,
            override=_boolean(data.get("override"), "override"),
            assets=_locator_list(data.get("assets"), "assets"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [
                ("locator", self.locator.to_dict()),
                ("resolver", self.resolver),
                ("override", self.override),
                ("assets", [asset.to_dict() for asset in self.assets]),
            ]
        )


@dataclass
class PluginsConfig:
    """Default resolvers and the list of configured plugins."""

    default_resolvers: list[str] = field(default_factory=list)
    plugins: list[SinglePluginConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> PluginsConfig:
        data = _mapping(data, "plugins")
        return cls(
            default_resolvers=_string_list(data.get("resolvers"), "plugins resolvers"),
            plugins=[
                SinglePluginConfig.from_dict(item)
                for item in _sequence(data.get("plugins"), "plugins list")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [
                ("resolvers", list(self.default_resolvers)),
                ("plugins", [plugin.to_dict() for plugin in self.plugins]),
            ]
        )


@dataclass
class TasksConfigProvidersConfig:
    """Resolvers and providers of task configuration."""

    default_resolvers: list[str] = field(default_factory=list)
    config_providers: list[ConfigProviderLocatorWithResolverConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> TasksConfigProvidersConfig:
        data = _mapping(data, "tasks-config-providers")
        return cls(
            default_resolvers=_string_list(data.get("resolvers"), "providers resolvers"),
            config_providers=[
                ConfigProviderLocatorWithResolverConfig.from_dict(item)
                for item in _sequence(data.get("providers"), "providers")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [
                ("resolvers", list(self.default_resolvers)),
                ("providers", [provider.to_dict() for provider in self.config_providers]),
            ]
        )


@dataclass
class TasksConfig:
    """Configuration of the default tasks and the plugins."""

    default_tasks: DefaultTasksConfig = field(default_factory=DefaultTasksConfig)
    plugins: PluginsConfig = field(default_factory=PluginsConfig)

    @classmethod
    def from_dict(cls, data: Any) -> TasksConfig:
        data = _mapping(data, "tasks config")
        return cls(
            default_tasks=DefaultTasksConfig.from_dict(data.get("default-tasks")),
            plugins=PluginsConfig.from_dict(data.get("plugins")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [("default-tasks", self.default_tasks.to_dict()), ("plugins", self.plugins.to_dict())]
        )


@dataclass
class GodelConfig:
    """The whole project configuration file."""

    version: str = ""
    tasks_config_providers: TasksConfigProvidersConfig = field(
        default_factory=TasksConfigProvidersConfig
    )
    environment: dict[str, str] = field(default_factory=dict)
    default_tasks: DefaultTasksConfig = field(default_factory=DefaultTasksConfig)
    plugins: PluginsConfig = field(default_factory=PluginsConfig)
    exclude: NamesPathsConfig = field(default_factory=NamesPathsConfig)

    @property
    def tasks_config(self) -> TasksConfig:
        return TasksConfig(self.default_tasks, self.plugins)

    @tasks_config.setter
    def tasks_config(self, value: TasksConfig) -> None:
        self.default_tasks = value.default_tasks
        self.plugins = value.plugins

    @classmethod
    def from_dict(cls, data: Any) -> GodelConfig:
        """Build the configuration from decoded YAML; unknown keys are ignored."""
        data = _mapping(data, "godel config")
        return cls(
            version=_string(data.get("version"), "version"),
            tasks_config_providers=TasksConfigProvidersConfig.from_dict(
                data.get("tasks-config-providers")
            ),
            environment=_string_map(data.get("environment"), "environment"),
            default_tasks=DefaultTasksConfig.from_dict(data.get("default-tasks")),
            plugins=PluginsConfig.from_dict(data.get("plugins")),
            exclude=NamesPathsConfig.from_dict(data.get("exclude")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML mapping for the configuration, leaving out empty values."""
        return _compact(
            [
                ("version", self.version),
                ("tasks-config-providers", self.tasks_config_providers.to_dict()),
                ("environment", _sorted_map(self.environment)),
                ("default-tasks", self.default_tasks.to_dict()),
                ("plugins", self.plugins.to_dict()),
                ("exclude", self.exclude.to_dict()),
            ]
        )


def load_yaml(text: Union[str, bytes]) -> Any:
    """Decode YAML, keeping plain scalars other than null as text."""
    try:
        return yaml.load(text, Loader=_ConfigLoader)
    except yaml.YAMLError as exc:
        raise ValueError(str(exc)) from exc


def load_godel_config(text: Union[str, bytes]) -> GodelConfig:
    """Parse configuration YAML into a GodelConfig."""
    return GodelConfig.from_dict(load_yaml(text))


def dump_godel_config(config: GodelConfig) -> str:
    """Serialise a GodelConfig to YAML."""
    return yaml.safe_dump(
        config.to_dict(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=2**31,
    )


def upgrade_v0_config(cfg_bytes: bytes) -> bytes:
    """Check that the bytes are valid version 0 configuration and return them unchanged."""
    try:
        load_godel_config(cfg_bytes)
    except ValueError as exc:
        raise ValueError(f"failed to unmarshal godel v0 configuration: {exc}") from exc
    return cfg_bytes