"""The built-in default plugins and how user configuration adjusts them."""

from __future__ import annotations

import copy
from typing import Optional, TextIO

from godelkit.config import ConfigError, upgrade_config
from godelkit.models import (
    DefaultTasksConfig,
    LocatorConfig,
    LocatorWithResolverConfig,
    PluginsConfig,
    SingleDefaultTaskConfig,
    SinglePluginConfig,
)
from godelkit.paths import uniquify
from godelkit.task import GlobalConfig, UpgradeConfigTask

DEFAULT_RESOLVER = (
    "https://github.com/{{index GroupParts 1}}/{{index GroupParts 2}}/releases/download/"
    "v{{Version}}/{{Product}}-{{Version}}-{{OS}}-{{Arch}}.tgz"
)

_OS_ARCHES = ("darwin-amd64", "darwin-arm64", "linux-amd64", "linux-arm64")

# Each entry: (locator ID, checksums in _OS_ARCHES order).
_Entry = tuple[str, tuple[str, str, str, str]]

_BUILTIN_PLUGINS: list[tuple[_Entry, list[_Entry]]] = [
    (
        (
            "com.palantir.distgo:dist-plugin:1.46.0",
            (
                "66de1f4bc8465cfe56f659a0f83de8fb81003cd578dc8d8cd47623c729426e48",
                "24a54779f23330396b21372f38b20205446b93c16553ac4e206f84f8adc8a675",
                "27970437f0f7a8d44aff717102e424d48fe0ea842b4e845c744186384af71719",
                "2bcca14c0ae3a1c3cbf02ade850d94834eff77f817ec1c80621061b2be227b60",
            ),
        ),
        [],
    ),
    (
        (
            "com.palantir.godel-format-plugin:format-plugin:1.24.0",
            (
                "b57707792f38f19fe7eda72d26ec545524304a9b32412804f467533846c9eca9",
                "e5b82a166fed70cdf0c6ceae61dfc07f18dd2c1247b1228f960a88b2a585a174",
                "32357db8d7d6f452d409c74e06d1383d1b91a406bfad726784e2abe0ae7d09fd",
                "314c45c754266ea4a6e2d2bb3ce6422fa7d03a41a86c27e35480b00211d895ed",
            ),
        ),
        [
            (
                "com.palantir.godel-format-asset-ptimports:ptimports-asset:1.23.0",
                (
                    "821cd3facb0a01225ad87fc06f9426d2860121618fbfe079584125bb2c876459",
                    "06da4107fa1a9285400084a26bae367bc6acefbcba0c1b1f3b1ac55e24bf120c",
                    "16ef60e954e42656e56d29533cc8cffb5a1005ff772e3448a9667efc3824225b",
                    "d0076549d838ea8acb7d4909c6d403609e568b8957ed896ef69a3b34b438d2b6",
                ),
            ),
        ],
    ),
    (
        (
            "com.palantir.godel-goland-plugin:goland-plugin:1.20.0",
            (
                "6d69d6314184fb5a0a069ed375a246cee7f60f6fa280e1684e372d35bdb2c37d",
                "2e4b5ea8394de5030752679f2aa351b75395f0a04c658bb46d2cae758c7a8238",
                "877fe9de1c5885ff4464ace5cd334e9bd0a1443d0604c2a07003ac6f2d8eaf6e",
                "bd9e991e7d317c8e628a8271b80490c91803a00aed41f3d4c363223dca98edd3",
            ),
        ),
        [],
    ),
    (
        (
            "com.palantir.okgo:check-plugin:1.29.0",
            (
                "3cc008be5407852d09340b567ea56098615e21efa65930c6fb653605818dbe5a",
                "6a022ba2d21a28c1899806802ca37ac5c8259e5f1f86c33d92cdca142b5e3e15",
                "2a187a627de7eb80c839f52c9af1849278990e2ca3f557d39de774d3e443016a",
                "b9a5cc35a3dd4e3a03f5f846c4e5e3d00e11bafe036674e2d74f3e74bda8a14d",
            ),
        ),
        [
            (
                "com.palantir.godel-okgo-asset-compiles:compiles-asset:1.27.0",
                (
                    "b3caac26a740f929e35a4e7327851eaa5cd6f816e996e36bc14d8dc18beb27b5",
                    "52e95c4c4adefc5b15a7c39e9125a67b08b01bc7a14b5283266b9e212a701323",
                    "c6166b9affab5fbef6e4fb2895b0a0c2158c4379051994eaf4a36924df1083c7",
                    "efa5f189147193c5cca5604cfb8cdd7fede3907121f290c717f10148de618a7f",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-deadcode:deadcode-asset:1.25.0",
                (
                    "d98a36d0257e148075ef8deef6a5c901ec59c1e6a092d6f96a7226879bcd4b99",
                    "29fcc50b3adf016f9707a640f58e2a9f08ed3b1bdce6624c6c68d703f01e292f",
                    "10d0f899e4e6cc9655dc3ea59dc79b12a108830df92c19b882d441ec2ece17f0",
                    "8a573f6b2e8fc937857cbb0c47d2bff75eadb2af63ab485878c1dcae56f5b305",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-errcheck:errcheck-asset:1.26.0",
                (
                    "52c4d5e53da6c8d14deaf0ebf3a29fbb19cf766ce9ca38b4870af75804cf2261",
                    "9d7c6a0154d7af0fe1b7d37d75712993da174fd90dc16a0a45c2258085d44a9a",
                    "dffcb6b87f9f7da09375d4375b5bc77095621d7ea11d5b0c8f81af6623da2a59",
                    "804d93cec6985613c645c9a379cb84f048ed571695a106446996189e374da71c",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-golint:golint-asset:1.17.0",
                (
                    "62d3d7afa129b51bd483dbede6952ea995561b9f721c645a513e4baafeab733d",
                    "9a08abc04db991e5bbf2b6f1dd572085e184d23357d97d3299ba9666b543e0bf",
                    "9a6be8f98f8f915f439de7888c3b652d6032b26ac1dbbe410874c642c213b2f0",
                    "6bde03a9954400c43b9c6256e8c6d4a2ac2245e0cf92e35b1842328e5fce209b",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-govet:govet-asset:1.21.0",
                (
                    "3d414eb556cba0fe3a5f9a051cace4dde18a034c364c9158eb2418af5ebddc71",
                    "5d16860fcecb011cd47a67aa5e9209dd0e8c79e1b404d4ff276e123707133c7a",
                    "ad76d231fe4f6ca1e8fa8f940971d8798388e11f13b5f2c29a8be8e9044ad784",
                    "add1a1d9a5e289a9fac8fc6ac3530f8aed186c35441e363c9964403567de9ecb",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-importalias:importalias-asset:1.21.0",
                (
                    "1c3f49c70465b2676e9964c443590c890bcdd776fb8f7cba2a7a008571ade4ee",
                    "292c09b4afc641bcf1d7f16f118902f12d2203c0c43efac0d977f363f0398c58",
                    "daeadafe2fb82793d2a1bcf398415e5715746127476f07383d3b896cbd611ba1",
                    "9bff97fa68557a7684203bbf9b450e16269ecd3f2a1a229ac065fe80eb0e7a76",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-ineffassign:ineffassign-asset:1.23.0",
                (
                    "1a2288a0d346740744f9c926e0b6f7d18e97f74ccfbc4c14b31bc810c4fee0cb",
                    "c7ca2479e72becd2d96852a790cfcb135ef1e27628931caa979bf83d5fa9c1e0",
                    "11bd688f4717dab066bb87f817211b6e739b148166cc184a1ab04209b47f503d",
                    "f434de4bffa83fe6d221c2d47d88be843e6e441170f94ed9d9575bec3651e25e",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-outparamcheck:outparamcheck-asset:1.24.0",
                (
                    "b6d254fa04fb42ae0784c7cb219970dc50bd18941dc70193b922c23c2f188f38",
                    "6fc92797f00b6e69035b6da4a9eb90f972b386eae963167777b852fa66997774",
                    "e4cbc4408269250b546eb1f0289d182c00ff97ed6ab6788afeb060aab83a334d",
                    "47bd0254d8d669591a974a25443dc59a94e0122656b86cde1ec8b680b73e133e",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-unconvert:unconvert-asset:1.25.0",
                (
                    "001783ed100dcb97773f5ebdbeb6b4538ab6742c83fc551ad9c0a70cbd226219",
                    "78978dae2a7636adbcb900407b07aff84ea968919c3df0cf361bb21c24e3444c",
                    "4a6e2b3771529091f26c6f86fc7f6fef64691ffff2a6e37b191933611e558f24",
                    "8cf7874f7d61a9fbe5411d96150abc0e61f518b99059debb47ef5c3d37528f1c",
                ),
            ),
            (
                "com.palantir.godel-okgo-asset-varcheck:varcheck-asset:1.25.0",
                (
                    "7cc81530e858c6af38063419ce157bad28f6ae90d0636dfd1db8b1a0edad5aa5",
                    "71040a5f2cc9a8a887ccc9c7c5c27b8acf111a74daf64f1dfa9686dcea3fb10e",
                    "e6212aaa6144dce271ca7176a0816385c9dc676e3782509f46ce3ebca8e2d437",
                    "e0f6b4ed9486ef665dd31c926e4f547ded40d54347727f1e29d9f4f0059c200e",
                ),
            ),
        ],
    ),
    (
        (
            "com.palantir.godel-license-plugin:license-plugin:1.23.0",
            (
                "248517f5b2a5d1a2f134d60a6230ea96e1c108d9aae2981c65d7c9e8ceabc383",
                "bc618152fdadde8a90ef2d8cbe74a5ac9ee8ac2953a2c3813451b35a25378191",
                "9f59190e16d1f461a1431522478d62601c148a4ab2edb65f7cc0290794a632c0",
                "ca5dfdde630052ec506b031fe90c7273ef58bac40a21fe61f2ea0b468d26e2da",
            ),
        ),
        [],
    ),
    (
        (
            "com.palantir.godel-test-plugin:test-plugin:1.22.0",
            (
                "8d9e041b15b62080ebc1ef4e21600b2da7301f5657100afb2cb76fa230b127bb",
                "2e52e235066968b6ef8f8465edd4ac1bd63d78caeb35c1fae477f255cf36e135",
                "38aeee03263717a08e8418484fe54b6b6b089d9aaf4ae5f18cb5cd45834dab24",
                "e78bf944fab6d0225d93465b07a31ae32cd2bb4dda0cb3797c2b8431aea18657",
            ),
        ),
        [],
    ),
]


def _locator(entry: _Entry) -> LocatorConfig:
    locator_id, sums = entry
    return LocatorConfig(id=locator_id, checksums=dict(zip(_OS_ARCHES, sums)))


def builtin_plugins_config() -> PluginsConfig:
    """Return a fresh copy of the plugin configuration built into the launcher."""
    return PluginsConfig(
        default_resolvers=[DEFAULT_RESOLVER],
        plugins=[
            SinglePluginConfig(
                locator=_locator(plugin),
                assets=[LocatorWithResolverConfig(locator=_locator(asset)) for asset in assets],
            )
            for plugin, assets in _BUILTIN_PLUGINS
        ],
    )


def _locator_id_without_version(locator_id: str) -> str:
    return ":".join(locator_id.split(":")[:2])


def _assets_from_default(
    base: list[LocatorWithResolverConfig], task_cfg: SingleDefaultTaskConfig
) -> list[LocatorWithResolverConfig]:
    if task_cfg.exclude_all_default_assets:
        return []
    excluded = set(task_cfg.default_assets_to_exclude)
    return [
        copy.deepcopy(asset)
        for asset in base
        if _locator_id_without_version(asset.locator.id) not in excluded
    ]


def _format_list(values: list[str]) -> str:
    return "[" + " ".join(values) + "]"


def plugins_config(
    config: DefaultTasksConfig, builtin: Optional[PluginsConfig] = None
) -> PluginsConfig:
    """Apply the default-tasks configuration to the built-in plugins.

    Tasks are keyed by ``group:product`` of a built-in plugin; a key that names no
    built-in plugin raises ConfigError.
    """
    if builtin is None:
        builtin = builtin_plugins_config()

    resolvers = uniquify(list(config.default_resolvers) + list(builtin.default_resolvers)) or []
    plugins: list[SinglePluginConfig] = []
    default_keys: set[str] = set()

    for plugin in builtin.plugins:
        key = _locator_id_without_version(plugin.locator.id)
        default_keys.add(key)
        task_cfg = config.tasks.get(key)
        if task_cfg is None:
            plugins.append(copy.deepcopy(plugin))
            continue
        current = SinglePluginConfig(
            locator=copy.deepcopy(plugin.locator), resolver=plugin.resolver
        )
        if task_cfg.locator.id:
            current.locator = copy.deepcopy(task_cfg.locator)
        if task_cfg.resolver:
            current.resolver = task_cfg.resolver
        current.assets = _assets_from_default(plugin.assets, task_cfg) + copy.deepcopy(
            task_cfg.assets
        )
        plugins.append(current)

    invalid = sorted(key for key in config.tasks if key not in default_keys)
    if invalid:
        raise ConfigError(
            f"default-task key(s) specified but are not valid: {_format_list(invalid)}. "
            f"Valid values: {_format_list(sorted(default_keys))}"
        )
    return PluginsConfig(default_resolvers=resolvers, plugins=plugins)


def _upgrade_godel_config(
    task: UpgradeConfigTask, global_config: GlobalConfig, config_bytes: bytes, stdout: TextIO
) -> bytes:
    return upgrade_config(config_bytes)


def builtin_upgrade_config_tasks() -> list[UpgradeConfigTask]:
    """Return the configuration upgrade tasks built into the launcher."""
    return [
        UpgradeConfigTask(
            id="com.palantir.godel:godel",
            config_file="godel.yml",
            run_impl=_upgrade_godel_config,
        )
    ]