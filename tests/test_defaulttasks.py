import io
import re

import pytest

from godelkit.config import ConfigError
from godelkit.defaulttasks import (
    DEFAULT_RESOLVER,
    builtin_plugins_config,
    builtin_upgrade_config_tasks,
    plugins_config,
)
from godelkit.models import (
    DefaultTasksConfig,
    LocatorConfig,
    LocatorWithResolverConfig,
    PluginsConfig,
    SingleDefaultTaskConfig,
    SinglePluginConfig,
)
from godelkit.task import GlobalConfig

CUSTOM_DEFAULT_RESOLVER = (
    "default/repo/{{GroupPath}}/{{Product}}/{{Version}}/{{Product}}-{{OS}}-{{Arch}}-{{Version}}.tgz"
)


def _asset(locator_id):
    return LocatorWithResolverConfig(locator=LocatorConfig(id=locator_id))


def _test_builtin():
    return PluginsConfig(
        default_resolvers=[DEFAULT_RESOLVER],
        plugins=[
            SinglePluginConfig(
                locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                assets=[
                    _asset("com.palantir.test:test-asset-1:2.3.4"),
                    _asset("com.palantir.test:test-asset-2:3.4.5"),
                ],
            )
        ],
    )


DEFAULT_ASSETS = [
    _asset("com.palantir.test:test-asset-1:2.3.4"),
    _asset("com.palantir.test:test-asset-2:3.4.5"),
]


@pytest.mark.parametrize(
    "given, want",
    [
        pytest.param(
            DefaultTasksConfig(),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                        assets=DEFAULT_ASSETS,
                    )
                ],
            ),
            id="empty task param results in default configuration",
        ),
        pytest.param(
            DefaultTasksConfig(
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        resolver="custom-resolver"
                    )
                }
            ),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                        resolver="custom-resolver",
                        assets=DEFAULT_ASSETS,
                    )
                ],
            ),
            id="specifying custom resolver overrides resolver",
        ),
        pytest.param(
            DefaultTasksConfig(
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        locator=LocatorConfig(id="com.palantir.godel:override:1.2.3")
                    )
                }
            ),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.godel:override:1.2.3"),
                        assets=DEFAULT_ASSETS,
                    )
                ],
            ),
            id="specifying custom locator overrides locator",
        ),
        pytest.param(
            DefaultTasksConfig(
                default_resolvers=[CUSTOM_DEFAULT_RESOLVER],
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        locator=LocatorConfig(id="com.palantir.godel:override:1.2.3")
                    )
                },
            ),
            PluginsConfig(
                default_resolvers=[CUSTOM_DEFAULT_RESOLVER, DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.godel:override:1.2.3"),
                        assets=DEFAULT_ASSETS,
                    )
                ],
            ),
            id="specifying default resolver appends default resolver",
        ),
        pytest.param(
            DefaultTasksConfig(
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        assets=[_asset("com.palantir.godel:custom-asset:1.2.3")]
                    )
                }
            ),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                        assets=DEFAULT_ASSETS + [_asset("com.palantir.godel:custom-asset:1.2.3")],
                    )
                ],
            ),
            id="specifying custom asset adds only that asset",
        ),
        pytest.param(
            DefaultTasksConfig(
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        exclude_all_default_assets=True,
                        assets=[_asset("com.palantir.godel:custom-asset:1.2.3")],
                    )
                }
            ),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                        assets=[_asset("com.palantir.godel:custom-asset:1.2.3")],
                    )
                ],
            ),
            id="setting exclude all and specifying custom asset adds asset to default",
        ),
        pytest.param(
            DefaultTasksConfig(
                tasks={
                    "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                        default_assets_to_exclude=["com.palantir.test:test-asset-2"],
                        assets=[_asset("com.palantir.godel:custom-asset:1.2.3")],
                    )
                }
            ),
            PluginsConfig(
                default_resolvers=[DEFAULT_RESOLVER],
                plugins=[
                    SinglePluginConfig(
                        locator=LocatorConfig(id="com.palantir.test:test-plugin:1.2.3"),
                        assets=[
                            _asset("com.palantir.test:test-asset-1:2.3.4"),
                            _asset("com.palantir.godel:custom-asset:1.2.3"),
                        ],
                    )
                ],
            ),
            id="specifying default asset with exclude and custom asset adds asset",
        ),
    ],
)
def test_plugins_config_cases(given, want):
    assert plugins_config(given, _test_builtin()) == want


def test_plugins_config_invalid_key():
    given = DefaultTasksConfig(
        tasks={
            "com.palantir.test:test": SingleDefaultTaskConfig(
                locator=LocatorConfig(id="com.palantir.godel:override:1.2.3")
            )
        }
    )
    message = (
        "default-task key(s) specified but are not valid: [com.palantir.test:test]. "
        "Valid values: [com.palantir.test:test-plugin]"
    )
    with pytest.raises(ConfigError, match=re.escape(message)):
        plugins_config(given, _test_builtin())


def test_plugins_config_does_not_mutate_builtin():
    builtin = _test_builtin()
    plugins_config(
        DefaultTasksConfig(
            tasks={
                "com.palantir.test:test-plugin": SingleDefaultTaskConfig(
                    assets=[_asset("com.palantir.godel:custom-asset:1.2.3")]
                )
            }
        ),
        builtin,
    )
    assert builtin == _test_builtin()


def test_plugins_config_uses_builtin_by_default():
    assert plugins_config(DefaultTasksConfig()) == builtin_plugins_config()


def test_builtin_plugins_config_contents():
    cfg = builtin_plugins_config()
    assert cfg.default_resolvers == [DEFAULT_RESOLVER]
    assert [p.locator.id for p in cfg.plugins] == [
        "com.palantir.distgo:dist-plugin:1.46.0",
        "com.palantir.godel-format-plugin:format-plugin:1.24.0",
        "com.palantir.godel-goland-plugin:goland-plugin:1.20.0",
        "com.palantir.okgo:check-plugin:1.29.0",
        "com.palantir.godel-license-plugin:license-plugin:1.23.0",
        "com.palantir.godel-test-plugin:test-plugin:1.22.0",
    ]
    assert len(cfg.plugins[3].assets) == 9
    assert cfg.plugins[0].locator.checksums["linux-amd64"] == (
        "27970437f0f7a8d44aff717102e424d48fe0ea842b4e845c744186384af71719"
    )


def test_builtin_plugins_config_returns_fresh_copy():
    first = builtin_plugins_config()
    first.plugins.clear()
    assert len(builtin_plugins_config().plugins) == 6


def test_excluding_builtin_asset_by_key():
    cfg = plugins_config(
        DefaultTasksConfig(
            tasks={
                "com.palantir.godel-format-plugin:format-plugin": SingleDefaultTaskConfig(
                    default_assets_to_exclude=[
                        "com.palantir.godel-format-asset-ptimports:ptimports-asset"
                    ]
                )
            }
        )
    )
    assert cfg.plugins[1].assets == []
    assert cfg.plugins[1].locator.id == "com.palantir.godel-format-plugin:format-plugin:1.24.0"


def test_builtin_upgrade_config_tasks_returns_input():
    tasks = builtin_upgrade_config_tasks()
    assert [(t.id, t.config_file) for t in tasks] == [("com.palantir.godel:godel", "godel.yml")]
    content = b"exclude:\n  names:\n    - vendor\n"
    assert tasks[0].run(content, GlobalConfig(), io.StringIO()) == content


def test_builtin_upgrade_config_task_rejects_unknown_version():
    task = builtin_upgrade_config_tasks()[0]
    with pytest.raises(ConfigError, match="unsupported version: 2"):
        task.run(b"version: 2\n", GlobalConfig(), io.StringIO())