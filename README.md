# godelkit

godelkit is the core library of a launcher for a project build tool. It
provides:

- parsing of the launcher's command line into a `GlobalConfig`, and
  choosing the task to run;
- the task model: `Task`, `VerifyOptions`, `VerifyFlag`,
  `GlobalFlagOptions` and `UpgradeConfigTask`;
- the `godel.yml` configuration model, with reading, writing, upgrading
  and merging;
- the effective plugin set, built from the built-in default tasks plus
  any user overrides;
- listing project files through include and exclude matchers.

## Requirements

Python 3.10 or later. PyYAML is the only runtime dependency.

## Parsing the command line

The launcher expects arguments in this form:

    [executable] [<global flags>] [<task>] [<task flags/args>]

The global flags are `--version`, `--help`/`-h`, `--debug` and
`--wrapper <path>`. Each must be written exactly like that, so
`--wrapper=<path>` is rejected as an unknown flag. The first argument that
is not a flag names the task. Every argument after the task name goes to
the task. A lone `--` is skipped.

```python
import sys

from godelkit.cli import parse_app_args, task_for_input

global_config = parse_app_args(["./godelw", "--version"])
task = task_for_input(global_config, [])
task.run(global_config, sys.stdout)  # prints "godel version unspecified"
```

`parse_app_args` raises `ValueError` in three cases: the list is empty,
`--wrapper` has no value, or a flag is unknown. With nothing after the
executable, `help` is set. When no task is named, `task_for_input` returns
a task that prints the usage text. The one exception is when `--version`
is given without `--help`; then it returns the version task.
`task_for_input` raises `ValueError` when the task name is unknown, and
also when two of the given tasks share a name.

`usage_string(tasks)` returns the launcher's usage text for a list of
tasks. `unknown_command_error(command_path, args)` builds the error used
for an unknown subcommand.

`GlobalConfig.project_dir()` returns the directory that contains the
wrapper. It raises `ValueError` when no wrapper was given.

## Verify flags

`VerifyFlag.add_flag(parser)` registers a string or boolean flag on an
`argparse.ArgumentParser` and returns the attribute name that holds its
value. `VerifyFlag.to_flag_args(value)` turns a value back into
command-line arguments. Examples are `["--name", "value"]` and
`["--name=true"]`.

## Reading configuration

```python
from godelkit.config import read_godel_config, read_godel_config_excludes

config = read_godel_config("godel/config/godel.yml")
excludes = read_godel_config_excludes("godel/config/godel.yml")
```

If the file is missing, both functions return an empty configuration.
`read_godel_config_excludes` reads only the `exclude` section and ignores
all other keys. Failures raise `godelkit.config.ConfigError`.

`upgrade_config(cfg_bytes)` accepts configuration whose `version` is
missing or `0`. It checks that the configuration parses and returns the
same bytes. Any other version raises `ConfigError`.

YAML text can be loaded into a configuration and written back out:

```python
from godelkit.models import dump_godel_config, load_godel_config

config = load_godel_config("""
plugins:
  plugins:
    - locator:
        id: "com.example:plugin:1.0.0"
""")
print(dump_godel_config(config))
```

When YAML is loaded, plain scalars stay as text. Empty values are left
out when dumping.

## Plugins and default tasks

`godelkit.defaulttasks.builtin_plugins_config()` returns a fresh copy of
the default plugins: dist, format, goland, check, license and test. Each
comes with pinned checksums for darwin and linux on amd64 and arm64.

`plugins_config(config, builtin=None)` applies a `DefaultTasksConfig` to
those defaults. You can:

- replace a plugin's locator or resolver;
- exclude all default assets, or only some of them;
- add assets;
- put extra default resolvers in front of the built-in one.

A task key that names no built-in plugin raises `ConfigError`, and the
error lists the valid keys. `builtin_upgrade_config_tasks()` returns the
upgrade task for `godel.yml`.

`godelkit.config.combine_tasks_config(base, *others)` returns a merged
copy and leaves `base` unchanged:

- resolvers are appended without duplicates;
- later default-task entries replace earlier ones;
- a plugin marked `override` replaces the base plugin that has the same
  group and product.

`godelkit.config` also turns configuration into validated parameters with
`locator_param`, `locator_with_resolver_param`, `single_plugin_param`,
`plugins_param`, `provider_locator_with_resolver_param` and
`tasks_config_providers_param`. A locator ID must have exactly three
colon-separated parts, `group:product:version`. Checksum keys must have
the form `os-arch`. A configuration-provider checksum is keyed by the
given OS/arch, or by the current machine's when none is given.

`godelkit.paths` provides `plugin_file_name`, `plugin_path`,
`config_provider_file_name`, `sort_locators` and `uniquify`.

## Project paths

```python
from godelkit.projectpaths import list_project_paths, name_matcher

paths = list_project_paths(".", name_matcher(r".+"), name_matcher(r"vendor"))
```

`name_matcher` matches a path when any component of the path fully
matches one of the patterns. The paths returned are sorted by walk order
and are relative to the current working directory. If no include matcher
is given, nothing matches.

## What it does not do

The package is a library and installs no command. It does not:

- download or unpack plugins and assets;
- verify checksums against files on disk;
- expand resolver templates, which stay plain strings;
- run plugins;
- find the configuration directory from a project directory.