"""Launcher command-line parsing, task selection and help output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, TextIO

from godelkit.app import APP_NAME, version_output
from godelkit.task import GlobalConfig, Task

_MIN_NAME_PADDING = 11


def parse_app_args(args: Sequence[str]) -> GlobalConfig:
    """Parse ``[executable] [global flags] [task] [task args...]`` into a GlobalConfig."""
    if not args:
        raise ValueError("args cannot be empty")

    cfg = GlobalConfig(executable=args[0])
    remaining = list(args[1:])
    if not remaining:
        cfg.help = True
        return cfg

    arg_iter = iter(remaining)
    for position, current in enumerate(arg_iter, start=1):
        if current == "--":
            continue
        if current.startswith("-"):
            if current == "--version":
                cfg.version = True
            elif current in ("--help", "-h"):
                cfg.help = True
            elif current == "--debug":
                cfg.debug = True
            elif current == "--wrapper":
                value = next(arg_iter, None)
                if value is None:
                    raise ValueError("flag '--wrapper' must specify a value")
                cfg.wrapper = value
            else:
                raise ValueError(f"unknown flag: {current}")
            continue
        cfg.task = current
        cfg.task_args = list(arg_iter)
        break
    return cfg


def task_for_input(global_config: GlobalConfig, tasks: Iterable[Task]) -> Task:
    """Return the task to run for the parsed global configuration."""
    tasks = list(tasks)
    if not global_config.task:
        if not global_config.help and global_config.version:
            return _version_flag_task()
        return _help_flag_task(tasks)

    by_name: dict[str, Task] = {}
    for task in tasks:
        if task.name in by_name:
            raise ValueError(f'command "{task.name}" defined multiple times')
        by_name[task.name] = task

    try:
        return by_name[global_config.task]
    except KeyError:
        raise ValueError(f'unknown command "{global_config.task}" for "{APP_NAME}"') from None


def usage_string(tasks: Iterable[Task]) -> str:
    """Return the launcher usage text for the given tasks, without a trailing newline."""
    return _usage_text(list(tasks), include_help_flag=False)


def unknown_command_error(command_path: str, args: Sequence[str]) -> ValueError:
    """Build the error reported for an unknown subcommand."""
    return ValueError(
        f'unknown command "{args[0]}" for "{command_path}"\n'
        f"Run '{command_path} --help' for usage."
    )


def _version_flag_task() -> Task:
    def run(task: Task, global_config: GlobalConfig, stdout: TextIO) -> None:
        stdout.write(version_output() + "\n")

    return Task("version", f"print {APP_NAME} version", run)


def _help_flag_task(tasks: list[Task]) -> Task:
    def run(task: Task, global_config: GlobalConfig, stdout: TextIO) -> None:
        stdout.write(_usage_text(tasks, include_help_flag=True) + "\n")

    return Task("help", f"help for {APP_NAME}", run)


@dataclass(frozen=True)
class _FlagDesc:
    name: str
    usage: str
    value_name: str = ""
    shorthand: str = ""


def _global_flags() -> list[_FlagDesc]:
    version_task = _version_flag_task()
    return [
        _FlagDesc(version_task.name, version_task.description),
        _FlagDesc(
            "debug",
            "run in debug mode (print full stack traces on failures and include other debugging output)",
        ),
        _FlagDesc("wrapper", "path to the wrapper script for this invocation", value_name="string"),
    ]


def _flag_usages(flags: list[_FlagDesc]) -> list[str]:
    prefixes = []
    for flag in sorted(flags, key=lambda f: f.name):
        if flag.shorthand:
            prefix = f"  -{flag.shorthand}, --{flag.name}"
        else:
            prefix = f"      --{flag.name}"
        if flag.value_name:
            prefix += f" {flag.value_name}"
        prefixes.append((prefix, flag.usage))
    width = max(len(prefix) for prefix, _ in prefixes)
    return [f"{prefix.ljust(width)}   {usage}".rstrip() for prefix, usage in prefixes]


def _command_name(task: Task) -> str:
    return task.name.split(" ", 1)[0]


def _usage_text(tasks: list[Task], include_help_flag: bool) -> str:
    lines = ["Usage:"]
    commands = sorted(tasks, key=_command_name)
    if commands:
        lines.append(f"  {APP_NAME} [command]")
        padding = max(_MIN_NAME_PADDING, max(len(_command_name(t)) for t in commands))
        lines += ["", "Available Commands:"]
        lines += [f"  {_command_name(t).ljust(padding)} {t.description}" for t in commands]

    flags = _global_flags()
    if include_help_flag:
        flags.append(_FlagDesc("help", f"help for {APP_NAME}", shorthand="h"))
    lines += ["", "Flags:"]
    lines += _flag_usages(flags)

    if commands:
        lines += ["", f'Use "{APP_NAME} [command] --help" for more information about a command.']
    return "\n".join(lines)