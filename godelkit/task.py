"""Tasks, their global configuration and the flags they support."""

from __future__ import annotations

import argparse
import enum
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TextIO

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _parse_bool(text: str) -> bool:
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {text!r}")


@dataclass
class GlobalConfig:
    """Configuration supplied to the initial invocation of the launcher."""

    executable: str = ""
    wrapper: str = ""
    debug: bool = False
    version: bool = False
    help: bool = False
    task: str = ""
    task_args: list[str] = field(default_factory=list)

    def project_dir(self) -> str:
        """Return the project directory, which is the directory of the wrapper."""
        if not self.wrapper:
            raise ValueError("wrapper must be specified to determine project directory")
        return os.path.dirname(os.path.normpath(self.wrapper)) or "."


class FlagType(enum.Enum):
    STRING = 0
    BOOL = 1


@dataclass
class VerifyFlag:
    """A task-specific flag supported by a verify task."""

    name: str
    description: str = ""
    type: FlagType = FlagType.STRING

    def add_flag(self, parser: argparse.ArgumentParser) -> str:
        """Register the flag on the parser and return the attribute name holding its value."""
        dest = self.name.replace("-", "_")
        if self.type is FlagType.STRING:
            parser.add_argument(f"--{self.name}", dest=dest, default="", help=self.description)
        elif self.type is FlagType.BOOL:
            parser.add_argument(
                f"--{self.name}",
                dest=dest,
                nargs="?",
                const=True,
                default=False,
                type=_parse_bool,
                help=self.description,
            )
        else:
            raise ValueError(f"unrecognized flag type: {self.type}")
        return dest

    def to_flag_args(self, value: Any) -> list[str]:
        """Rebuild the command-line arguments that produce the given flag value."""
        if self.type is FlagType.STRING:
            if not value:
                return []
            return [f"--{self.name}", value]
        if self.type is FlagType.BOOL:
            if value is None:
                return []
            return [f"--{self.name}={'true' if value else 'false'}"]
        raise ValueError(f"unrecognized flag type: {self.type}")


@dataclass
class GlobalFlagOptions:
    """How the global flags are passed on to a plugin; empty means unsupported."""

    debug_flag: str = ""
    project_dir_flag: str = ""
    godel_config_flag: str = ""
    config_flag: str = ""


@dataclass
class VerifyOptions:
    """Options for running a task as part of the verify task."""

    verify_task_flags: list[VerifyFlag] = field(default_factory=list)
    ordering: int = 0
    apply_true_args: list[str] = field(default_factory=list)
    apply_false_args: list[str] = field(default_factory=list)


TaskRunner = Callable[["Task", GlobalConfig, TextIO], None]
UpgradeRunner = Callable[["UpgradeConfigTask", GlobalConfig, bytes, TextIO], bytes]


@dataclass
class Task:
    """A named command that the launcher can run."""

    name: str
    description: str
    run_impl: TaskRunner
    config_file: str = ""
    global_flag_opts: GlobalFlagOptions = field(default_factory=GlobalFlagOptions)
    verify: Optional[VerifyOptions] = None

    def run(self, global_config: GlobalConfig, stdout: TextIO) -> None:
        """Run the task; failures are raised."""
        self.run_impl(self, global_config, stdout)


@dataclass
class UpgradeConfigTask:
    """A task that upgrades a configuration file to its newest form."""

    id: str
    config_file: str
    run_impl: UpgradeRunner
    legacy_config_file: str = ""
    global_flag_opts: GlobalFlagOptions = field(default_factory=GlobalFlagOptions)

    def run(self, config_bytes: bytes, global_config: GlobalConfig, stdout: TextIO) -> bytes:
        """Return the upgraded configuration bytes."""
        return self.run_impl(self, global_config, config_bytes, stdout)