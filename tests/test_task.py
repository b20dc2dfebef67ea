import argparse
import io

import pytest

from godelkit.task import (
    FlagType,
    GlobalConfig,
    GlobalFlagOptions,
    Task,
    UpgradeConfigTask,
    VerifyFlag,
    VerifyOptions,
)


def test_project_dir_requires_wrapper():
    with pytest.raises(ValueError, match="wrapper must be specified"):
        GlobalConfig().project_dir()


def test_project_dir_is_wrapper_directory():
    cfg = GlobalConfig(wrapper="/home/project/godelw")
    assert cfg.project_dir() == "/home/project"


def test_project_dir_relative_wrapper():
    assert GlobalConfig(wrapper="godelw").project_dir() == "."


def test_string_flag_round_trip():
    flag = VerifyFlag("format", "output format", FlagType.STRING)
    parser = argparse.ArgumentParser()
    dest = flag.add_flag(parser)
    ns = parser.parse_args(["--format", "json"])
    assert flag.to_flag_args(getattr(ns, dest)) == ["--format", "json"]


def test_string_flag_default_produces_no_args():
    flag = VerifyFlag("format", "output format", FlagType.STRING)
    parser = argparse.ArgumentParser()
    dest = flag.add_flag(parser)
    ns = parser.parse_args([])
    assert flag.to_flag_args(getattr(ns, dest)) == []


def test_bool_flag_round_trip():
    flag = VerifyFlag("skip-tests", "skip", FlagType.BOOL)
    parser = argparse.ArgumentParser()
    dest = flag.add_flag(parser)
    ns = parser.parse_args(["--skip-tests"])
    assert getattr(ns, dest) is True
    assert flag.to_flag_args(getattr(ns, dest)) == ["--skip-tests=true"]


def test_bool_flag_explicit_false():
    flag = VerifyFlag("fast", "fast mode", FlagType.BOOL)
    parser = argparse.ArgumentParser()
    dest = flag.add_flag(parser)
    ns = parser.parse_args(["--fast=false"])
    assert flag.to_flag_args(getattr(ns, dest)) == ["--fast=false"]


def test_bool_flag_none_produces_no_args():
    assert VerifyFlag("fast", "", FlagType.BOOL).to_flag_args(None) == []


def test_unrecognized_flag_type():
    flag = VerifyFlag("x", "", "other")
    with pytest.raises(ValueError, match="unrecognized flag type"):
        flag.to_flag_args("v")
    with pytest.raises(ValueError, match="unrecognized flag type"):
        flag.add_flag(argparse.ArgumentParser())


def test_task_run_passes_arguments():
    seen = []

    def impl(task, global_config, stdout):
        seen.append((task.name, global_config.task))
        stdout.write("ran")

    task = Task("build", "build things", impl, verify=VerifyOptions(ordering=3))
    out = io.StringIO()
    task.run(GlobalConfig(task="build"), out)
    assert seen == [("build", "build")]
    assert out.getvalue() == "ran"
    assert task.verify.ordering == 3


def test_task_run_propagates_error():
    def impl(task, global_config, stdout):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        Task("t", "d", impl).run(GlobalConfig(), io.StringIO())


def test_upgrade_task_run_returns_bytes():
    def impl(task, global_config, config_bytes, stdout):
        return config_bytes.upper()

    task = UpgradeConfigTask(
        "com.example:tool", "tool.yml", impl, global_flag_opts=GlobalFlagOptions(config_flag="--config")
    )
    assert task.run(b"abc", GlobalConfig(), io.StringIO()) == b"ABC"
    assert task.global_flag_opts.config_flag == "--config"