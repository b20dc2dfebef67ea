"""Launcher argument parsing, task model and godel.yml configuration handling for a build tool."""

__version__ = "0.1.0"