"""Listing the paths of a project that match include and exclude matchers."""

from __future__ import annotations

import os
import re
from typing import Callable, Iterator, Optional

Matcher = Callable[[str], bool]


def _components(rel_path: str) -> list[str]:
    normalized = rel_path.replace(os.sep, "/")
    return [part for part in normalized.split("/") if part and part != "."]


def name_matcher(*args: str) -> Matcher:
    """Return a matcher true when any component of a path fully matches any of the patterns."""
    patterns = [re.compile(pattern) for pattern in args]

    def match(rel_path: str) -> bool:
        return any(
            pattern.fullmatch(part) for part in _components(rel_path) for pattern in patterns
        )

    return match


def _walk(root: str, rel: str = "") -> Iterator[str]:
    directory = os.path.join(root, rel) if rel else root
    for name in sorted(os.listdir(directory)):
        child = os.path.join(rel, name) if rel else name
        yield child
        full = os.path.join(root, child)
        if os.path.isdir(full) and not os.path.islink(full):
            yield from _walk(root, child)


def list_project_paths(
    project_dir: str, include: Optional[Matcher], exclude: Optional[Matcher]
) -> list[str]:
    """List project paths matching ``include`` and not ``exclude``, relative to the working directory.

    A missing include matcher matches nothing.
    """
    wd = os.getcwd()
    if not os.path.isabs(project_dir):
        project_dir = os.path.join(wd, project_dir)
    prefix = os.path.relpath(project_dir, wd)

    files = [
        path
        for path in _walk(project_dir)
        if include is not None and include(path) and not (exclude is not None and exclude(path))
    ]
    return [os.path.normpath(os.path.join(prefix, path)) for path in files]