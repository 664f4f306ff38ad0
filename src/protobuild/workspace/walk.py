# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Directory traversal in the order the engine needs.

Each directory is *configured* on the way down (so that inherited
directives are known before its subdirectories are visited) and *visited*
on the way up, i.e. depth-first post-order. Siblings are processed in
sorted order so every run sees the same sequence.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

# ###############
# Public Interface
# ###############

C = TypeVar("C")


def walk(
    root: Path,
    initial: C,
    configure: Callable[[C, Path, str], C],
    visit: Callable[[C, Path, str, list[str]], None],
) -> None:
    """Walk the tree below *root*.

    Args:
        root: The workspace root.
        initial: Configuration handed to the root's ``configure`` call.
        configure: ``(parent_config, path, rel) -> config`` called pre-order.
        visit: ``(config, path, rel, files)`` called post-order with the
            sorted names of the directory's regular files.
    """
    _walk_dir(root, "", initial, configure, visit)


def is_skipped_dir(name: str) -> bool:
    """Hidden directories and Bazel output symlinks are never entered."""
    return name.startswith(".") or name.startswith("bazel-")


# ################
# Implementation
# ################


def _walk_dir(
    path: Path,
    rel: str,
    parent_config: C,
    configure: Callable[[C, Path, str], C],
    visit: Callable[[C, Path, str, list[str]], None],
) -> None:
    config = configure(parent_config, path, rel)
    subdirs: list[str] = []
    files: list[str] = []
    for entry in sorted(path.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if not entry.is_symlink() and not is_skipped_dir(entry.name):
                subdirs.append(entry.name)
        elif entry.is_file():
            files.append(entry.name)
    for name in subdirs:
        child_rel = f"{rel}/{name}" if rel else name
        _walk_dir(path / name, child_rel, config, configure, visit)
    visit(config, path, rel, files)
