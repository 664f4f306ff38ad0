# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Read the parts of a BUILD file the engine cares about.

BUILD files are Starlark, whose simple subset is valid Python syntax, so the
standard :mod:`ast` module is enough to list top-level rule calls and their
literal attributes. Attributes that are not literals (``glob(...)``, names,
concatenations) are left out.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from protobuild.workspace.directives import Directive, parse_directives

# ###############
# Public Interface
# ###############

BUILD_FILE_NAMES = ("BUILD.bazel", "BUILD")


class BuildFileError(Exception):
    """Raised when a BUILD file cannot be read or is not valid Starlark."""


@dataclass(frozen=True)
class BuildRule:
    """A top-level rule call such as ``proto_library(name = "x", srcs = [...])``."""

    kind: str
    name: str
    attrs: dict[str, Any] = field(default_factory=dict)

    def attr_strings(self, key: str) -> list[str]:
        """Return attribute *key* as a list of strings (empty if absent or not a string list)."""
        value = self.attrs.get(key)
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [v for v in value if isinstance(v, str)]
        return []


@dataclass
class BuildFile:
    """Rules and directives of one BUILD file."""

    path: Path | None
    rules: list[BuildRule] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)

    def rules_of_kind(self, kind: str) -> list[BuildRule]:
        return [r for r in self.rules if r.kind == kind]


def parse_build_file(text: str, path: Path | None = None) -> BuildFile:
    """Parse BUILD-file *text*.

    Raises:
        BuildFileError: If the text is not syntactically valid.
    """
    label = str(path) if path is not None else "<string>"
    try:
        tree = ast.parse(text, filename=label)
    except SyntaxError as exc:
        raise BuildFileError(f"{label}: line {exc.lineno}: {exc.msg}") from exc

    rules: list[BuildRule] = []
    for stmt in tree.body:
        if not isinstance(stmt, ast.Expr) or not isinstance(stmt.value, ast.Call):
            continue
        rule = _rule_from_call(stmt.value)
        if rule is not None:
            rules.append(rule)
    return BuildFile(path=path, rules=rules, directives=parse_directives(text))


def read_build_file(directory: Path) -> BuildFile | None:
    """Read the BUILD file of *directory*, preferring ``BUILD.bazel``; None if there is none."""
    for name in BUILD_FILE_NAMES:
        path = directory / name
        if path.is_file():
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise BuildFileError(f"Cannot read BUILD file '{path}': {exc}") from exc
            return parse_build_file(text, path)
    return None


# ################
# Implementation
# ################


def _rule_from_call(call: ast.Call) -> BuildRule | None:
    if not isinstance(call.func, ast.Name):
        return None
    attrs: dict[str, Any] = {}
    for keyword in call.keywords:
        if keyword.arg is None:
            continue
        try:
            attrs[keyword.arg] = ast.literal_eval(keyword.value)
        except (ValueError, TypeError, SyntaxError):
            continue
    name = attrs.get("name")
    if not isinstance(name, str):
        return None
    return BuildRule(kind=call.func.id, name=name, attrs=attrs)
