# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Minimal build label handling: ``@repo//pkg:name``, ``//pkg:name``, ``:name``, ``name``."""

from __future__ import annotations

from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class LabelError(Exception):
    """Raised when a label string cannot be parsed."""


@dataclass(frozen=True)
class Label:
    """A parsed build label.

    Attributes:
        repo: External repository name without ``@``; empty for the main repository.
        package: Package path; ``None`` for a relative label such as ``:name``.
        name: Target name.
    """

    repo: str
    package: str | None
    name: str

    @property
    def is_relative(self) -> bool:
        return self.package is None and not self.repo

    def in_package(self, package: str) -> bool:
        """Return True if this label refers to a target in *package* of the main repository."""
        return self.is_relative or (not self.repo and self.package == package)

    def rel(self, from_package: str) -> str:
        """Return the shortest string form of this label as seen from *from_package*."""
        if self.in_package(from_package):
            return f":{self.name}"
        return str(self)

    def __str__(self) -> str:
        if self.package is None:
            return f":{self.name}"
        prefix = f"@{self.repo}" if self.repo else ""
        return f"{prefix}//{self.package}:{self.name}"


def parse_label(text: str) -> Label:
    """Parse *text* into a :class:`Label`.

    Raises:
        LabelError: If *text* is empty or malformed.
    """
    if not text:
        raise LabelError("empty label")
    repo = ""
    rest = text
    if rest.startswith("@"):
        sep = rest.find("//")
        if sep == -1:
            raise LabelError(f"label {text!r}: expected '//' after repository name")
        repo = rest[1:sep].lstrip("@")
        rest = rest[sep:]
    if rest.startswith("//"):
        body = rest[2:]
        if ":" in body:
            package, name = body.split(":", 1)
        else:
            package = body
            name = body.rsplit("/", 1)[-1]
        if not name:
            raise LabelError(f"label {text!r}: missing target name")
        return Label(repo=repo, package=package, name=name)
    if repo:
        raise LabelError(f"label {text!r}: malformed repository label")
    name = rest[1:] if rest.startswith(":") else rest
    if not name or ":" in name:
        raise LabelError(f"label {text!r}: malformed target name")
    return Label(repo="", package=None, name=name)


def make_label(package: str, name: str) -> Label:
    """Build a main-repository label for *name* in *package*."""
    return Label(repo="", package=package, name=name)
