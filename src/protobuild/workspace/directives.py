# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-directory directives and the configuration they inherit down the tree.

Directives are BUILD-file comments of the form::

    # protobuild:proto_language go
    # protobuild:proto_plugins go go_grpc
    # protobuild:proto_rule proto_library

They apply to the directory of the BUILD file and to every subdirectory
that does not override them.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Sequence
from dataclasses import dataclass, replace

from protobuild.workspace.config import DEFAULT_RULE_KIND

# ###############
# Public Interface
# ###############

DIRECTIVE_PREFIX = "protobuild:"

LANGUAGE_DIRECTIVE = "proto_language"
PLUGINS_DIRECTIVE = "proto_plugins"
RULE_DIRECTIVE = "proto_rule"

KNOWN_DIRECTIVES = (LANGUAGE_DIRECTIVE, PLUGINS_DIRECTIVE, RULE_DIRECTIVE)


class DirectiveError(Exception):
    """Raised for unknown directive names and invalid directive values."""


@dataclass(frozen=True)
class Directive:
    """A single ``# protobuild:<name> <value>`` comment."""

    name: str
    value: str
    line: int = 0


@dataclass(frozen=True)
class DirectoryConfig:
    """Configuration in effect for one directory.

    Attributes:
        rule_kind: Kind of compilation unit rules.
        plugins: Explicit plugin list, or ``None`` for the workspace default.
        languages: Languages to keep, or ``None`` for all.
    """

    rule_kind: str = DEFAULT_RULE_KIND
    plugins: tuple[str, ...] | None = None
    languages: frozenset[str] | None = None

    def child(self, directives: Sequence[Directive], known_plugins: Collection[str]) -> DirectoryConfig:
        """Return this configuration with *directives* applied on top.

        Raises:
            DirectiveError: On an unknown directive, an unknown plugin, or an
                invalid rule kind.
        """
        config = self
        for directive in directives:
            values = _split_values(directive.value)
            if directive.name == LANGUAGE_DIRECTIVE:
                config = replace(config, languages=frozenset(values) if values else None)
            elif directive.name == PLUGINS_DIRECTIVE:
                unknown = [v for v in values if v not in known_plugins]
                if unknown:
                    raise DirectiveError(
                        f"line {directive.line}: {PLUGINS_DIRECTIVE}: unknown plugin(s) {', '.join(unknown)}"
                    )
                config = replace(config, plugins=tuple(values) if values else None)
            elif directive.name == RULE_DIRECTIVE:
                if len(values) != 1 or not _IDENT_RE.fullmatch(values[0]):
                    raise DirectiveError(
                        f"line {directive.line}: {RULE_DIRECTIVE}: expected a single rule kind, got {directive.value!r}"
                    )
                config = replace(config, rule_kind=values[0])
            else:
                raise DirectiveError(f"line {directive.line}: unknown directive '{directive.name}'")
        return config


def parse_directives(text: str) -> list[Directive]:
    """Extract all protobuild directives from BUILD-file *text*, in file order."""
    directives: list[Directive] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        match = _DIRECTIVE_RE.match(line)
        if match is None:
            continue
        directives.append(Directive(name=match.group("name"), value=match.group("value").strip(), line=lineno))
    return directives


# ################
# Implementation
# ################

_DIRECTIVE_RE = re.compile(r"^\s*#\s*" + re.escape(DIRECTIVE_PREFIX) + r"(?P<name>\w+)(?P<value>.*)$")

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _split_values(value: str) -> list[str]:
    return [v for v in re.split(r"[\s,]+", value) if v]
