# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""The engine's principal output record: one build rule instance before emission."""

from __future__ import annotations

from dataclasses import dataclass, field

from protobuild.engine.diagnostics import Diagnostic
from protobuild.engine.plugins import PluginSpec
from protobuild.model.label import Label, make_label
from protobuild.model.units import AdoptedUnit, SynthesizedUnit

# ###############
# Public Interface
# ###############

# Tag carried by every emitted rule; rules without it are hand-written.
GENERATED_TAG = "protobuild"


@dataclass
class GeneratedDeclaration:
    """A declaration produced for one unit and one plugin.

    A declaration without a plugin is the library rule of a synthesized unit.
    The resolver fills in ``deps`` exactly once; the host then merges or,
    when ``empty`` is set, deletes the rule.

    Attributes:
        kind: Rule kind, ``<plugin>_<rule kind>`` for plugin declarations.
        name: Rule name.
        directory: Package the rule lives in.
        unit: The owning unit; ``None`` only for stale rules marked empty.
        plugin: The owning plugin; ``None`` for library declarations.
        imports: Unresolved references: import paths, then plugin extra deps.
        deps: Resolved dependency labels.
        diagnostics: Findings attached during resolution.
        empty: The rule would own no sources and should be deleted.
        merge_directories: Copied from the plugin for the host.
        resolved: Set once ``deps`` has been filled in.
    """

    kind: str
    name: str
    directory: str
    unit: SynthesizedUnit | AdoptedUnit | None
    plugin: PluginSpec | None = None
    imports: list[str] = field(default_factory=list)
    deps: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    empty: bool = False
    merge_directories: bool = False
    resolved: bool = False

    @property
    def label(self) -> Label:
        return make_label(self.directory, self.name)

    @property
    def is_library(self) -> bool:
        return self.plugin is None and self.unit is not None

    @property
    def srcs(self) -> list[str]:
        """Source file names of the owning unit, in file order."""
        if self.unit is None:
            return []
        return [f.basename for f in self.unit.files]
