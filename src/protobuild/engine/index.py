# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run-wide mapping from import paths to the units and outputs that satisfy them.

The index is filled directory by directory as the walk proceeds and is
queried once every directory has been generated. Registration order decides
ambiguous paths: the first unit to claim a path keeps it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from protobuild.engine.diagnostics import AmbiguousImportWarning
from protobuild.model.label import Label
from protobuild.model.units import AdoptedUnit, SynthesizedUnit

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Output key under which a unit's own library label is stored.
LIBRARY_OUTPUT = ""

# Key in an external import mapping that applies to every plugin.
ANY_PLUGIN = "*"


@dataclass(frozen=True)
class IndexEntry:
    """What the index knows about one unit.

    Attributes:
        unit: Label of the unit.
        outputs: Plugin name to the label of that plugin's declaration for
            the unit; ``LIBRARY_OUTPUT`` maps to the unit itself.
    """

    unit: Label
    outputs: Mapping[str, Label]


class ImportIndex:
    """Import path to :class:`IndexEntry` mapping with ambiguity tracking."""

    def __init__(self, external_imports: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._by_path: dict[str, IndexEntry] = {}
        self._by_unit: dict[Label, IndexEntry] = {}
        self._ignored: dict[str, list[Label]] = {}
        self._external = {path: dict(targets) for path, targets in (external_imports or {}).items()}

    def register_unit(self, unit: SynthesizedUnit | AdoptedUnit, outputs: Mapping[str, Label]) -> IndexEntry:
        """Record *unit* and its plugin outputs under each of its import paths."""
        entry = IndexEntry(unit=unit.label, outputs={LIBRARY_OUTPUT: unit.label, **outputs})
        self._by_unit[unit.label] = entry
        for path in unit.import_paths:
            existing = self._by_path.get(path)
            if existing is None:
                self._by_path[path] = entry
            elif existing.unit != entry.unit:
                ignored = self._ignored.setdefault(path, [])
                if entry.unit not in ignored:
                    logger.debug("Import %s already provided by %s, ignoring %s", path, existing.unit, entry.unit)
                    ignored.append(entry.unit)
        return entry

    def lookup(self, import_path: str) -> IndexEntry | None:
        return self._by_path.get(import_path)

    def unit_entry(self, unit: Label) -> IndexEntry | None:
        return self._by_unit.get(unit)

    def external(self, import_path: str, plugin: str) -> str | None:
        """Return the configured external label for *import_path* and *plugin*, if any."""
        targets = self._external.get(import_path)
        if not targets:
            return None
        return targets.get(plugin, targets.get(ANY_PLUGIN))

    def ambiguity(self, import_path: str) -> AmbiguousImportWarning | None:
        """Return a warning if more than one unit claimed *import_path*."""
        others = self._ignored.get(import_path)
        if not others:
            return None
        chosen = self._by_path[import_path].unit
        other_labels = tuple(str(label) for label in others)
        return AmbiguousImportWarning(
            message=(
                f"Import '{import_path}' is provided by several units; using {chosen}, "
                f"ignoring {', '.join(other_labels)}"
            ),
            import_path=import_path,
            chosen=str(chosen),
            others=other_labels,
        )

    @property
    def diagnostics(self) -> list[AmbiguousImportWarning]:
        """All ambiguity warnings, ordered by import path."""
        warnings: list[AmbiguousImportWarning] = []
        for path in sorted(self._ignored):
            warning = self.ambiguity(path)
            if warning is not None:
                warnings.append(warning)
        return warnings

    def __contains__(self, import_path: object) -> bool:
        return import_path in self._by_path

    def __len__(self) -> int:
        return len(self._by_path)
