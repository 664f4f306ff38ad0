# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Produce one declaration per unit per plugin."""

from __future__ import annotations

from collections.abc import Sequence

from protobuild.engine.declarations import GeneratedDeclaration
from protobuild.engine.plugins import PluginSpec
from protobuild.model.units import AdoptedUnit, SynthesizedUnit

# ###############
# Public Interface
# ###############


def declaration_kind(plugin: PluginSpec, rule_kind: str) -> str:
    """Rule kind of *plugin*'s declarations, e.g. ``go_proto_library``."""
    return f"{plugin.name}_{rule_kind}"


def generate(
    unit: SynthesizedUnit | AdoptedUnit,
    plugins: Sequence[PluginSpec],
    *,
    rule_kind: str,
) -> list[GeneratedDeclaration]:
    """Return one declaration per plugin for *unit*, in plugin order.

    Each declaration starts out with the unit's imports (file order, then
    import order) followed by the plugin's extra dependencies, all
    unresolved. A declaration is flagged empty when the unit declares no
    sources, or when a gRPC plugin meets a unit known to have no services.
    """
    imports = unit_imports(unit)
    declares_sources = _declares_sources(unit)
    services = _has_services(unit)
    declarations: list[GeneratedDeclaration] = []
    for plugin in plugins:
        empty = not declares_sources or (plugin.kind == "grpc" and services is False)
        declarations.append(
            GeneratedDeclaration(
                kind=declaration_kind(plugin, rule_kind),
                name=plugin.output_name(unit),
                directory=unit.directory,
                unit=unit,
                plugin=plugin,
                imports=[*imports, *plugin.deps],
                empty=empty,
                merge_directories=plugin.merge_directories,
            )
        )
    return declarations


def generate_library(unit: SynthesizedUnit, *, rule_kind: str) -> GeneratedDeclaration:
    """Return the library declaration that makes a synthesized unit exist in the build graph."""
    return GeneratedDeclaration(
        kind=rule_kind,
        name=unit.name,
        directory=unit.directory,
        unit=unit,
        imports=unit_imports(unit),
        empty=not unit.files,
    )


def unit_imports(unit: SynthesizedUnit | AdoptedUnit) -> list[str]:
    """All import paths of the unit's files, in file order then source order."""
    return [imp for f in unit.files for imp in f.imports]


# ################
# Implementation
# ################


def _declares_sources(unit: SynthesizedUnit | AdoptedUnit) -> bool:
    if isinstance(unit, AdoptedUnit):
        return bool(unit.srcs)
    return bool(unit.files)


def _has_services(unit: SynthesizedUnit | AdoptedUnit) -> bool | None:
    """True/False when every source is known, None when some sources live elsewhere."""
    if any(f.has_services for f in unit.files):
        return True
    if isinstance(unit, AdoptedUnit) and len(unit.files) < len(unit.srcs):
        return None
    return False
