# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Group a directory's .proto files into compilation units.

Hand-written unit rules are adopted first and keep every file they claim.
Whatever is left over becomes a single synthesized unit for the directory,
so each discovered file ends up in exactly one unit.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from protobuild.engine.diagnostics import AdoptedUnitMismatch
from protobuild.model.entities import ProtoFile
from protobuild.model.label import LabelError, make_label, parse_label
from protobuild.model.units import PROTO_SUFFIX, AdoptedUnit, SynthesizedUnit
from protobuild.workspace.buildfile import BuildRule

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

ROOT_UNIT_BASE = "root"


@dataclass
class AggregateResult:
    """Units of one directory: adopted ones in BUILD order, then the synthesized one."""

    units: list[SynthesizedUnit | AdoptedUnit] = field(default_factory=list)
    diagnostics: list[AdoptedUnitMismatch] = field(default_factory=list)

    @property
    def adopted(self) -> list[AdoptedUnit]:
        return [u for u in self.units if isinstance(u, AdoptedUnit)]

    @property
    def synthesized(self) -> list[SynthesizedUnit]:
        return [u for u in self.units if isinstance(u, SynthesizedUnit)]


def aggregate(directory: str, files: Sequence[ProtoFile], adopted_rules: Sequence[BuildRule]) -> AggregateResult:
    """Partition *files* into adopted and synthesized units.

    Args:
        directory: Workspace-relative directory being processed.
        files: Parsed files of the directory, in any order.
        adopted_rules: Hand-written unit rules found in the directory's BUILD file.

    Returns:
        The units and any mismatch diagnostics.
    """
    by_name = {f.basename: f for f in sorted(files, key=lambda f: f.basename)}
    claimed: dict[str, str] = {}
    result = AggregateResult()

    for rule in adopted_rules:
        unit, diagnostics = _adopt(directory, rule, by_name, claimed)
        result.units.append(unit)
        result.diagnostics.extend(diagnostics)

    remaining = tuple(f for name, f in by_name.items() if name not in claimed)
    if remaining:
        taken = {u.name for u in result.units}
        name = default_unit_name(directory)
        if name in taken:
            name = remaining[0].stem + PROTO_SUFFIX
        result.units.append(SynthesizedUnit(name=name, directory=directory, files=remaining))
        logger.debug("%s: synthesized %s with %d file(s)", directory or ".", name, len(remaining))
    return result


def default_unit_name(directory: str) -> str:
    """Name of the synthesized unit for *directory*: its last segment plus ``_proto``."""
    base = directory.rsplit("/", 1)[-1] if directory else ROOT_UNIT_BASE
    return base + PROTO_SUFFIX


# ################
# Implementation
# ################


def _adopt(
    directory: str,
    rule: BuildRule,
    by_name: dict[str, ProtoFile],
    claimed: dict[str, str],
) -> tuple[AdoptedUnit, list[AdoptedUnitMismatch]]:
    unit_label = str(make_label(directory, rule.name))
    srcs = rule.attr_strings("srcs")
    files: list[ProtoFile] = []
    missing: list[str] = []
    diagnostics: list[AdoptedUnitMismatch] = []

    for src in srcs:
        try:
            label = parse_label(src)
        except LabelError as exc:
            diagnostics.append(
                AdoptedUnitMismatch(
                    message=f"{unit_label}: unparseable source label {src!r}: {exc}",
                    unit=unit_label,
                    src=src,
                )
            )
            continue
        # Cross-package sources and files in subdirectories are the host's concern.
        if not label.in_package(directory) or "/" in label.name:
            continue
        proto = by_name.get(label.name)
        if proto is None:
            missing.append(src)
            diagnostics.append(
                AdoptedUnitMismatch(
                    message=f"{unit_label}: source '{src}' does not exist in '{directory or '.'}'",
                    unit=unit_label,
                    src=src,
                )
            )
            continue
        owner = claimed.get(proto.basename)
        if owner is not None and owner != unit_label:
            diagnostics.append(
                AdoptedUnitMismatch(
                    message=f"{unit_label}: source '{src}' is already claimed by {owner}",
                    unit=unit_label,
                    src=src,
                )
            )
            continue
        if owner is None:
            claimed[proto.basename] = unit_label
            files.append(proto)

    for diagnostic in diagnostics:
        logger.debug("%s", diagnostic.message)
    unit = AdoptedUnit(
        name=rule.name,
        directory=directory,
        srcs=tuple(srcs),
        files=tuple(files),
        missing_srcs=tuple(missing),
    )
    return unit, diagnostics
