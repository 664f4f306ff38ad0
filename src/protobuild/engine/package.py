# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation for a single directory: parse, aggregate, generate, index."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from protobuild.engine.aggregate import aggregate
from protobuild.engine.context import GenerationContext
from protobuild.engine.declarations import GENERATED_TAG, GeneratedDeclaration
from protobuild.engine.diagnostics import Diagnostic, ParseFailure
from protobuild.engine.generate import generate, generate_library
from protobuild.model.entities import ProtoFile
from protobuild.model.units import AdoptedUnit, SynthesizedUnit
from protobuild.parser.parser import ParseError, parse_file
from protobuild.workspace.buildfile import BuildFile, BuildRule
from protobuild.workspace.directives import DirectoryConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

PROTO_EXTENSION = ".proto"


@dataclass
class PackageResult:
    """Everything generated for one directory.

    Attributes:
        directory: Workspace-relative directory.
        units: Adopted units in BUILD order, then the synthesized unit.
        libraries: Library declarations of synthesized units.
        declarations: Plugin declarations, unit by unit in plugin order.
        empty: Previously generated rules the host should delete.
        diagnostics: Directory-level findings (mismatches, skipped files).
    """

    directory: str
    units: list[SynthesizedUnit | AdoptedUnit] = field(default_factory=list)
    libraries: list[GeneratedDeclaration] = field(default_factory=list)
    declarations: list[GeneratedDeclaration] = field(default_factory=list)
    empty: list[GeneratedDeclaration] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def all_declarations(self) -> list[GeneratedDeclaration]:
        return [*self.libraries, *self.declarations, *self.empty]


def is_proto_file(name: str) -> bool:
    return name.endswith(PROTO_EXTENSION)


def is_generated_rule(rule: BuildRule) -> bool:
    """Whether *rule* was emitted by an earlier run rather than written by hand."""
    return GENERATED_TAG in rule.attr_strings("tags")


def parse_package_files(
    ctx: GenerationContext,
    path: Path,
    rel: str,
    filenames: Sequence[str],
) -> tuple[list[ProtoFile], list[Diagnostic]]:
    """Parse every .proto file among *filenames* in sorted order.

    Raises:
        ParseError: On the first unparseable file, unless the context is lenient.
    """
    files: list[ProtoFile] = []
    diagnostics: list[Diagnostic] = []
    for name in sorted(n for n in filenames if is_proto_file(n)):
        try:
            files.append(parse_file(path / name, rel))
        except ParseError as exc:
            if not ctx.lenient:
                raise
            logger.debug("Skipping %s: %s", exc.filename, exc)
            diagnostics.append(ParseFailure(message=str(exc), filename=exc.filename))
    return files, diagnostics


def generate_package(
    ctx: GenerationContext,
    rel: str,
    config: DirectoryConfig,
    files: Sequence[ProtoFile],
    build_file: BuildFile | None = None,
) -> PackageResult:
    """Generate the declarations of directory *rel* and register its units in the index.

    Args:
        ctx: The run context.
        rel: Workspace-relative directory.
        config: Configuration in effect for the directory.
        files: The directory's parsed .proto files.
        build_file: The directory's existing BUILD file, if any.

    Returns:
        The directory's units and unresolved declarations.
    """
    rules = build_file.rules if build_file is not None else []
    owned = [r for r in rules if is_generated_rule(r)]
    adopted_rules = [r for r in rules if r.kind == config.rule_kind and not is_generated_rule(r)]
    aggregated = aggregate(rel, files, adopted_rules)
    plugins = ctx.enabled_plugins(config)

    result = PackageResult(directory=rel, units=aggregated.units)
    result.diagnostics.extend(aggregated.diagnostics)
    for unit in aggregated.units:
        if isinstance(unit, SynthesizedUnit):
            result.libraries.append(generate_library(unit, rule_kind=config.rule_kind))
        declarations = generate(unit, plugins, rule_kind=config.rule_kind)
        result.declarations.extend(declarations)
        ctx.index.register_unit(
            unit,
            {d.plugin.name: d.label for d in declarations if d.plugin is not None and not d.empty},
        )

    generated = {(d.kind, d.name) for d in [*result.libraries, *result.declarations]}
    generated_kinds = ctx.generated_kinds(config.rule_kind)
    for rule in owned:
        if rule.kind in generated_kinds and (rule.kind, rule.name) not in generated:
            logger.debug("%s: marking stale %s %s empty", rel or ".", rule.kind, rule.name)
            result.empty.append(
                GeneratedDeclaration(kind=rule.kind, name=rule.name, directory=rel, unit=None, empty=True)
            )

    logger.debug(
        "%s: %d unit(s), %d declaration(s), %d stale",
        rel or ".",
        len(result.units),
        len(result.declarations),
        len(result.empty),
    )
    return result
