# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build-graph synthesis: aggregation, rule generation, indexing and resolution."""

from protobuild.engine.aggregate import AggregateResult, aggregate, default_unit_name
from protobuild.engine.context import GenerationContext, build_registry
from protobuild.engine.declarations import GeneratedDeclaration
from protobuild.engine.diagnostics import (
    AdoptedUnitMismatch,
    AmbiguousImportWarning,
    Diagnostic,
    ParseFailure,
    UnresolvedImportWarning,
)
from protobuild.engine.emit import render_declaration, render_package, serialize
from protobuild.engine.generate import declaration_kind, generate, generate_library
from protobuild.engine.index import ImportIndex, IndexEntry
from protobuild.engine.package import PackageResult, generate_package, parse_package_files
from protobuild.engine.plugins import PluginError, PluginRegistry, PluginSpec, builtin_plugins
from protobuild.engine.resolve import ResolveError, resolve, resolve_references
from protobuild.engine.run import GenerationError, RunResult, resolve_packages, run

__all__ = [
    "AdoptedUnitMismatch",
    "AggregateResult",
    "AmbiguousImportWarning",
    "Diagnostic",
    "GeneratedDeclaration",
    "GenerationContext",
    "GenerationError",
    "ImportIndex",
    "IndexEntry",
    "PackageResult",
    "ParseFailure",
    "PluginError",
    "PluginRegistry",
    "PluginSpec",
    "ResolveError",
    "RunResult",
    "UnresolvedImportWarning",
    "aggregate",
    "build_registry",
    "builtin_plugins",
    "declaration_kind",
    "default_unit_name",
    "generate",
    "generate_library",
    "generate_package",
    "parse_package_files",
    "render_declaration",
    "render_package",
    "resolve",
    "resolve_packages",
    "resolve_references",
    "run",
    "serialize",
]
