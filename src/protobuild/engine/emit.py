# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Deterministic rendering of generated declarations.

Two formats are supported: Starlark rule calls, ready to be merged into a
BUILD file, and a JSON document describing the whole run. Both are byte
identical across runs over an unchanged tree.
"""

from __future__ import annotations

import json
from typing import Any

from protobuild.engine.declarations import GENERATED_TAG, GeneratedDeclaration
from protobuild.engine.diagnostics import (
    AdoptedUnitMismatch,
    AmbiguousImportWarning,
    Diagnostic,
    ParseFailure,
    UnresolvedImportWarning,
)
from protobuild.engine.package import PackageResult
from protobuild.engine.run import RunResult

# ###############
# Public Interface
# ###############

OUTPUT_FORMAT_VERSION = "1"

DEFAULT_VISIBILITY = "//visibility:public"


def render_declaration(declaration: GeneratedDeclaration) -> str:
    """Render one non-empty declaration as a Starlark rule call."""
    lines = [f"{declaration.kind}("]
    lines.append(f"    name = {_quote(declaration.name)},")
    if declaration.is_library:
        lines.extend(_list_attr("srcs", declaration.srcs, keep_empty=True))
    elif declaration.unit is not None:
        lines.append(f"    proto = {_quote(declaration.unit.label.rel(declaration.directory))},")
    lines.extend(_list_attr("deps", declaration.deps))
    if declaration.merge_directories:
        lines.append("    merge_directories = True,")
    lines.extend(_list_attr("tags", [GENERATED_TAG]))
    lines.extend(_list_attr("visibility", [DEFAULT_VISIBILITY]))
    lines.append(")")
    return "\n".join(lines)


def render_package(result: PackageResult) -> str:
    """Render every non-empty declaration of a directory, libraries first."""
    blocks = [render_declaration(d) for d in [*result.libraries, *result.declarations] if not d.empty]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def serialize(result: RunResult) -> str:
    """Serialize a run to an indented JSON string with sorted keys."""
    return json.dumps(_run_to_dict(result), indent=2, sort_keys=True) + "\n"


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    """Encode a diagnostic as a tagged dict."""
    if isinstance(diagnostic, UnresolvedImportWarning):
        return {
            "k": "unresolved-import",
            "message": diagnostic.message,
            "declaration": diagnostic.declaration,
            "reference": diagnostic.reference,
        }
    if isinstance(diagnostic, AmbiguousImportWarning):
        return {
            "k": "ambiguous-import",
            "message": diagnostic.message,
            "import": diagnostic.import_path,
            "chosen": diagnostic.chosen,
            "others": list(diagnostic.others),
        }
    if isinstance(diagnostic, AdoptedUnitMismatch):
        return {
            "k": "adopted-unit-mismatch",
            "message": diagnostic.message,
            "unit": diagnostic.unit,
            "src": diagnostic.src,
        }
    # ParseFailure is the only remaining variant.
    assert isinstance(diagnostic, ParseFailure)
    return {"k": "parse-failure", "message": diagnostic.message, "file": diagnostic.filename}


# ################
# Implementation
# ################


def _quote(value: str) -> str:
    return json.dumps(value)


def _list_attr(name: str, values: list[str], *, keep_empty: bool = False) -> list[str]:
    if not values:
        return [f"    {name} = [],"] if keep_empty else []
    if len(values) == 1:
        return [f"    {name} = [{_quote(values[0])}],"]
    return [f"    {name} = ["] + [f"        {_quote(v)}," for v in values] + ["    ],"]


def _run_to_dict(result: RunResult) -> dict[str, Any]:
    return {
        "v": OUTPUT_FORMAT_VERSION,
        "packages": [_package_to_dict(p) for p in result.packages],
        "diagnostics": [diagnostic_to_dict(d) for d in result.diagnostics],
    }


def _package_to_dict(result: PackageResult) -> dict[str, Any]:
    return {
        "directory": result.directory,
        "units": [
            {"name": u.name, "kind": u.kind, "srcs": [f.basename for f in u.files]} for u in result.units
        ],
        "declarations": [_declaration_to_dict(d) for d in result.all_declarations],
    }


def _declaration_to_dict(declaration: GeneratedDeclaration) -> dict[str, Any]:
    d: dict[str, Any] = {
        "kind": declaration.kind,
        "name": declaration.name,
        "label": str(declaration.label),
        "deps": declaration.deps,
        "empty": declaration.empty,
        "merge_directories": declaration.merge_directories,
    }
    if declaration.unit is not None:
        d["unit"] = str(declaration.unit.label)
    if declaration.plugin is not None:
        d["plugin"] = declaration.plugin.name
    if declaration.is_library:
        d["srcs"] = declaration.srcs
    if declaration.diagnostics:
        d["diagnostics"] = [diagnostic_to_dict(x) for x in declaration.diagnostics]
    return d
