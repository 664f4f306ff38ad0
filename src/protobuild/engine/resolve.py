# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Turn a declaration's unresolved references into dependency labels.

Three kinds of reference are handled:

* **Import paths**: ``pkg/a/a.proto``. Looked up in the :class:`ImportIndex`;
  a hit yields the owning unit's output for the *same plugin* as the
  declaration being resolved, so a Go declaration only ever depends on Go
  declarations. Misses fall back to the configured external imports and are
  otherwise reported as :class:`UnresolvedImportWarning`.
* **Plugin references**: ``plugin:go``. The named plugin's output for the
  same unit, e.g. a gRPC declaration depending on its message declaration.
* **Labels**: ``@repo//pkg:target`` or ``//pkg:target``. Passed through.

A reference that resolves to the declaration's own unit is dropped.
"""

from __future__ import annotations

import logging

from protobuild.engine.declarations import GeneratedDeclaration
from protobuild.engine.diagnostics import UnresolvedImportWarning
from protobuild.engine.index import LIBRARY_OUTPUT, ImportIndex
from protobuild.engine.plugins import PLUGIN_REF_PREFIX
from protobuild.model.label import LabelError, parse_label

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ResolveError(Exception):
    """Raised when a declaration is resolved twice."""


def resolve(declaration: GeneratedDeclaration, index: ImportIndex) -> GeneratedDeclaration:
    """Fill in ``declaration.deps`` from its unresolved references.

    The plugin's own hook is used when it defines one. Empty declarations
    are marked resolved without dependencies.

    Raises:
        ResolveError: If *declaration* has already been resolved.
    """
    if declaration.resolved:
        raise ResolveError(f"Declaration {declaration.label} has already been resolved")
    if declaration.empty:
        declaration.deps = []
    else:
        hook = resolve_references
        if declaration.plugin is not None and declaration.plugin.resolve is not None:
            hook = declaration.plugin.resolve
        declaration.deps = list(hook(declaration, index))
    declaration.resolved = True
    logger.debug("Resolved %s: %d deps", declaration.label, len(declaration.deps))
    return declaration


def resolve_references(declaration: GeneratedDeclaration, index: ImportIndex) -> list[str]:
    """Default resolution hook; see the module docstring.

    Diagnostics are appended to ``declaration.diagnostics``.

    Returns:
        Sorted, de-duplicated dependency labels relative to the declaration's package.
    """
    return _Resolver(declaration, index).run()


# ################
# Implementation
# ################


class _Resolver:
    def __init__(self, declaration: GeneratedDeclaration, index: ImportIndex) -> None:
        self._decl = declaration
        self._index = index
        self._output_key = declaration.plugin.name if declaration.plugin is not None else LIBRARY_OUTPUT
        self._deps: set[str] = set()

    def run(self) -> list[str]:
        seen: set[str] = set()
        for ref in self._decl.imports:
            if ref in seen:
                continue
            seen.add(ref)
            if ref.startswith(PLUGIN_REF_PREFIX):
                self._resolve_plugin_ref(ref)
            elif ref.startswith(("@", "//")):
                self._resolve_label(ref)
            else:
                self._resolve_import(ref)
        return sorted(self._deps)

    def _add(self, label_text: str) -> None:
        self._deps.add(parse_label(label_text).rel(self._decl.directory))

    def _warn(self, ref: str, message: str) -> None:
        logger.debug("%s: %s", self._decl.label, message)
        self._decl.diagnostics.append(
            UnresolvedImportWarning(message=message, declaration=str(self._decl.label), reference=ref)
        )

    def _resolve_plugin_ref(self, ref: str) -> None:
        plugin_name = ref[len(PLUGIN_REF_PREFIX) :]
        unit = self._decl.unit
        entry = self._index.unit_entry(unit.label) if unit is not None else None
        target = entry.outputs.get(plugin_name) if entry is not None else None
        if target is None:
            self._warn(ref, f"{self._decl.label}: plugin '{plugin_name}' produces no output for this unit")
            return
        self._add(str(target))

    def _resolve_label(self, ref: str) -> None:
        try:
            self._add(ref)
        except LabelError as exc:
            self._warn(ref, f"{self._decl.label}: invalid dependency label '{ref}': {exc}")

    def _resolve_import(self, import_path: str) -> None:
        entry = self._index.lookup(import_path)
        if entry is None:
            external = self._index.external(import_path, self._output_key)
            if external is None:
                self._warn(import_path, f"{self._decl.label}: no rule provides import '{import_path}'")
                return
            self._resolve_label(external)
            return

        ambiguity = self._index.ambiguity(import_path)
        if ambiguity is not None and ambiguity not in self._decl.diagnostics:
            self._decl.diagnostics.append(ambiguity)

        if self._decl.unit is not None and entry.unit == self._decl.unit.label:
            return
        target = entry.outputs.get(self._output_key)
        if target is None:
            self._warn(
                import_path,
                f"{self._decl.label}: import '{import_path}' is provided by {entry.unit}, "
                f"which has no '{self._output_key}' output",
            )
            return
        self._add(str(target))
