# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Plugin records and the registry that maps plugin names to them.

A plugin is a plain record of values and function-valued fields. Adding a
target language means registering another record; nothing is subclassed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from protobuild.model.units import AdoptedUnit, SynthesizedUnit

if TYPE_CHECKING:
    from protobuild.engine.declarations import GeneratedDeclaration
    from protobuild.engine.index import ImportIndex

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

PLUGIN_KINDS = ("proto", "grpc")

# Prefix of an extra dependency that points at another plugin's output for the same unit.
PLUGIN_REF_PREFIX = "plugin:"

DEFAULT_OUTPUT_TEMPLATE = "{base}_{plugin}"

ResolveHook = Callable[["GeneratedDeclaration", "ImportIndex"], list[str]]


class PluginError(Exception):
    """Raised for invalid plugin definitions and unknown plugin references."""


@dataclass(frozen=True)
class PluginSpec:
    """A configured plugin.

    Attributes:
        name: Stable reference used by directives and ``plugin:`` dependencies.
        language: Language family, matched by the ``proto_language`` directive.
        kind: ``"proto"`` for message code, ``"grpc"`` for service stubs.
        output: Naming template for the generated declaration. Placeholders:
            ``{base}`` (unit name without ``_proto``), ``{unit}``, ``{plugin}``.
        deps: Extra dependencies added to every declaration of this plugin.
        merge_directories: Whether the host merges this plugin's outputs from
            several directories into one tree.
        resolve: Optional resolution hook replacing the default resolver.
    """

    name: str
    language: str
    kind: str = "proto"
    output: str = DEFAULT_OUTPUT_TEMPLATE
    deps: tuple[str, ...] = ()
    merge_directories: bool = False
    resolve: ResolveHook | None = None

    def output_name(self, unit: SynthesizedUnit | AdoptedUnit) -> str:
        """Return the declaration name this plugin produces for *unit*."""
        return _format_output(self.output, unit.base_name, unit.name, self.name)


class PluginRegistry:
    """Ordered mapping from plugin names to :class:`PluginSpec` records.

    Iteration follows registration order, which is also the order in which
    declarations are generated.
    """

    def __init__(self, specs: list[PluginSpec] | None = None) -> None:
        self._specs: dict[str, PluginSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: PluginSpec) -> None:
        """Add *spec* to the registry.

        Raises:
            PluginError: If the name is taken or the record is invalid.
        """
        if spec.name in self._specs:
            raise PluginError(f"Plugin '{spec.name}' is already registered")
        _validate(spec)
        self._specs[spec.name] = spec
        logger.debug("Registered plugin %s (%s/%s)", spec.name, spec.language, spec.kind)

    def get(self, name: str) -> PluginSpec:
        """Return the plugin named *name*.

        Raises:
            PluginError: If no such plugin is registered.
        """
        try:
            return self._specs[name]
        except KeyError:
            known = ", ".join(self._specs) or "none"
            raise PluginError(f"Unknown plugin '{name}' (known plugins: {known})") from None

    def names(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[PluginSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


def builtin_plugins() -> list[PluginSpec]:
    """Return the plugins available without any workspace configuration."""
    return [
        PluginSpec(name="go", language="go", deps=("@org_golang_google_protobuf//proto",)),
        PluginSpec(
            name="go_grpc",
            language="go",
            kind="grpc",
            deps=("plugin:go", "@org_golang_google_grpc//:grpc"),
        ),
        PluginSpec(name="py", language="py"),
        PluginSpec(name="py_grpc", language="py", kind="grpc", deps=("plugin:py",)),
    ]


# ################
# Implementation
# ################


def _format_output(template: str, base: str, unit: str, plugin: str) -> str:
    try:
        return template.format(base=base, unit=unit, plugin=plugin)
    except (KeyError, IndexError, ValueError) as exc:
        raise PluginError(f"Invalid output template {template!r} for plugin '{plugin}': {exc}") from exc


def _validate(spec: PluginSpec) -> None:
    if not spec.name or not spec.name.replace("_", "").isalnum():
        raise PluginError(f"Invalid plugin name {spec.name!r}: expected letters, digits and underscores")
    if spec.kind not in PLUGIN_KINDS:
        raise PluginError(f"Plugin '{spec.name}': kind must be one of {', '.join(PLUGIN_KINDS)}, got {spec.kind!r}")
    if not _format_output(spec.output, "x", "x_proto", spec.name):
        raise PluginError(f"Plugin '{spec.name}': output template {spec.output!r} produces an empty name")
    for dep in spec.deps:
        if dep.startswith(PLUGIN_REF_PREFIX) and dep[len(PLUGIN_REF_PREFIX) :] == spec.name:
            raise PluginError(f"Plugin '{spec.name}' cannot depend on its own output")
