# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""The explicit run context threaded through every engine call."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from protobuild.engine.generate import declaration_kind
from protobuild.engine.index import ImportIndex
from protobuild.engine.plugins import DEFAULT_OUTPUT_TEMPLATE, PluginError, PluginRegistry, PluginSpec, builtin_plugins
from protobuild.workspace.config import WorkspaceConfig, WorkspaceConfigError
from protobuild.workspace.directives import Directive, DirectoryConfig

# ###############
# Public Interface
# ###############


@dataclass
class GenerationContext:
    """State shared by all directories of one run.

    Attributes:
        registry: The plugins available in this workspace.
        workspace: The loaded workspace configuration.
        index: The import index, filled as directories are generated.
        lenient: Skip unparseable files with a diagnostic instead of aborting.
    """

    registry: PluginRegistry
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    index: ImportIndex = field(default_factory=ImportIndex)
    lenient: bool = False

    @classmethod
    def from_workspace(cls, workspace: WorkspaceConfig, *, lenient: bool = False) -> GenerationContext:
        """Build a context with the registry and index described by *workspace*.

        Raises:
            WorkspaceConfigError: If a plugin definition or the default plugin list is invalid.
        """
        registry = build_registry(workspace)
        for name in workspace.default_plugins or []:
            if name not in registry:
                raise WorkspaceConfigError(f"default-plugins: unknown plugin '{name}'")
        return cls(
            registry=registry,
            workspace=workspace,
            index=ImportIndex(workspace.external_imports),
            lenient=lenient,
        )

    def root_config(self) -> DirectoryConfig:
        return DirectoryConfig(rule_kind=self.workspace.rule_kind)

    def configure(self, parent: DirectoryConfig, directives: Sequence[Directive]) -> DirectoryConfig:
        """Apply a directory's directives on top of its parent's configuration."""
        return parent.child(directives, self.registry.names())

    def enabled_plugins(self, config: DirectoryConfig) -> list[PluginSpec]:
        """Plugins that apply under *config*, in configuration order."""
        if config.plugins is not None:
            names = list(config.plugins)
        elif self.workspace.default_plugins is not None:
            names = list(self.workspace.default_plugins)
        else:
            names = self.registry.names()
        plugins = [self.registry.get(name) for name in names]
        if config.languages is not None:
            plugins = [p for p in plugins if p.language in config.languages]
        return plugins

    def generated_kinds(self, rule_kind: str) -> set[str]:
        """Every rule kind this engine may have written under *rule_kind*."""
        return {rule_kind} | {declaration_kind(plugin, rule_kind) for plugin in self.registry}


def build_registry(workspace: WorkspaceConfig) -> PluginRegistry:
    """Combine the built-in plugins with those defined in *workspace*.

    Raises:
        WorkspaceConfigError: If a configured plugin is invalid.
    """
    specs: dict[str, PluginSpec] = {}
    if not workspace.replace_builtin_plugins:
        specs = {spec.name: spec for spec in builtin_plugins()}
    for plugin in workspace.plugins:
        specs[plugin.name] = PluginSpec(
            name=plugin.name,
            language=plugin.language or plugin.name.split("_", 1)[0],
            kind=plugin.kind,
            output=plugin.output or DEFAULT_OUTPUT_TEMPLATE,
            deps=tuple(plugin.deps),
            merge_directories=plugin.merge_directories,
        )
    try:
        return PluginRegistry(list(specs.values()))
    except PluginError as exc:
        raise WorkspaceConfigError(f"Invalid plugin configuration: {exc}") from exc
