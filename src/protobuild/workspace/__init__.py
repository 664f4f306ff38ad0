# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration, directives, BUILD files and traversal for protobuild."""

from protobuild.workspace.buildfile import (
    BUILD_FILE_NAMES,
    BuildFile,
    BuildFileError,
    BuildRule,
    parse_build_file,
    read_build_file,
)
from protobuild.workspace.config import (
    DEFAULT_RULE_KIND,
    WORKSPACE_CONFIG_NAME,
    PluginConfig,
    WorkspaceConfig,
    WorkspaceConfigError,
    find_workspace_config,
    load_workspace_config,
)
from protobuild.workspace.directives import (
    Directive,
    DirectiveError,
    DirectoryConfig,
    parse_directives,
)
from protobuild.workspace.walk import walk

__all__ = [
    "BUILD_FILE_NAMES",
    "BuildFile",
    "BuildFileError",
    "BuildRule",
    "DEFAULT_RULE_KIND",
    "Directive",
    "DirectiveError",
    "DirectoryConfig",
    "PluginConfig",
    "WORKSPACE_CONFIG_NAME",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "find_workspace_config",
    "load_workspace_config",
    "parse_build_file",
    "parse_directives",
    "read_build_file",
    "walk",
]
