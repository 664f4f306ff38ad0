# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML loader for the protobuild workspace configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

WORKSPACE_CONFIG_NAME = ".protobuild.yaml"

DEFAULT_RULE_KIND = "proto_library"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


class PluginConfig(BaseModel):
    """One plugin entry of the ``plugins`` list."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    language: str | None = None
    kind: Literal["proto", "grpc"] = "proto"
    output: str | None = None
    deps: list[str] = Field(default_factory=list)
    merge_directories: bool = Field(alias="merge-directories", default=False)


class WorkspaceConfig(BaseModel):
    """The parsed workspace configuration.

    Attributes:
        rule_kind: Kind of the compilation unit rules; plugin rule kinds are
            ``<plugin>_<rule_kind>``.
        plugins: Plugin definitions. Entries replace built-in plugins of the
            same name and are appended otherwise.
        replace_builtin_plugins: Drop the built-in plugins entirely.
        default_plugins: Plugins enabled when no directive says otherwise;
            all registered plugins when omitted.
        external_imports: Import path to ``{plugin name or "*": label}`` for
            dependencies that live outside the scanned tree.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    rule_kind: str = Field(alias="rule-kind", default=DEFAULT_RULE_KIND)
    plugins: list[PluginConfig] = Field(default_factory=list)
    replace_builtin_plugins: bool = Field(alias="replace-builtin-plugins", default=False)
    default_plugins: list[str] | None = Field(alias="default-plugins", default=None)
    external_imports: dict[str, dict[str, str]] = Field(alias="external-imports", default_factory=dict)


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and validate a workspace configuration file.

    An empty file is treated as an empty configuration.

    Args:
        path: Path to the ``.protobuild.yaml`` file.

    Returns:
        A validated WorkspaceConfig instance.

    Raises:
        WorkspaceConfigError: If the file cannot be read, contains invalid
            YAML, or does not conform to the expected schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    return _parse_workspace_config(text, source_label=str(path))


def find_workspace_config(root: Path) -> WorkspaceConfig:
    """Load ``root/.protobuild.yaml`` if present, otherwise return the defaults."""
    path = root / WORKSPACE_CONFIG_NAME
    if not path.exists():
        return WorkspaceConfig()
    return load_workspace_config(path)


# ################
# Implementation
# ################


def _parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: workspace config must be a YAML mapping")

    try:
        return WorkspaceConfig.model_validate(data)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"Invalid workspace config {source_label}: {exc}") from exc
