# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the workspace configuration module."""

from pathlib import Path

import pytest

from protobuild.workspace import (
    DEFAULT_RULE_KIND,
    WORKSPACE_CONFIG_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    find_workspace_config,
    load_workspace_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a workspace config file and return its path."""
    config_file = tmp_path / WORKSPACE_CONFIG_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    """An empty file is an empty configuration."""
    config = load_workspace_config(_write_config(tmp_path, ""))

    assert isinstance(config, WorkspaceConfig)
    assert config.rule_kind == DEFAULT_RULE_KIND
    assert config.plugins == []
    assert config.default_plugins is None
    assert config.external_imports == {}


def test_full_config(tmp_path: Path) -> None:
    """All keys are read with their hyphenated names."""
    content = """\
rule-kind: proto_lib
replace-builtin-plugins: true
default-plugins: [java]
plugins:
  - name: java
    language: jvm
    kind: proto
    output: "{base}_java"
    deps: ["@maven//:protobuf_java"]
    merge-directories: true
external-imports:
  google/protobuf/any.proto:
    "*": "@com_google_protobuf//:any_proto"
"""
    config = load_workspace_config(_write_config(tmp_path, content))

    assert config.rule_kind == "proto_lib"
    assert config.replace_builtin_plugins is True
    assert config.default_plugins == ["java"]
    plugin = config.plugins[0]
    assert plugin.name == "java"
    assert plugin.language == "jvm"
    assert plugin.output == "{base}_java"
    assert plugin.deps == ["@maven//:protobuf_java"]
    assert plugin.merge_directories is True
    assert config.external_imports["google/protobuf/any.proto"] == {"*": "@com_google_protobuf//:any_proto"}


def test_plugin_defaults(tmp_path: Path) -> None:
    config = load_workspace_config(_write_config(tmp_path, "plugins:\n  - name: ts\n"))
    plugin = config.plugins[0]
    assert plugin.language is None
    assert plugin.kind == "proto"
    assert plugin.output is None
    assert plugin.merge_directories is False


def test_find_without_file_returns_defaults(tmp_path: Path) -> None:
    assert find_workspace_config(tmp_path) == WorkspaceConfig()


def test_find_reads_file(tmp_path: Path) -> None:
    _write_config(tmp_path, "rule-kind: my_proto_library\n")
    assert find_workspace_config(tmp_path).rule_kind == "my_proto_library"


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="not found"):
        load_workspace_config(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="Invalid YAML"):
        load_workspace_config(_write_config(tmp_path, "plugins: [\n"))


def test_non_mapping(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="must be a YAML mapping"):
        load_workspace_config(_write_config(tmp_path, "- a\n- b\n"))


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="Invalid workspace config"):
        load_workspace_config(_write_config(tmp_path, "rules: x\n"))


def test_invalid_plugin_kind(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="Invalid workspace config"):
        load_workspace_config(_write_config(tmp_path, "plugins:\n  - name: x\n    kind: rest\n"))
