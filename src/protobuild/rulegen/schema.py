# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarative description of a plugin-aware rule kind."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# ###############
# Public Interface
# ###############

TEMPLATES_DIR = Path(__file__).parent / "templates"

DEFAULT_TEMPLATES = {
    "implementation_tmpl": "rule.bzl.tmpl",
    "build_example_tmpl": "BUILD.tmpl",
    "workspace_example_tmpl": "WORKSPACE.tmpl",
    "test_tmpl": "test.py.tmpl",
}


class SchemaError(Exception):
    """Raised when a rule schema file is invalid or cannot be loaded."""


class RuleSchema(BaseModel):
    """One rule kind to generate.

    Template paths are relative to the schema file; ``None`` selects the
    bundled template.

    Attributes:
        name: Rule name, also the stem of every generated file.
        kind: ``proto`` for message rules, ``grpc`` for service rules.
        package: Package the generated rule lives in.
        skip_directories_merge: Emit one output tree per directory instead
            of a merged tree.
        plugins: Default plugin labels of the rule.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    kind: Literal["proto", "grpc"] = "proto"
    package: str = ""
    skip_directories_merge: bool = Field(alias="skip-directories-merge", default=False)
    plugins: list[str] = Field(default_factory=list)
    implementation_tmpl: str | None = Field(alias="implementation-tmpl", default=None)
    build_example_tmpl: str | None = Field(alias="build-example-tmpl", default=None)
    workspace_example_tmpl: str | None = Field(alias="workspace-example-tmpl", default=None)
    test_tmpl: str | None = Field(alias="test-tmpl", default=None)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"rule name '{value}' must be a valid identifier")
        return value

    def template_path(self, field: str, base_dir: Path | None = None) -> Path:
        """Return the template file for *field*, resolved against *base_dir*."""
        value = getattr(self, field)
        if value is None:
            return TEMPLATES_DIR / DEFAULT_TEMPLATES[field]
        path = Path(value)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path


def load_rule_schema(path: Path) -> RuleSchema:
    """Load and validate a rule schema from a YAML or JSON file.

    Raises:
        SchemaError: If the file cannot be read, is not a mapping, or does
            not conform to the schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SchemaError(f"Rule schema not found: {path}") from None
    except OSError as exc:
        raise SchemaError(f"Cannot read rule schema: {exc}") from exc
    return parse_rule_schema(text, source_label=str(path))


def parse_rule_schema(text: str, source_label: str = "<string>") -> RuleSchema:
    # JSON documents are valid YAML.
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Invalid rule schema {source_label}: {exc}") from exc
    if not isinstance(data, dict):
        raise SchemaError(f"{source_label}: rule schema must be a mapping")
    try:
        return RuleSchema.model_validate(data)
    except ValidationError as exc:
        raise SchemaError(f"Invalid rule schema {source_label}: {exc}") from exc
