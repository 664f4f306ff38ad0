# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generator of plugin-aware rule definitions from declarative schemas."""

from protobuild.rulegen.render import (
    Artifact,
    RuleArtifacts,
    RuleTemplates,
    SchemaRenderError,
    generate_rule,
    load_templates,
    render,
    write_artifacts,
)
from protobuild.rulegen.schema import RuleSchema, SchemaError, load_rule_schema, parse_rule_schema

__all__ = [
    "Artifact",
    "RuleArtifacts",
    "RuleSchema",
    "RuleTemplates",
    "SchemaError",
    "SchemaRenderError",
    "generate_rule",
    "load_rule_schema",
    "load_templates",
    "parse_rule_schema",
    "render",
    "write_artifacts",
]
