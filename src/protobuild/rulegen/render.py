# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of a rule schema into the rule implementation and its examples.

Rendering is a pure function of the schema and the four template bodies.
Writing is all-or-nothing: every artifact is first written to a temporary
file next to its destination and only then moved into place, so a failure
never leaves one artifact newer than the others.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from protobuild.rulegen.schema import RuleSchema, SchemaError, load_rule_schema

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

TEMPLATE_SUFFIX = ".tmpl"


class SchemaRenderError(Exception):
    """Raised when a template cannot be rendered or the artifacts cannot be written."""


@dataclass(frozen=True)
class RuleTemplates:
    """The four template bodies of a rule.

    Attributes:
        test_suffix: File extension of the rendered test, e.g. ``.py``.
    """

    implementation: str
    build_example: str
    workspace_example: str
    test: str
    test_suffix: str = ".py"


@dataclass(frozen=True)
class Artifact:
    filename: str
    content: str


@dataclass(frozen=True)
class RuleArtifacts:
    """The five rendered outputs of one rule schema."""

    implementation: Artifact
    snapshot: Artifact
    build_example: Artifact
    workspace_example: Artifact
    test: Artifact

    def __iter__(self) -> Iterator[Artifact]:
        return iter((self.implementation, self.snapshot, self.build_example, self.workspace_example, self.test))


def output_filenames(schema: RuleSchema, test_suffix: str = ".py") -> dict[str, str]:
    """Return the file name of every artifact keyed by its context name."""
    return {
        "implementation_filename": f"{schema.name}.bzl",
        "snapshot_filename": f"{schema.name}.json",
        "build_example_filename": f"{schema.name}.BUILD",
        "workspace_example_filename": f"{schema.name}.WORKSPACE",
        "test_filename": f"{schema.name}_test{test_suffix}",
    }


def rendered_test_suffix(template_name: str) -> str:
    """Derive the rendered test extension from its template name (``test.go.tmpl`` -> ``.go``)."""
    name = template_name.removesuffix(TEMPLATE_SUFFIX)
    return Path(name).suffix


def load_templates(schema: RuleSchema, base_dir: Path | None = None) -> RuleTemplates:
    """Read the four templates of *schema*.

    Raises:
        SchemaError: If a template file cannot be read.
    """
    bodies: dict[str, str] = {}
    for field in ("implementation_tmpl", "build_example_tmpl", "workspace_example_tmpl", "test_tmpl"):
        path = schema.template_path(field, base_dir)
        try:
            bodies[field] = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SchemaError(f"Cannot read template {path}: {exc}") from exc
    return RuleTemplates(
        implementation=bodies["implementation_tmpl"],
        build_example=bodies["build_example_tmpl"],
        workspace_example=bodies["workspace_example_tmpl"],
        test=bodies["test_tmpl"],
        test_suffix=rendered_test_suffix(schema.template_path("test_tmpl", base_dir).name),
    )


def render(schema: RuleSchema, templates: RuleTemplates) -> RuleArtifacts:
    """Render all five artifacts of *schema*.

    Raises:
        SchemaRenderError: If any template fails to compile or references an
            undefined value.
    """
    filenames = output_filenames(schema, templates.test_suffix)
    rule = rule_context(schema, templates.test_suffix)
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )

    def _render(label: str, body: str) -> str:
        try:
            return env.from_string(body).render(rule=rule)
        except TemplateError as exc:
            raise SchemaRenderError(f"{schema.name}: {label} template: {exc}") from exc

    return RuleArtifacts(
        implementation=Artifact(
            filenames["implementation_filename"], _render("implementation", templates.implementation)
        ),
        snapshot=Artifact(filenames["snapshot_filename"], json.dumps(rule, indent=2, sort_keys=True) + "\n"),
        build_example=Artifact(
            filenames["build_example_filename"], _render("build example", templates.build_example)
        ),
        workspace_example=Artifact(
            filenames["workspace_example_filename"], _render("workspace example", templates.workspace_example)
        ),
        test=Artifact(filenames["test_filename"], _render("test", templates.test)),
    )


def rule_context(schema: RuleSchema, test_suffix: str = ".py") -> dict[str, Any]:
    """The ``rule`` value seen by templates: schema fields plus output file names."""
    return {**schema.model_dump(mode="json"), **output_filenames(schema, test_suffix)}


def write_artifacts(artifacts: RuleArtifacts, out_dir: Path) -> list[Path]:
    """Write *artifacts* into *out_dir* all-or-nothing.

    Every artifact is staged next to its destination, existing destinations
    are moved aside, and only then are the staged files moved into place.
    Any failure restores the previous files.

    Returns:
        The written paths, in artifact order.

    Raises:
        SchemaRenderError: If any artifact cannot be written; the output
            directory is left as it was in that case.
    """
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SchemaRenderError(f"Cannot create output directory {out_dir}: {exc}") from exc

    staged: list[tuple[str, Path]] = []
    backups: dict[Path, str] = {}
    installed: list[Path] = []
    try:
        for artifact in artifacts:
            fd, tmp_path = tempfile.mkstemp(dir=out_dir, prefix=f".{artifact.filename}.", suffix=".tmp")
            staged.append((tmp_path, out_dir / artifact.filename))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(artifact.content)
        for _, path in staged:
            if path.exists():
                backups[path] = _move_aside(path)
        for tmp_path, path in staged:
            os.replace(tmp_path, path)
            installed.append(path)
    except OSError as exc:
        _roll_back(installed, backups)
        _discard(tmp for tmp, _ in staged)
        raise SchemaRenderError(f"Cannot write rule artifacts to {out_dir}: {exc}") from exc

    _discard(backups.values())
    written = [path for _, path in staged]
    logger.debug("Wrote %d artifact(s) to %s", len(written), out_dir)
    return written


def generate_rule(schema_path: Path, out_dir: Path) -> list[Path]:
    """Load the schema at *schema_path*, render it, and write the artifacts.

    Template paths in the schema are relative to the schema file.
    """
    schema = load_rule_schema(schema_path)
    templates = load_templates(schema, schema_path.parent)
    return write_artifacts(render(schema, templates), out_dir)


# ################
# Implementation
# ################


def _move_aside(path: Path) -> str:
    fd, backup = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".bak")
    os.close(fd)
    try:
        os.replace(path, backup)
    except OSError:
        _discard([backup])
        raise
    return backup


def _roll_back(installed: list[Path], backups: dict[Path, str]) -> None:
    for path in installed:
        if path not in backups:
            _discard([path])
    for path, backup in backups.items():
        os.replace(backup, path)


def _discard(paths: Iterable[str | Path]) -> None:
    for path in paths:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
