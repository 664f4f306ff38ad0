# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Whole-tree generation.

Directories are configured top-down and generated bottom-up (depth-first
post-order). Resolution runs only after every directory has registered its
units, so each declaration is resolved against the complete import index.
A parse error stops the run immediately; partial output would corrupt the
build graph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from protobuild.engine.context import GenerationContext
from protobuild.engine.declarations import GeneratedDeclaration
from protobuild.engine.diagnostics import Diagnostic
from protobuild.engine.index import ImportIndex
from protobuild.engine.package import PackageResult, generate_package, parse_package_files
from protobuild.engine.resolve import resolve
from protobuild.parser.parser import ParseError
from protobuild.workspace.buildfile import BuildFile, BuildFileError, read_build_file
from protobuild.workspace.directives import DirectiveError, DirectoryConfig
from protobuild.workspace.walk import walk

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class GenerationError(Exception):
    """Raised when generation must stop: unparseable source, BUILD file, or directive.

    Attributes:
        directory: Workspace-relative directory being processed.
    """

    def __init__(self, message: str, directory: str) -> None:
        super().__init__(f"{directory or '.'}: {message}")
        self.directory = directory


@dataclass
class RunResult:
    """Outcome of a run: per-directory results in visit order plus all diagnostics."""

    packages: list[PackageResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def declarations(self) -> list[GeneratedDeclaration]:
        return [d for p in self.packages for d in p.all_declarations]

    def package(self, directory: str) -> PackageResult | None:
        for result in self.packages:
            if result.directory == directory:
                return result
        return None


def run(root: Path, ctx: GenerationContext) -> RunResult:
    """Generate and resolve declarations for the whole tree under *root*.

    Raises:
        GenerationError: On an unparseable source file (unless lenient), an
            invalid BUILD file, or an invalid directive.
    """
    packages: list[PackageResult] = []
    build_files: dict[str, BuildFile | None] = {}

    def configure(parent: DirectoryConfig, path: Path, rel: str) -> DirectoryConfig:
        try:
            build_file = read_build_file(path)
        except BuildFileError as exc:
            raise GenerationError(str(exc), rel) from exc
        build_files[rel] = build_file
        if build_file is None:
            return parent
        try:
            return ctx.configure(parent, build_file.directives)
        except DirectiveError as exc:
            raise GenerationError(f"{build_file.path}: {exc}", rel) from exc

    def visit(config: DirectoryConfig, path: Path, rel: str, filenames: list[str]) -> None:
        try:
            files, diagnostics = parse_package_files(ctx, path, rel, filenames)
        except ParseError as exc:
            raise GenerationError(f"unparseable proto file {exc.filename}: {exc.reason}", rel) from exc
        build_file = build_files.pop(rel, None)
        if not files and build_file is None and not diagnostics:
            return
        result = generate_package(ctx, rel, config, files, build_file)
        result.diagnostics[:0] = diagnostics
        if result.all_declarations or result.diagnostics:
            packages.append(result)

    walk(root, ctx.root_config(), configure, visit)
    return RunResult(packages=packages, diagnostics=resolve_packages(packages, ctx.index))


def resolve_packages(packages: list[PackageResult], index: ImportIndex) -> list[Diagnostic]:
    """Resolve every declaration of *packages* and collect all diagnostics in order."""
    diagnostics: list[Diagnostic] = []
    for result in packages:
        diagnostics.extend(result.diagnostics)
        for declaration in result.all_declarations:
            resolve(declaration, index)
            diagnostics.extend(d for d in declaration.diagnostics if d not in diagnostics)
    diagnostics.extend(d for d in index.diagnostics if d not in diagnostics)
    logger.debug("Resolved %d package(s), %d diagnostic(s)", len(packages), len(diagnostics))
    return diagnostics
