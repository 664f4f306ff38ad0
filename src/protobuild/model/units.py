# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compilation units: groups of .proto files compiled together into one library."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from protobuild.model.entities import ProtoFile
from protobuild.model.label import Label, LabelError, make_label, parse_label

# ###############
# Public Interface
# ###############

PROTO_SUFFIX = "_proto"


class SynthesizedUnit(BaseModel):
    """A unit created and owned by the engine from files no hand-written rule claims."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["synthesized"] = "synthesized"
    name: str
    directory: str
    files: tuple[ProtoFile, ...] = ()

    @property
    def label(self) -> Label:
        return make_label(self.directory, self.name)

    @property
    def base_name(self) -> str:
        return self.name.removesuffix(PROTO_SUFFIX)

    @property
    def import_paths(self) -> list[str]:
        """Import paths under which other files can reach this unit."""
        return [f.path for f in self.files]


class AdoptedUnit(BaseModel):
    """A unit declared by hand in a BUILD file.

    The engine never rewrites an adopted unit. It only records which
    discovered files the declaration claims, so that they are excluded from
    synthesis and so that the unit can serve as a dependency target.

    Attributes:
        name: The rule name.
        directory: The package the rule lives in.
        srcs: The ``srcs`` entries as written in the BUILD file.
        files: Discovered files matched by a same-package ``srcs`` entry.
        missing_srcs: Same-package ``srcs`` entries that matched no discovered file.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["adopted"] = "adopted"
    name: str
    directory: str
    srcs: tuple[str, ...] = ()
    files: tuple[ProtoFile, ...] = ()
    missing_srcs: tuple[str, ...] = ()

    @property
    def label(self) -> Label:
        return make_label(self.directory, self.name)

    @property
    def base_name(self) -> str:
        return self.name.removesuffix(PROTO_SUFFIX)

    @property
    def import_paths(self) -> list[str]:
        """Import paths for every declared source, matched or not.

        Cross-package sources are addressed through their label
        (``//other/pkg:z.proto`` becomes ``other/pkg/z.proto``).
        """
        paths: list[str] = []
        for src in self.srcs:
            try:
                label = parse_label(src)
            except LabelError:
                continue
            if label.repo:
                continue
            package = self.directory if label.package is None else label.package
            paths.append(f"{package}/{label.name}" if package else label.name)
        return paths


# A compilation unit is either synthesized by the engine or adopted from a BUILD file.
# The `kind` discriminator keeps serialized units unambiguous.
CompilationUnit = Annotated[SynthesizedUnit | AdoptedUnit, _Field(discriminator="kind")]
