# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic model for protobuild (proto files, compilation units, labels)."""

from protobuild.model.entities import ProtoFile, ProtoOption
from protobuild.model.label import Label, LabelError, make_label, parse_label
from protobuild.model.units import PROTO_SUFFIX, AdoptedUnit, CompilationUnit, SynthesizedUnit

__all__ = [
    # Files
    "ProtoFile",
    "ProtoOption",
    # Units
    "PROTO_SUFFIX",
    "AdoptedUnit",
    "CompilationUnit",
    "SynthesizedUnit",
    # Labels
    "Label",
    "LabelError",
    "make_label",
    "parse_label",
]
