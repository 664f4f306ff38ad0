# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Non-fatal findings reported alongside generated output.

None of these stop generation. They are collected per declaration or per
package and surfaced to the user after the run.
"""

from __future__ import annotations

from dataclasses import dataclass

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class UnresolvedImportWarning:
    """An import or extra dependency that could not be mapped to a label.

    Attributes:
        message: Human-readable description of the warning.
        declaration: Label of the declaration the reference belongs to.
        reference: The import path or dependency reference as written.
    """

    message: str
    declaration: str
    reference: str


@dataclass(frozen=True)
class AmbiguousImportWarning:
    """An import path claimed by more than one unit.

    The first registered unit wins; the others are listed for the user.

    Attributes:
        message: Human-readable description of the warning.
        import_path: The contested import path.
        chosen: Label of the unit that satisfies the import.
        others: Labels of the units whose claim was ignored.
    """

    message: str
    import_path: str
    chosen: str
    others: tuple[str, ...]


@dataclass(frozen=True)
class AdoptedUnitMismatch:
    """A hand-written unit whose ``srcs`` do not line up with the files on disk.

    Attributes:
        message: Human-readable description of the warning.
        unit: Label of the adopted unit.
        src: The offending ``srcs`` entry.
    """

    message: str
    unit: str
    src: str


@dataclass(frozen=True)
class ParseFailure:
    """A source file skipped because it could not be parsed (lenient mode only)."""

    message: str
    filename: str


Diagnostic = UnresolvedImportWarning | AmbiguousImportWarning | AdoptedUnitMismatch | ParseFailure
