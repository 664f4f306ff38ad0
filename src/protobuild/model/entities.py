# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parsed description of a single .proto source file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# ###############
# Public Interface
# ###############


class ProtoOption(BaseModel):
    """A file-level ``option name = value;`` declaration."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ProtoFile(BaseModel):
    """Top-level model representing the parsed contents of a single .proto file.

    Attributes:
        directory: Workspace-relative directory of the file (``""`` at the root).
        basename: The file name, e.g. ``"a.proto"``.
        syntax: Value of the ``syntax`` statement, if present.
        edition: Value of the ``edition`` statement, if present.
        package: The declared package, if present.
        imports: Import paths exactly as written, in source order.
        options: File-level options in source order.
        messages: Names of top-level messages.
        enums: Names of top-level enums.
        services: Names of top-level services.
    """

    model_config = ConfigDict(frozen=True)

    directory: str = ""
    basename: str
    syntax: str | None = None
    edition: str | None = None
    package: str | None = None
    imports: tuple[str, ...] = ()
    options: tuple[ProtoOption, ...] = ()
    messages: tuple[str, ...] = ()
    enums: tuple[str, ...] = ()
    services: tuple[str, ...] = ()

    @property
    def path(self) -> str:
        """The import path other files use to refer to this file."""
        if not self.directory:
            return self.basename
        return f"{self.directory}/{self.basename}"

    @property
    def stem(self) -> str:
        return self.basename.removesuffix(".proto")

    @property
    def has_services(self) -> bool:
        return len(self.services) > 0

    def option(self, name: str) -> str | None:
        """Return the value of the last option named *name*, or None."""
        value: str | None = None
        for opt in self.options:
            if opt.name == name:
                value = opt.value
        return value
