# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests of whole-tree generation and resolution."""

from pathlib import Path

import pytest

from protobuild.engine.context import GenerationContext
from protobuild.engine.diagnostics import AmbiguousImportWarning, ParseFailure, UnresolvedImportWarning
from protobuild.engine.emit import render_package, serialize
from protobuild.engine.run import GenerationError, RunResult, run
from protobuild.workspace.config import PluginConfig, WorkspaceConfig

# ###############
# Test Helpers
# ###############


def _write(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _run(root: Path, *, lenient: bool = False, workspace: WorkspaceConfig | None = None) -> RunResult:
    if workspace is None:
        workspace = WorkspaceConfig(
            replace_builtin_plugins=True,
            plugins=[PluginConfig(name="go"), PluginConfig(name="py")],
        )
    return run(root, GenerationContext.from_workspace(workspace, lenient=lenient))


def _deps(result: RunResult) -> dict[str, list[str]]:
    return {str(d.label): d.deps for d in result.declarations}


SCENARIO = {
    "pkg/a/a.proto": 'syntax = "proto3";\npackage a;\n',
    "pkg/b/b.proto": 'syntax = "proto3";\npackage b;\nimport "pkg/a/a.proto";\n',
}

# ###############
# Scenarios
# ###############


class TestTwoPackageScenario:
    def test_declarations_and_dependencies(self, tmp_path: Path) -> None:
        _write(tmp_path, SCENARIO)
        result = _run(tmp_path)

        assert [p.directory for p in result.packages] == ["pkg/a", "pkg/b"]
        plugin_decls = [d for p in result.packages for d in p.declarations]
        assert [d.name for d in plugin_decls] == ["a_go", "a_py", "b_go", "b_py"]
        assert _deps(result) == {
            "//pkg/a:a_proto": [],
            "//pkg/a:a_go": [],
            "//pkg/a:a_py": [],
            "//pkg/b:b_proto": ["//pkg/a:a_proto"],
            "//pkg/b:b_go": ["//pkg/a:a_go"],
            "//pkg/b:b_py": ["//pkg/a:a_py"],
        }
        assert result.diagnostics == []

    def test_every_declaration_is_resolved_once(self, tmp_path: Path) -> None:
        _write(tmp_path, SCENARIO)
        assert all(d.resolved for d in _run(tmp_path).declarations)

    def test_dependency_on_a_later_directory(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "a/a.proto": 'import "z/z.proto";\n',
                "z/z.proto": "",
            },
        )
        assert _deps(_run(tmp_path))["//a:a_go"] == ["//z:z_go"]


class TestAdoptedUnitScenario:
    def test_hand_written_unit_is_left_alone(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "pkg/c/x.proto": "",
                "pkg/c/y.proto": 'import "pkg/c/x.proto";\n',
                "pkg/c/BUILD.bazel": 'proto_library(name = "x_proto", srcs = ["x.proto"])\n',
            },
        )
        result = _run(tmp_path)
        package = result.package("pkg/c")
        assert package is not None
        assert [u.name for u in package.units] == ["x_proto", "c_proto"]
        assert [d.name for d in package.libraries] == ["c_proto"]
        deps = _deps(result)
        assert deps["//pkg/c:c_proto"] == [":x_proto"]
        assert deps["//pkg/c:c_go"] == [":x_go"]

    def test_hand_written_unit_with_directory_name(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "pkg/c/x.proto": "",
                "pkg/c/y.proto": 'import "pkg/c/x.proto";\n',
                "pkg/c/BUILD.bazel": 'proto_library(name = "c_proto", srcs = ["x.proto"])\n',
            },
        )
        result = _run(tmp_path)
        package = result.package("pkg/c")
        assert [(u.kind, u.name) for u in package.units] == [("adopted", "c_proto"), ("synthesized", "y_proto")]
        assert [d.name for d in package.libraries] == ["y_proto"]
        assert package.empty == []
        deps = _deps(result)
        assert deps["//pkg/c:y_proto"] == [":c_proto"]
        assert deps["//pkg/c:y_go"] == [":c_go"]

    def test_hand_written_plugin_rule_survives(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "pkg/c/x.proto": "",
                "pkg/c/BUILD.bazel": 'go_proto_library(name = "custom_go", proto = ":c_proto")\n',
            },
        )
        assert _run(tmp_path).package("pkg/c").empty == []

    def test_mismatch_is_reported_and_unit_still_resolves(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "pkg/c/BUILD": 'proto_library(name = "x_proto", srcs = ["x.proto"])\n',
                "pkg/d/d.proto": 'import "pkg/c/x.proto";\n',
            },
        )
        result = _run(tmp_path)
        assert _deps(result)["//pkg/d:d_go"] == ["//pkg/c:x_go"]
        assert [type(d).__name__ for d in result.diagnostics] == ["AdoptedUnitMismatch"]


class TestProperties:
    def test_no_self_dependency(self, tmp_path: Path) -> None:
        _write(tmp_path, {"p/a.proto": 'import "p/b.proto";\n', "p/b.proto": 'import "p/a.proto";\n'})
        assert all(deps == [] for deps in _deps(_run(tmp_path)).values())

    def test_empty_unit_deletion(self, tmp_path: Path) -> None:
        _write(tmp_path, SCENARIO)
        first = _run(tmp_path)
        (tmp_path / "pkg/a/BUILD.bazel").write_text(render_package(first.package("pkg/a")), encoding="utf-8")
        (tmp_path / "pkg/a/a.proto").unlink()

        result = _run(tmp_path)
        package = result.package("pkg/a")
        assert package is not None
        assert [(d.name, d.empty) for d in package.all_declarations] == [
            ("a_proto", True),
            ("a_go", True),
            ("a_py", True),
        ]
        assert render_package(package) == ""
        assert isinstance(result.diagnostics[0], UnresolvedImportWarning)

    def test_idempotence(self, tmp_path: Path) -> None:
        _write(tmp_path, SCENARIO)
        first = _run(tmp_path)
        second = _run(tmp_path)
        assert serialize(first) == serialize(second)

    def test_idempotence_after_merging_output(self, tmp_path: Path) -> None:
        _write(tmp_path, SCENARIO)
        first = _run(tmp_path)
        for package in first.packages:
            (tmp_path / package.directory / "BUILD.bazel").write_text(render_package(package), encoding="utf-8")
        second = _run(tmp_path)
        assert [render_package(p) for p in second.packages] == [render_package(p) for p in first.packages]
        assert all(not p.empty for p in second.packages)

    def test_ambiguous_import(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "d/x.proto": "",
                "d/BUILD": (
                    'proto_library(name = "one_proto", srcs = ["x.proto"])\n'
                    'proto_library(name = "two_proto", srcs = ["x.proto"])\n'
                ),
                "e/e.proto": 'import "d/x.proto";\n',
            },
        )
        result = _run(tmp_path)
        assert _deps(result)["//e:e_go"] == ["//d:one_go"]
        assert any(isinstance(d, AmbiguousImportWarning) for d in result.diagnostics)


# ###############
# Configuration
# ###############


class TestDirectives:
    def test_directives_are_inherited(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            {
                "pkg/BUILD": "# protobuild:proto_plugins py\n",
                "pkg/a/a.proto": "",
                "other/o.proto": "",
            },
        )
        result = _run(tmp_path)
        assert [d.name for d in result.package("pkg/a").declarations] == ["a_py"]
        assert [d.name for d in result.package("other").declarations] == ["other_go", "other_py"]

    def test_unknown_directive_aborts(self, tmp_path: Path) -> None:
        _write(tmp_path, {"pkg/BUILD": "# protobuild:proto_bogus x\n"})
        with pytest.raises(GenerationError, match="unknown directive 'proto_bogus'") as exc_info:
            _run(tmp_path)
        assert exc_info.value.directory == "pkg"

    def test_invalid_build_file_aborts(self, tmp_path: Path) -> None:
        _write(tmp_path, {"pkg/BUILD": "proto_library(\n"})
        with pytest.raises(GenerationError, match="^pkg: "):
            _run(tmp_path)

    def test_external_imports_from_config(self, tmp_path: Path) -> None:
        _write(tmp_path, {"a/a.proto": 'import "google/protobuf/empty.proto";\n'})
        workspace = WorkspaceConfig(
            default_plugins=["py"],
            external_imports={"google/protobuf/empty.proto": {"*": "@com_google_protobuf//:empty_proto"}},
        )
        result = _run(tmp_path, workspace=workspace)
        assert _deps(result)["//a:a_py"] == ["@com_google_protobuf//:empty_proto"]
        assert result.diagnostics == []


# ###############
# Parse Errors
# ###############


class TestParseErrors:
    def test_parse_error_is_fatal(self, tmp_path: Path) -> None:
        _write(tmp_path, {"pkg/a/bad.proto": "message {"})
        with pytest.raises(GenerationError, match="unparseable proto file pkg/a/bad.proto") as exc_info:
            _run(tmp_path)
        assert exc_info.value.directory == "pkg/a"

    def test_lenient_skips_and_reports(self, tmp_path: Path) -> None:
        _write(tmp_path, {"pkg/a/bad.proto": "message {", "pkg/a/good.proto": ""})
        result = _run(tmp_path, lenient=True)
        package = result.package("pkg/a")
        assert [f.basename for f in package.units[0].files] == ["good.proto"]
        assert isinstance(result.diagnostics[0], ParseFailure)
