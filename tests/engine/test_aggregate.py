# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for partitioning a directory's files into adopted and synthesized units."""

from protobuild.engine.aggregate import aggregate, default_unit_name
from protobuild.model.entities import ProtoFile
from protobuild.model.units import AdoptedUnit, SynthesizedUnit
from protobuild.workspace.buildfile import BuildRule

# ###############
# Test Helpers
# ###############


def _files(directory: str, *names: str) -> list[ProtoFile]:
    return [ProtoFile(directory=directory, basename=name) for name in names]


def _rule(name: str, *srcs: str) -> BuildRule:
    return BuildRule(kind="proto_library", name=name, attrs={"name": name, "srcs": list(srcs)})


def _partition(result) -> dict[str, list[str]]:
    return {u.name: [f.basename for f in u.files] for u in result.units}


# ###############
# Synthesis
# ###############


class TestSynthesis:
    def test_all_files_form_one_unit(self) -> None:
        result = aggregate("pkg/a", _files("pkg/a", "b.proto", "a.proto"), [])
        assert _partition(result) == {"a_proto": ["a.proto", "b.proto"]}
        assert isinstance(result.units[0], SynthesizedUnit)
        assert result.diagnostics == []

    def test_no_files_no_unit(self) -> None:
        assert aggregate("pkg/a", [], []).units == []

    def test_default_unit_names(self) -> None:
        assert default_unit_name("pkg/deep/name") == "name_proto"
        assert default_unit_name("") == "root_proto"


# ###############
# Adoption
# ###############


class TestAdoption:
    def test_adopted_unit_keeps_its_files(self) -> None:
        result = aggregate("pkg/c", _files("pkg/c", "x.proto", "y.proto"), [_rule("x_proto", "x.proto")])
        assert _partition(result) == {"x_proto": ["x.proto"], "c_proto": ["y.proto"]}
        assert isinstance(result.units[0], AdoptedUnit)
        assert result.adopted[0].srcs == ("x.proto",)
        assert result.synthesized[0].name == "c_proto"

    def test_fully_claimed_directory_synthesizes_nothing(self) -> None:
        result = aggregate("pkg/c", _files("pkg/c", "x.proto"), [_rule("x_proto", ":x.proto")])
        assert result.synthesized == []
        assert len(result.adopted) == 1

    def test_same_package_label_forms_match(self) -> None:
        rule = _rule("all_proto", "a.proto", ":b.proto", "//pkg/c:c.proto")
        result = aggregate("pkg/c", _files("pkg/c", "a.proto", "b.proto", "c.proto"), [rule])
        assert _partition(result) == {"all_proto": ["a.proto", "b.proto", "c.proto"]}

    def test_cross_package_sources_are_kept_but_not_matched(self) -> None:
        rule = _rule("x_proto", "x.proto", "//other:z.proto")
        result = aggregate("pkg/c", _files("pkg/c", "x.proto", "z.proto"), [rule])
        unit = result.adopted[0]
        assert unit.srcs == ("x.proto", "//other:z.proto")
        assert [f.basename for f in unit.files] == ["x.proto"]
        assert result.synthesized[0].files[0].basename == "z.proto"
        assert result.diagnostics == []

    def test_missing_source_is_a_mismatch_and_unit_is_preserved(self) -> None:
        result = aggregate("pkg/c", _files("pkg/c", "y.proto"), [_rule("x_proto", "x.proto")])
        unit = result.adopted[0]
        assert unit.files == ()
        assert unit.missing_srcs == ("x.proto",)
        assert len(result.diagnostics) == 1
        mismatch = result.diagnostics[0]
        assert mismatch.unit == "//pkg/c:x_proto"
        assert mismatch.src == "x.proto"
        assert "does not exist in 'pkg/c'" in mismatch.message

    def test_file_claimed_twice_goes_to_the_first_unit(self) -> None:
        rules = [_rule("first_proto", "x.proto"), _rule("second_proto", "x.proto")]
        result = aggregate("pkg/c", _files("pkg/c", "x.proto"), rules)
        assert _partition(result) == {"first_proto": ["x.proto"], "second_proto": []}
        assert "already claimed by //pkg/c:first_proto" in result.diagnostics[0].message

    def test_unparseable_source_label(self) -> None:
        result = aggregate("pkg/c", [], [_rule("x_proto", "a:b:c")])
        assert "unparseable source label" in result.diagnostics[0].message

    def test_synthesized_name_avoids_adopted_name(self) -> None:
        rule = _rule("c_proto", "x.proto")
        result = aggregate("pkg/c", _files("pkg/c", "x.proto", "y.proto"), [rule])
        assert _partition(result) == {"c_proto": ["x.proto"], "y_proto": ["y.proto"]}


# ###############
# Partition Invariant
# ###############


def test_every_file_is_in_exactly_one_unit() -> None:
    files = _files("d", "a.proto", "b.proto", "c.proto", "e.proto")
    rules = [_rule("one_proto", "a.proto", "b.proto"), _rule("two_proto", "b.proto", "c.proto", "gone.proto")]
    result = aggregate("d", files, rules)
    members = [f.basename for u in result.units for f in u.files]
    assert sorted(members) == ["a.proto", "b.proto", "c.proto", "e.proto"]
    assert len(members) == len(set(members))
