"""Unit tests for <os>/<arch>/<filename> flattening."""

from pathlib import Path, PurePosixPath

import pytest

from shipkit.artifacts.flatten import flatten, flatten_directory, flattened_name
from shipkit.artifacts.tree import ArtifactEntry
from shipkit.core.errors import FlattenError


def entry(*parts: str, content: bytes = b"") -> ArtifactEntry:
    return ArtifactEntry.from_parts(*parts, content=content)


class TestFlattenedName:
    def test_plain_binary(self):
        assert flattened_name("darwin", "arm64", "tapes") == "tapes-darwin-arm64"

    def test_checksum_suffix_kept_last(self):
        assert flattened_name("darwin", "arm64", "tapes.sha256") == "tapes-darwin-arm64.sha256"

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("tapes.exe", "tapes.exe-windows-amd64"),
            ("tapes.tar.gz", "tapes.tar.gz-windows-amd64"),
            ("tapes.sha512", "tapes.sha512-windows-amd64"),
        ],
    )
    def test_other_suffixes_not_special(self, filename, expected):
        assert flattened_name("windows", "amd64", filename) == expected

    def test_bare_sha256_name(self):
        assert flattened_name("linux", "amd64", ".sha256") == "-linux-amd64.sha256"


class TestFlatten:
    def test_single_binary(self):
        result = flatten([entry("darwin", "arm64", "tapes", content=b"bin")])
        assert result == [entry("tapes-darwin-arm64", content=b"bin")]

    def test_single_checksum(self):
        result = flatten([entry("darwin", "arm64", "tapes.sha256", content=b"sum")])
        assert result == [entry("tapes-darwin-arm64.sha256", content=b"sum")]

    def test_skips_other_depths(self):
        entries = [
            entry("README.md"),
            entry("darwin", "tapes"),
            entry("linux", "amd64", "debug", "symbols"),
            entry("linux", "amd64", "tapes", content=b"x"),
        ]
        result = flatten(entries)
        assert [e.path for e in result] == [PurePosixPath("tapes-linux-amd64")]

    def test_output_never_exceeds_depth3_inputs(self):
        entries = [entry("a"), entry("a", "b"), entry("a", "b", "c"), entry("a", "b", "c", "d")]
        assert len(flatten(entries)) <= 1

    def test_already_flat_tree_yields_empty(self):
        flat = [entry("tapes-darwin-arm64"), entry("tapes-darwin-arm64.sha256")]
        assert flatten(flat) == []

    def test_collision_last_write_wins(self):
        entries = [
            entry("linux", "amd64", "x", content=b"first"),
            entry("linux", "amd64", "x", content=b"second"),
        ]
        result = flatten(entries)
        assert result == [entry("x-linux-amd64", content=b"second")]

    def test_collision_keeps_first_position(self):
        entries = [
            entry("linux", "amd64", "x", content=b"1"),
            entry("linux", "arm64", "x", content=b"2"),
            entry("linux", "amd64", "x", content=b"3"),
        ]
        result = flatten(entries)
        assert [str(e.path) for e in result] == ["x-linux-amd64", "x-linux-arm64"]
        assert result[0].content == b"3"

    def test_does_not_mutate_input(self):
        entries = [entry("darwin", "arm64", "tapes", content=b"bin")]
        snapshot = list(entries)
        flatten(entries)
        assert entries == snapshot

    def test_strict_rejects_unexpected_depth(self):
        with pytest.raises(FlattenError, match="depth 1"):
            flatten([entry("README.md")], strict=True)

    def test_strict_rejects_collision(self):
        with pytest.raises(FlattenError, match="collides"):
            flatten(
                [entry("linux", "amd64", "x"), entry("linux", "amd64", "x")],
                strict=True,
            )


class TestFlattenDirectory:
    def test_writes_flat_tree(self, build_tree: Path, tmp_path: Path):
        dest = flatten_directory(build_tree, tmp_path / "dist")

        names = sorted(p.name for p in dest.iterdir())
        assert names == [
            "tapes-darwin-arm64",
            "tapes-darwin-arm64.sha256",
            "tapes-linux-amd64",
        ]
        assert (dest / "tapes-linux-amd64").read_bytes() == b"linux-amd64-binary"

    def test_source_untouched(self, build_tree: Path, tmp_path: Path):
        before = sorted(p.relative_to(build_tree) for p in build_tree.rglob("*"))
        flatten_directory(build_tree, tmp_path / "dist")
        after = sorted(p.relative_to(build_tree) for p in build_tree.rglob("*"))
        assert before == after

    def test_strict_reports_misplaced_files(self, build_tree: Path, tmp_path: Path):
        with pytest.raises(FlattenError):
            flatten_directory(build_tree, tmp_path / "dist", strict=True)
