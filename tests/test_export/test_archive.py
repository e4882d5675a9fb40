"""Tests for deterministic skill archive packaging."""

from __future__ import annotations

import io
import zipfile

import pytest

from skillforge.constants import ARCHIVE_FIXED_DATE_TIME
from skillforge.export.archive import ArtifactPackager, archive_filename
from skillforge.resilience.errors import ConfigurationError, ValidationError

MAIN = "# Skill\n\nBody text.\n"
REFS = {"structure.md": "# Structure\n", "examples.md": "# Examples ✓\n"}


def _open(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def test_layout_and_contents() -> None:
    data = ArtifactPackager().package(MAIN, REFS, "my-skill")
    with _open(data) as archive:
        assert archive.namelist() == [
            "skill.md",
            "references/examples.md",
            "references/structure.md",
        ]
        assert archive.read("skill.md").decode() == MAIN
        assert (
            archive.read("references/examples.md").decode()
            == REFS["examples.md"]
        )
        assert archive.comment == b"my-skill"
        for info in archive.infolist():
            assert info.compress_type == zipfile.ZIP_DEFLATED
            assert info.date_time == ARCHIVE_FIXED_DATE_TIME


def test_identical_input_gives_identical_bytes() -> None:
    packager = ArtifactPackager()
    a = packager.package(MAIN, REFS, "my-skill")
    b = packager.package(MAIN, dict(reversed(list(REFS.items()))), "my-skill")
    assert a == b


def test_uppercase_main_filename() -> None:
    data = ArtifactPackager("SKILL.md").package(MAIN, {}, "x")
    with _open(data) as archive:
        assert archive.namelist() == ["SKILL.md"]


def test_unknown_main_filename_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ArtifactPackager("README.md")


@pytest.mark.parametrize("name", ["../evil.md", "a/b.md", "..", "", "a\\b"])
def test_unsafe_reference_names_rejected(name: str) -> None:
    with pytest.raises(ValidationError):
        ArtifactPackager().package(MAIN, {name: "x"}, "x")


def test_archive_filename() -> None:
    assert archive_filename("my-skill") == "my-skill.zip"
