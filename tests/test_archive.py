import zipfile
from pathlib import Path

import pytest

from s3deploy.core.exceptions import ArchiveError
from s3deploy.packer.archive import ArchivePackager, archive_entry_name


@pytest.mark.unit
def test_dependency_output_drops_target_segment():
    assert archive_entry_name("targetname/sub/file.txt") == "sub/file.txt"


@pytest.mark.unit
def test_single_segment_dependency_output_unchanged():
    assert archive_entry_name("file.txt") == "file.txt"


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "handler.py").write_text("def handler(): pass\n")
    (tmp_path / "config.json").write_text("{}")
    (tmp_path / "libdeps" / "vendor").mkdir(parents=True)
    (tmp_path / "libdeps" / "vendor" / "lib.py").write_text("X = 1\n")
    (tmp_path / "README").write_text("readme")
    return tmp_path


@pytest.mark.integration
def test_build_keeps_caller_order_and_names(workdir: Path):
    packager = ArchivePackager(workdir)

    dest = packager.build(
        ["src/handler.py", "config.json"],
        ["libdeps/vendor/lib.py", "README"],
        "bundle.zip",
    )

    assert dest == workdir / "bundle.zip"
    with zipfile.ZipFile(dest) as archive:
        assert archive.namelist() == [
            "src/handler.py",
            "config.json",
            "vendor/lib.py",
            "README",
        ]
        assert archive.read("vendor/lib.py") == b"X = 1\n"
        assert archive.read("src/handler.py") == b"def handler(): pass\n"


@pytest.mark.integration
def test_build_does_not_sort(workdir: Path):
    dest = ArchivePackager(workdir).build(["config.json", "src/handler.py"], [], "b.zip")

    with zipfile.ZipFile(dest) as archive:
        assert archive.namelist() == ["config.json", "src/handler.py"]


@pytest.mark.integration
def test_identical_inputs_give_identical_bytes(workdir: Path):
    packager = ArchivePackager(workdir)
    first = packager.build(["src/handler.py"], ["libdeps/vendor/lib.py"], "one.zip")
    second = packager.build(["src/handler.py"], ["libdeps/vendor/lib.py"], "two.zip")

    assert first.read_bytes() == second.read_bytes()


@pytest.mark.integration
def test_missing_source_leaves_no_archive(workdir: Path):
    packager = ArchivePackager(workdir)

    with pytest.raises(ArchiveError):
        packager.build(["src/handler.py", "missing.txt"], [], "bundle.zip")

    assert not (workdir / "bundle.zip").exists()
    assert list(workdir.glob(".bundle.zip.*")) == []


@pytest.mark.integration
def test_failed_rebuild_removes_previous_archive(workdir: Path):
    packager = ArchivePackager(workdir)
    dest = packager.build(["config.json"], [], "bundle.zip")

    with pytest.raises(ArchiveError):
        packager.build(["config.json"], ["dep/missing.txt"], "bundle.zip")

    assert not dest.exists()


@pytest.mark.integration
def test_undeletable_stale_archive_still_raises_archive_error(workdir: Path, monkeypatch):
    packager = ArchivePackager(workdir)
    dest = packager.build(["config.json"], [], "bundle.zip")

    def refuse(self, missing_ok=False):
        raise PermissionError(f"cannot remove {self}")

    monkeypatch.setattr(Path, "unlink", refuse)

    with pytest.raises(ArchiveError):
        packager.build(["config.json"], ["dep/missing.txt"], "bundle.zip")
    assert dest.exists()


@pytest.mark.integration
def test_unwritable_destination_raises(workdir: Path):
    (workdir / "blocked").write_text("a file, not a directory")

    with pytest.raises(ArchiveError):
        ArchivePackager(workdir).build(["config.json"], [], "blocked/bundle.zip")
