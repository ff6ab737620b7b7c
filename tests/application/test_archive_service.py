"""
Tests for the ZIP archive builder.
"""

import zipfile

import pytest

from projpack.application.exceptions import ArchiveOperationError
from projpack.application.services.archive_service import ArchiveBuilder


@pytest.fixture
def builder():
    return ArchiveBuilder()


@pytest.fixture
def staged(make_tree, tmp_path):
    return make_tree(
        tmp_path / "staged",
        {
            "src/main.txt": "int main() {}\n",
            "src/lib/util.c": "void f(void) {}\n",
            "README.md": "# readme\n",
            "assets/logo.bin": bytes(range(200)),
            "empty/": None,
        },
    )


def test_extracted_archive_reproduces_staged_tree(builder, staged, tmp_path, listing):
    output = tmp_path / "out" / "project.zip"
    output.parent.mkdir()

    builder.build_archive(str(staged), str(output))

    extracted = tmp_path / "extracted"
    with zipfile.ZipFile(output) as archive:
        archive.extractall(extracted)

    assert listing(extracted) == listing(staged)
    for rel in listing(staged)[1]:
        assert (extracted / rel).read_bytes() == (staged / rel).read_bytes()


def test_entries_are_relative_and_deflated(builder, staged, tmp_path):
    output = tmp_path / "project.zip"
    summary = builder.build_archive(str(staged), str(output))

    with zipfile.ZipFile(output) as archive:
        infos = archive.infolist()
        names = archive.namelist()

    assert "staged/" not in names
    assert not any(name.startswith(("/", "staged")) for name in names)
    assert "src/lib/util.c" in names
    assert "empty/" in names
    assert all(
        info.compress_type == zipfile.ZIP_DEFLATED for info in infos if not info.is_dir()
    )
    assert summary.file_count == 4
    assert summary.directory_count == 4
    assert summary.entry_count == len(names)
    assert summary.archive_size == output.stat().st_size


def test_existing_archive_is_replaced(builder, staged, tmp_path):
    output = tmp_path / "project.zip"
    with zipfile.ZipFile(output, "w") as old:
        old.writestr("stale.txt", "old contents " * 100)

    builder.build_archive(str(staged), str(output))

    with zipfile.ZipFile(output) as archive:
        names = archive.namelist()
    assert "stale.txt" not in names
    assert "README.md" in names


def test_existing_non_zip_file_is_replaced(builder, staged, tmp_path):
    output = tmp_path / "project.zip"
    output.write_text("not a zip at all")

    builder.build_archive(str(staged), str(output))

    assert zipfile.is_zipfile(output)


def test_empty_staged_directory(builder, tmp_path):
    staged = tmp_path / "staged"
    staged.mkdir()
    output = tmp_path / "empty.zip"

    summary = builder.build_archive(str(staged), str(output))

    assert summary.entry_count == 0
    with zipfile.ZipFile(output) as archive:
        assert archive.namelist() == []


def test_missing_output_directory_is_fatal(builder, staged, tmp_path):
    with pytest.raises(ArchiveOperationError, match="Archive create failed"):
        builder.build_archive(str(staged), str(tmp_path / "nope" / "out.zip"))


def test_output_path_that_is_a_directory_is_fatal(builder, staged, tmp_path):
    target = tmp_path / "target.zip"
    target.mkdir()
    with pytest.raises(ArchiveOperationError, match="output path is a directory"):
        builder.build_archive(str(staged), str(target))


def test_missing_staged_directory_is_fatal(builder, tmp_path):
    with pytest.raises(ArchiveOperationError, match="staged directory does not exist"):
        builder.build_archive(str(tmp_path / "missing"), str(tmp_path / "out.zip"))


def test_partial_archive_removed_on_failure(builder, staged, tmp_path, monkeypatch):
    output = tmp_path / "project.zip"
    real_write = zipfile.ZipFile.write

    def failing_write(self, filename, arcname=None, *args, **kwargs):
        if arcname == "src/main.txt":
            raise OSError(28, "No space left on device")
        return real_write(self, filename, arcname, *args, **kwargs)

    monkeypatch.setattr(zipfile.ZipFile, "write", failing_write)

    with pytest.raises(ArchiveOperationError, match="No space left on device"):
        builder.build_archive(str(staged), str(output))
    assert not output.exists()


def test_invalid_compression_level():
    with pytest.raises(ValueError):
        ArchiveBuilder(compression_level=12)
