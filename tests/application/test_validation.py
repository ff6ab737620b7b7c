"""
Tests for the pre-run validation contract.
"""

import pytest

from projpack.application.validation import (
    can_pack,
    default_archive_name,
    is_strictly_inside,
    validate_pack_request,
)


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "Source"
    path.mkdir()
    return path


class TestValidatePackRequest:
    def test_valid_request_next_to_source(self, source, tmp_path):
        result = validate_pack_request(str(source), str(tmp_path / "Source.zip"))
        assert result.valid
        assert result.reason is None

    def test_output_directly_in_source_is_allowed(self, source):
        assert validate_pack_request(str(source), str(source / "out.zip")).valid

    def test_output_in_subdirectory_of_source_is_rejected(self, source):
        (source / "dist").mkdir()
        result = validate_pack_request(str(source), str(source / "dist" / "out.zip"))
        assert not result.valid
        assert result.field == "output_path"
        assert "inside a subdirectory" in result.reason

    def test_nested_check_ignores_case(self, source):
        nested = str(source / "dist" / "out.zip").replace("Source", "SOURCE")
        result = validate_pack_request(str(source), nested)
        assert not result.valid

    def test_sibling_with_common_prefix_is_not_nested(self, source, tmp_path):
        sibling = tmp_path / "Source2"
        sibling.mkdir()
        assert validate_pack_request(str(source), str(sibling / "out.zip")).valid

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_source_rejected(self, value, tmp_path):
        result = validate_pack_request(value, str(tmp_path / "out.zip"))
        assert not result.valid
        assert result.field == "source_path"

    @pytest.mark.parametrize("value", ["", "\t", None])
    def test_empty_output_rejected(self, source, value):
        result = validate_pack_request(str(source), value)
        assert not result.valid
        assert result.field == "output_path"

    def test_missing_source_rejected(self, tmp_path):
        result = validate_pack_request(str(tmp_path / "missing"), str(tmp_path / "out.zip"))
        assert not result.valid
        assert "does not exist" in result.reason

    def test_source_that_is_a_file_rejected(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        assert not validate_pack_request(str(file_path), str(tmp_path / "out.zip")).valid

    def test_output_that_is_a_directory_rejected(self, source, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        result = validate_pack_request(str(source), str(target))
        assert not result.valid
        assert "is a directory" in result.reason

    def test_running_rejected(self, source, tmp_path):
        result = validate_pack_request(str(source), str(tmp_path / "out.zip"), is_running=True)
        assert not result.valid
        assert "already in progress" in result.reason

    def test_home_relative_paths_are_expanded(self, source, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert validate_pack_request("~/Source", "~/Source.zip").valid

    def test_home_relative_output_checked_against_home(self, source, monkeypatch):
        monkeypatch.setenv("HOME", str(source))
        (source / "dist").mkdir()
        result = validate_pack_request(str(source), "~/dist/out.zip")
        assert not result.valid
        assert "inside a subdirectory" in result.reason


def test_can_pack_matches_validation(source, tmp_path):
    assert can_pack(str(source), str(tmp_path / "out.zip"))
    assert not can_pack(str(source), str(tmp_path / "out.zip"), is_running=True)
    assert not can_pack("", str(tmp_path / "out.zip"))


class TestIsStrictlyInside:
    def test_equal_paths_are_not_inside(self, tmp_path):
        assert not is_strictly_inside(str(tmp_path), str(tmp_path))

    def test_child_is_inside(self, tmp_path):
        assert is_strictly_inside(str(tmp_path / "a" / "b"), str(tmp_path / "a"))

    def test_trailing_separator_is_ignored(self, tmp_path):
        assert not is_strictly_inside(str(tmp_path / "a") + "/", str(tmp_path / "a"))

    def test_prefix_is_not_inside(self, tmp_path):
        assert not is_strictly_inside(str(tmp_path / "ab"), str(tmp_path / "a"))


class TestDefaultArchiveName:
    def test_uses_folder_name(self):
        assert default_archive_name("/work/MyApp") == "MyApp.zip"

    def test_trailing_separator(self):
        assert default_archive_name("/work/MyApp/") == "MyApp.zip"

    def test_fallback_when_empty(self):
        assert default_archive_name("") == "ProjectArchive.zip"
        assert default_archive_name(None) == "ProjectArchive.zip"

    def test_fallback_for_root(self):
        assert default_archive_name("/") == "ProjectArchive.zip"

    def test_custom_fallback(self):
        assert default_archive_name("", fallback="bundle.zip") == "bundle.zip"
