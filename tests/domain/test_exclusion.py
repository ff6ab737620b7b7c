"""
Unit tests for the exclusion rules and policy.
"""

import pytest

from projpack.core.config import get_default_config
from projpack.domain.entities.exclusion import (
    ExclusionPolicy,
    ExclusionRules,
    file_extension,
    split_components,
)


@pytest.fixture
def policy():
    return ExclusionPolicy(ExclusionRules.from_config(get_default_config()))


class TestSplitComponents:
    def test_splits_on_both_separators(self):
        assert split_components("a/b\\c") == ["a", "b", "c"]

    def test_drops_empty_components(self):
        assert split_components("/a//b/") == ["a", "b"]

    def test_empty_path(self):
        assert split_components("") == []


class TestFileExtension:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("main.txt", ".txt"),
            ("archive.tar.gz", ".gz"),
            (".log", ".log"),
            ("Makefile", ""),
            ("trailing.", ""),
        ],
    )
    def test_file_extension(self, name, expected):
        assert file_extension(name) == expected


class TestExclusionRules:
    def test_create_folds_case(self):
        rules = ExclusionRules.create(["Bin", "OBJ"], [".LOG"])
        assert rules.ignored_directories == frozenset({"bin", "obj"})
        assert rules.ignored_extensions == frozenset({".log"})

    def test_rules_are_immutable(self):
        rules = ExclusionRules.create(["bin"], [".log"])
        with pytest.raises(AttributeError):
            rules.ignored_directories = frozenset()

    def test_extension_without_dot_rejected(self):
        with pytest.raises(ValueError, match="Invalid ignored extension"):
            ExclusionRules.create(["bin"], ["log"])

    def test_directory_name_with_separator_rejected(self):
        with pytest.raises(ValueError, match="Invalid ignored directory name"):
            ExclusionRules.create(["a/b"], [".log"])

    def test_default_rules(self):
        rules = ExclusionRules.from_config(get_default_config())
        assert rules.ignored_directories == frozenset(
            {"bin", "obj", ".vs", "packages", "node_modules"}
        )
        assert rules.ignored_extensions == frozenset(
            {".suo", ".user", ".cache", ".log", ".tmp"}
        )


class TestDirectoryRules:
    @pytest.mark.parametrize(
        "path",
        ["bin", "obj", ".vs", "packages", "node_modules", "BIN", "Obj", "src/bin", "a/b/Node_Modules/c"],
    )
    def test_ignored_directories(self, policy, path):
        assert policy.should_ignore_directory(path)

    @pytest.mark.parametrize(
        "path",
        ["src", "binary", "objects", "my.vs", "src/package", "lib/bins"],
    )
    def test_kept_directories(self, policy, path):
        assert not policy.should_ignore_directory(path)

    def test_windows_separators(self, policy):
        assert policy.should_ignore_directory("src\\obj\\Debug")


class TestFileRules:
    def test_file_inside_ignored_directory_always_ignored(self, policy):
        assert policy.is_inside_ignored_directory("bin/app.dll")
        assert policy.should_ignore_file("bin/app.dll", True)
        assert policy.should_ignore_file("src/readme.md", True)

    def test_dll_outside_bin_is_kept(self, policy):
        assert not policy.classify_file("lib/vendor.dll")

    @pytest.mark.parametrize(
        "path",
        ["debug.log", "src/App.SUO", "src/App.csproj.user", "x/.cache", "tmp/work.TMP"],
    )
    def test_always_ignored_extensions(self, policy, path):
        assert policy.classify_file(path)

    def test_file_named_like_ignored_directory_is_not_a_directory(self, policy):
        # A file called "bin" is only checked by extension.
        assert not policy.is_inside_ignored_directory("tools/bin")
        assert not policy.classify_file("tools/bin")

    def test_no_glob_matching(self, policy):
        assert not policy.classify_file("src/log.txt")
        assert not policy.classify_file("src/file.logs")

    def test_custom_rules(self):
        policy = ExclusionPolicy(ExclusionRules.create(["dist"], [".pyc"]))
        assert policy.should_ignore_directory("pkg/dist")
        assert not policy.should_ignore_directory("bin")
        assert policy.classify_file("pkg/mod.PYC")
        assert not policy.classify_file("debug.log")
