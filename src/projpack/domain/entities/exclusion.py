"""
Exclusion rules deciding which entries of a project tree are staged.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

_SEPARATORS = ("/", "\\")


def split_components(relative_path: str) -> List[str]:
    """Split a relative path on both separator styles, dropping empty parts."""
    normalized = relative_path
    for sep in _SEPARATORS[1:]:
        normalized = normalized.replace(sep, _SEPARATORS[0])
    return [part for part in normalized.split(_SEPARATORS[0]) if part]


def file_extension(name: str) -> str:
    """Return the extension of a file name including the dot.

    Unlike os.path.splitext, a leading dot counts, so ".log" has extension
    ".log"; a trailing dot yields no extension.
    """
    index = name.rfind(".")
    if index == -1 or index == len(name) - 1:
        return ""
    return name[index:]


@dataclass(frozen=True)
class ExclusionRules:
    """Value object holding the ignored directory names and file extensions.

    Both sets are stored case-folded so lookups are case-insensitive.
    """
    ignored_directories: FrozenSet[str]
    ignored_extensions: FrozenSet[str]

    def __post_init__(self):
        if not isinstance(self.ignored_directories, frozenset):
            raise ValueError("Ignored directories must be a frozenset")

        if not isinstance(self.ignored_extensions, frozenset):
            raise ValueError("Ignored extensions must be a frozenset")

        for name in self.ignored_directories:
            if not name or any(sep in name for sep in _SEPARATORS):
                raise ValueError(f"Invalid ignored directory name: {name!r}")

        for ext in self.ignored_extensions:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"Invalid ignored extension: {ext!r}")

    @classmethod
    def create(
        cls, ignored_directories: Iterable[str], ignored_extensions: Iterable[str]
    ) -> "ExclusionRules":
        """Build rules from any iterables, folding case."""
        return cls(
            ignored_directories=frozenset(name.casefold() for name in ignored_directories),
            ignored_extensions=frozenset(ext.casefold() for ext in ignored_extensions),
        )

    @classmethod
    def from_config(cls, config) -> "ExclusionRules":
        """Build rules from a PackConfig."""
        return cls.create(config.ignored_directories, config.ignored_extensions)


class ExclusionPolicy:
    """Pure predicate deciding whether a relative path is staged or skipped.

    Matching is exact (no globbing) and case-insensitive: a directory is
    ignored when any of its path components is an ignored directory name, and
    a file is ignored when it lives under such a directory or carries an
    always-ignored extension.
    """

    def __init__(self, rules: ExclusionRules):
        self._rules = rules

    @property
    def rules(self) -> ExclusionRules:
        return self._rules

    def _has_ignored_component(self, components: Iterable[str]) -> bool:
        ignored = self._rules.ignored_directories
        return any(component.casefold() in ignored for component in components)

    def should_ignore_directory(self, relative_path: str) -> bool:
        """True if any component of ``relative_path`` is an ignored directory name."""
        return self._has_ignored_component(split_components(relative_path))

    def is_inside_ignored_directory(self, relative_path: str) -> bool:
        """True if a file's parent components include an ignored directory name.

        The last component is the file name itself and is not considered.
        """
        return self._has_ignored_component(split_components(relative_path)[:-1])

    def has_ignored_extension(self, relative_path: str) -> bool:
        components = split_components(relative_path)
        if not components:
            return False
        extension = file_extension(components[-1])
        return bool(extension) and extension.casefold() in self._rules.ignored_extensions

    def should_ignore_file(
        self, relative_path: str, is_inside_ignored_directory: bool
    ) -> bool:
        """Decide whether a file is skipped.

        Files under an ignored directory are always skipped; anywhere else only
        the extension is checked, so e.g. a ``.dll`` outside ``bin`` is kept.
        """
        if is_inside_ignored_directory:
            return True
        return self.has_ignored_extension(relative_path)

    def classify_file(self, relative_path: str) -> bool:
        """Convenience wrapper computing the ancestor check before deciding."""
        return self.should_ignore_file(
            relative_path, self.is_inside_ignored_directory(relative_path)
        )
