"""Configuration for packing runs."""
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional


DEFAULT_IGNORED_DIRECTORIES = frozenset(
    {"bin", "obj", ".vs", "packages", "node_modules"}
)

DEFAULT_IGNORED_EXTENSIONS = frozenset(
    {".suo", ".user", ".cache", ".log", ".tmp"}
)

DEFAULT_ARCHIVE_NAME = "ProjectArchive.zip"


@dataclass(frozen=True)
class PackConfig:
    """Settings shared by every run a service performs.

    Attributes:
        ignored_directories: Directory names excluded wherever they appear in a path
        ignored_extensions: File extensions (with leading dot) excluded outside
            ignored directories
        delete_max_attempts: How many times the staging cleanup is attempted
        delete_retry_delay: Seconds to wait between cleanup attempts
        compression_level: Deflate level used for the archive (0-9)
        temp_root: Parent directory for staging directories, system temp if None
        default_archive_name: Archive file name used when none can be derived
    """

    ignored_directories: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_IGNORED_DIRECTORIES
    )
    ignored_extensions: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_IGNORED_EXTENSIONS
    )
    delete_max_attempts: int = 5
    delete_retry_delay: float = 0.1
    compression_level: int = 9
    temp_root: Optional[str] = None
    default_archive_name: str = DEFAULT_ARCHIVE_NAME

    def __post_init__(self):
        if self.delete_max_attempts < 1:
            raise ValueError("delete_max_attempts must be at least 1")

        if self.delete_retry_delay < 0:
            raise ValueError("delete_retry_delay must be a non-negative number")

        if not 0 <= self.compression_level <= 9:
            raise ValueError("compression_level must be between 0 and 9")

        for ext in self.ignored_extensions:
            if not ext.startswith("."):
                raise ValueError(f"Ignored extension '{ext}' must start with a dot")

    def with_overrides(self, **kwargs) -> "PackConfig":
        """Return a copy of this configuration with the given fields replaced.

        Fields set to None are left untouched so CLI options can be passed
        through directly.
        """
        changes = {key: value for key, value in kwargs.items() if value is not None}
        return replace(self, **changes)


_default_config = PackConfig()


def get_default_config() -> PackConfig:
    """Get the default packing configuration."""
    return _default_config
