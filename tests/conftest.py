import os
from pathlib import Path
from typing import Dict, Union

import pytest

from projpack.application.container import ServiceContainer, set_service_container
from projpack.progress import CollectingProgress


def build_tree(root: Path, entries: Dict[str, Union[str, bytes, None]]) -> Path:
    """Create files and directories below ``root``.

    Keys are relative paths using "/". A value of None creates a directory,
    anything else is written as file content.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in entries.items():
        path = root.joinpath(*rel.split("/"))
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def list_tree(root: Path):
    """Return (directories, files) below ``root`` as sorted "/"-joined paths."""
    directories, files = [], []
    for current, dirnames, filenames in os.walk(root):
        for name in dirnames:
            directories.append(Path(current, name).relative_to(root).as_posix())
        for name in filenames:
            files.append(Path(current, name).relative_to(root).as_posix())
    return sorted(directories), sorted(files)


@pytest.fixture
def make_tree():
    return build_tree


@pytest.fixture
def example_project(tmp_path):
    """The canonical example: one kept file, one ignored by directory, one by extension."""
    return build_tree(
        tmp_path / "Project",
        {
            "src/main.txt": "int main() {}\n",
            "bin/app.dll": b"\x4d\x5a\x90\x00",
            "src/debug.log": "noise\n",
        },
    )


@pytest.fixture
def progress():
    return CollectingProgress()


@pytest.fixture(autouse=True)
def fresh_service_container():
    """Give every test its own service container."""
    set_service_container(ServiceContainer())
    yield
    set_service_container(None)


@pytest.fixture
def listing():
    return list_tree
