"""Shared fixtures for unit tests."""

import pytest

from azmp.vm_certification.filesystem import FileStat, FileSystem
from azmp.vm_certification.vhd_validation import BYTES_PER_GB


class FakeFileSystem(FileSystem):
    """In-memory file system mapping paths to file sizes."""

    def __init__(self, files: dict[str, int] | None = None) -> None:
        """Initialize with path to size pairs."""
        self.files = dict(files or {})
        self.dirs: set[str] = set()
        self.created_dirs: list[str] = []
        self.stat_error: OSError | None = None

    def exists(self, path: str) -> bool:
        """Return True for known files and directories."""
        return path in self.files or path in self.dirs

    def stat(self, path: str) -> FileStat:
        """Return the stored size or raise the configured error."""
        if self.stat_error is not None:
            raise self.stat_error
        return FileStat(size_bytes=self.files[path])

    def make_dirs(self, path: str) -> None:
        """Record directory creation."""
        self.dirs.add(path)
        self.created_dirs.append(path)


@pytest.fixture
def vhd_path() -> str:
    """Path of the mock VHD held by the fake file system."""
    return "/test/mock.vhd"


@pytest.fixture
def filesystem(vhd_path: str) -> FakeFileSystem:
    """File system holding a 10 GiB, 1 MiB aligned VHD."""
    return FakeFileSystem({vhd_path: 10 * BYTES_PER_GB})
