"""File-system capability used to inspect VHD files."""

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field


class FileStat(BaseModel):
    """Metadata returned by a file-system stat call."""

    size_bytes: int = Field(..., ge=0, description="File length in bytes")


class FileSystem(ABC):
    """Abstract access to the files being certified."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if a file or directory exists at path."""

    @abstractmethod
    def stat(self, path: str) -> FileStat:
        """Return metadata for the file at path.

        Raises:
            OSError: If the file cannot be read

        """

    @abstractmethod
    def make_dirs(self, path: str) -> None:
        """Create a directory and any missing parents."""


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk."""

    def exists(self, path: str) -> bool:
        """Check the path with pathlib."""
        return Path(path).exists()

    def stat(self, path: str) -> FileStat:
        """Stat the file with pathlib."""
        return FileStat(size_bytes=Path(path).stat().st_size)

    def make_dirs(self, path: str) -> None:
        """Create the directory tree with pathlib."""
        Path(path).mkdir(parents=True, exist_ok=True)
