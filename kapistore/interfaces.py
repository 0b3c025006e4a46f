"""Abstract storage drivers and the files they hold."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

DRIVER_LOCAL = "localstorage"
DRIVER_AWS = "awss3"


class StoredFile(ABC):
    """A file kept by a storage system."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of the file."""

    @abstractmethod
    def exists(self) -> bool:
        """Return True if the file exists."""


class StorageSystem(ABC):
    """A driver that stores and retrieves files."""

    @property
    @abstractmethod
    def system_name(self) -> str:
        """The name of the driver."""

    @abstractmethod
    def init(self, config: Any) -> bool:
        """Configure the driver; return True if it can be used."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the driver can be used."""

    @abstractmethod
    def move_to_filesystem(self, source_path: str, sha1: str) -> None:
        """Move a local file into the driver's storage under its hash."""

    @abstractmethod
    def get_file(self, filename: str) -> StoredFile:
        """Return the stored file with the given name."""

    @abstractmethod
    def file_exists(self, filename: str) -> bool:
        """Return True if the storage holds a file with the given name."""