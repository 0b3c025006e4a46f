"""Storage driver for the local file system."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .interfaces import DRIVER_LOCAL, StorageSystem, StoredFile


@dataclass
class LocalConfig:
    """Configuration of the local driver."""

    data_path: str
    file_prefix: str = ""


@dataclass
class LocalFile(StoredFile):
    """A file in a local directory."""

    directory: str
    filename: str

    @property
    def name(self) -> str:
        return self.filename

    def exists(self) -> bool:
        return os.path.exists(self.directory + self.filename)


class LocalStorageDriver(StorageSystem):
    """Keeps files in a directory, optionally with a name prefix."""

    def __init__(self) -> None:
        self.data_path = ""
        self.file_prefix = ""

    @property
    def system_name(self) -> str:
        return DRIVER_LOCAL

    def init(self, config: LocalConfig) -> bool:
        if not isinstance(config, LocalConfig):
            raise TypeError("input for local filesystem is not a config object")
        if config.data_path == "":
            raise ValueError("empty path has been passed")
        data_path = config.data_path
        if not data_path.endswith(os.sep):
            data_path += os.sep
        self.data_path = data_path
        self.file_prefix = config.file_prefix
        return True

    def is_available(self) -> bool:
        return True

    def move_to_filesystem(self, source_path: str, sha1: str) -> None:
        if not sha1:
            raise ValueError("empty metadata passed")
        os.rename(source_path, self.get_path() + self.file_prefix + sha1)

    def get_file(self, filename: str) -> LocalFile:
        return LocalFile(self.get_path(), self.file_prefix + filename)

    def file_exists(self, filename: str) -> bool:
        return self.get_file(filename).exists()

    def get_path(self) -> str:
        """Return the data directory, ending in a path separator."""
        if not self.data_path:
            raise RuntimeError("no path has been set")
        return self.data_path


def get_driver() -> LocalStorageDriver:
    """Return a new, unconfigured local storage driver."""
    return LocalStorageDriver()