"""Storage driver for S3 buckets."""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import SimpleNamespace

from . import aws
from .interfaces import DRIVER_AWS, StorageSystem, StoredFile


@dataclass
class S3Config:
    """Configuration of the S3 driver."""

    bucket: str


@dataclass
class AwsFile(StoredFile):
    """An object in an S3 bucket."""

    bucket: str
    filename: str

    @property
    def name(self) -> str:
        return self.filename

    def exists(self) -> bool:
        try:
            found, _ = aws.file_exists(SimpleNamespace(aws_bucket=self.bucket, sha1=self.filename))
        except Exception as err:
            print(err)
            return False
        return found


class S3StorageDriver(StorageSystem):
    """Keeps files in an S3 bucket."""

    def __init__(self) -> None:
        self.bucket = ""

    @property
    def system_name(self) -> str:
        return DRIVER_AWS

    def init(self, config: S3Config) -> bool:
        if not isinstance(config, S3Config):
            raise TypeError("input for aws filesystem is not a config object")
        if config.bucket == "":
            raise ValueError("empty bucket has been passed")
        self.bucket = config.bucket
        return aws.is_available()

    def is_available(self) -> bool:
        return aws.is_available()

    def move_to_filesystem(self, source_path: str, sha1: str) -> None:
        with open(source_path, "rb") as source:
            aws.upload(source, SimpleNamespace(aws_bucket=self.bucket, sha1=sha1))
        os.remove(source_path)

    def get_file(self, filename: str) -> AwsFile:
        return AwsFile(self.bucket, filename)

    def file_exists(self, filename: str) -> bool:
        found, _ = aws.file_exists(SimpleNamespace(aws_bucket=self.bucket, sha1=filename))
        return found


def get_driver() -> S3StorageDriver:
    """Return a new, unconfigured S3 storage driver."""
    return S3StorageDriver()