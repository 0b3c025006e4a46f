"""Selection of the storage driver in use."""

from __future__ import annotations

import logging

from . import aws, localstorage, s3filesystem
from .interfaces import StorageSystem

_log = logging.getLogger(__name__)


class StorageRegistry:
    """Holds the local and S3 drivers and which one is active."""

    def __init__(self, allow_unavailable_aws: bool = False) -> None:
        self.allow_unavailable_aws = allow_unavailable_aws
        self.data_filesystem: StorageSystem | None = None
        self.s3_filesystem: StorageSystem | None = None
        self.active: StorageSystem | None = None

    def init(self, data_path: str) -> None:
        """Set up the local driver for data_path and make it active."""
        driver = localstorage.get_driver()
        driver.init(localstorage.LocalConfig(data_path=data_path))
        self.data_filesystem = driver
        self.active = driver

    def set_aws(self) -> None:
        """Make S3 the active storage, if it is supported and available."""
        if not aws.IS_INCLUDED_IN_BUILD:
            return
        driver = s3filesystem.get_driver()
        self.s3_filesystem = driver
        ok = driver.init(s3filesystem.S3Config(bucket=aws.get_default_bucket_name()))
        if not ok and not self.allow_unavailable_aws:
            _log.warning("Unable to set AWS S3 as filesystem")
            return
        self.active = driver

    def set_local(self) -> None:
        """Make the local driver the active storage."""
        self.active = self.data_filesystem