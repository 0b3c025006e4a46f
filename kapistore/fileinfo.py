"""Metadata of stored files and the rules that apply to it."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import IntFlag

IMAGE_FILE_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg",
    ".tiff", ".tif", ".ico", ".avif", ".avifs", ".apng",
)


@dataclass
class FileRecord:
    """Metadata of a shared file."""

    id: str = ""
    name: str = ""
    sha1: str = ""
    size: str = ""
    size_bytes: int = 0
    content_type: str = ""
    expire_at: int = 0
    expire_at_string: str = ""
    downloads_remaining: int = 0
    download_count: int = 0
    unlimited_time: bool = False
    unlimited_downloads: bool = False
    password_hash: str = ""
    hotlink_id: str = ""
    user_id: int = 0
    aws_bucket: str = ""
    is_encrypted: bool = False
    is_end_to_end_encrypted: bool = False
    decryption_key: bytes = b""
    nonce: bytes = b""

    @property
    def is_local_storage(self) -> bool:
        """True if the content is kept on the local file system."""
        return self.aws_bucket == ""

    @property
    def requires_client_decryption(self) -> bool:
        """True if the content can only be decrypted by the client."""
        if not self.is_encrypted:
            return False
        return self.is_end_to_end_encrypted or not self.is_local_storage


@dataclass
class UploadRequest:
    """Parameters chosen for an upload."""

    allowed_downloads: int = 0
    expiry: int = 0
    expiry_timestamp: int = 0
    max_memory: int = 0
    password: str = ""
    unlimited_download: bool = False
    unlimited_time: bool = False
    is_end_to_end_encrypted: bool = False
    real_size: int = 0


class Param(IntFlag):
    """Properties that are changed when a file is duplicated."""

    EXPIRY = 1
    DOWNLOADS = 2
    PASSWORD = 4
    NAME = 8


def is_expired_file(file: FileRecord, time_now: int) -> bool:
    """True if the file has expired by time or by downloads."""
    expired_by_time = file.expire_at < time_now and not file.unlimited_time
    expired_by_downloads = file.downloads_remaining < 1 and not file.unlimited_downloads
    return expired_by_time or expired_by_downloads


def format_timestamp(timestamp: int) -> str:
    """Format a Unix timestamp in local time as YYYY-MM-DD HH:MM."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def get_file_extension(filename: str) -> str:
    """Return the lower-case extension of the last path element, with its dot."""
    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:].lower() if dot >= 0 else ""


def is_picture_file(filename: str) -> bool:
    """True if the file name has a known image extension."""
    return get_file_extension(filename) in IMAGE_FILE_EXTENSIONS


def is_able_hotlink(file: FileRecord) -> bool:
    """True if the file may be hotlinked: an image without password or client-side encryption."""
    if file.requires_client_decryption:
        return False
    if file.password_hash:
        return False
    return is_picture_file(file.name)


def is_change_requested(parameters: int, parameter: int) -> bool:
    """True if parameter is among the requested changes."""
    return parameters & parameter != 0


def apply_duplicate_parameters(
    file: FileRecord,
    parameters: int,
    new_name: str,
    request: UploadRequest,
    new_id: str,
    password_hash: str,
) -> FileRecord:
    """Return a copy of file with a new id, no downloads and the requested changes.

    password_hash is used only when a password change is requested.
    """
    changes: dict[str, object] = {"id": new_id, "download_count": 0}
    if is_change_requested(parameters, Param.EXPIRY):
        changes["expire_at"] = request.expiry_timestamp
        changes["expire_at_string"] = format_timestamp(request.expiry_timestamp)
        changes["unlimited_time"] = request.unlimited_time
    if is_change_requested(parameters, Param.DOWNLOADS):
        changes["downloads_remaining"] = request.allowed_downloads
        changes["unlimited_downloads"] = request.unlimited_download
    if is_change_requested(parameters, Param.PASSWORD):
        changes["password_hash"] = password_hash
    if is_change_requested(parameters, Param.NAME):
        changes["name"] = new_name
    return dataclasses.replace(file, **changes)