"""Storage, lookup, duplication and clean-up of shared files."""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import os
import secrets
import shutil
import string
import time
from typing import BinaryIO, Callable

from . import aws
from .fileinfo import (
    FileRecord,
    UploadRequest,
    apply_duplicate_parameters,
    get_file_extension,
    is_able_hotlink,
    is_expired_file,
)

_log = logging.getLogger(__name__)

_TEMP_FILE_MAX_AGE_SECONDS = 24 * 60 * 60
_HOTLINK_LENGTH = 40
_RANDOM_ALPHABET = string.ascii_letters + string.digits


class FileTooLargeError(ValueError):
    """Raised when a file larger than the set maximum is uploaded."""

    def __init__(self, message: str = "upload limit exceeded") -> None:
        super().__init__(message)


class ReplaceE2EFileError(ValueError):
    """Raised when an end-to-end encrypted file is to be replaced."""

    def __init__(
        self, message: str = "end-to-end encrypted files cannot be replaced"
    ) -> None:
        super().__init__(message)


class StoredFileNotFoundError(LookupError):
    """Raised when an id is unknown or the file has expired."""

    def __init__(self, message: str = "file not found") -> None:
        super().__init__(message)


def is_allowed_file_size(size: int, max_file_size_mb: int) -> bool:
    """True if size does not exceed the maximum size in megabytes."""
    return size <= max_file_size_mb * 1024 * 1024


def hash_file(stream: BinaryIO, salt: str | None = None) -> str:
    """Return the hex SHA-1 of the stream's content, followed by salt if given."""
    digest = hashlib.sha1()
    for block in iter(lambda: stream.read(1024 * 1024), b""):
        digest.update(block)
    if salt:
        digest.update(salt.encode("utf-8"))
    return digest.hexdigest()


def is_old_temp_file(path: str, now: float) -> bool:
    """True if path is an upload or chunk temp file older than 24 hours."""
    name = os.path.basename(path)
    if not (name.startswith("upload") or name.startswith("chunk-")):
        return False
    try:
        if os.path.isdir(path):
            return False
        modified = os.stat(path).st_mtime
    except OSError:
        return False
    return now - modified > _TEMP_FILE_MAX_AGE_SECONDS


def clean_old_temp_files(data_dir: str) -> None:
    """Remove temp upload and chunk files older than 24 hours from data_dir."""
    try:
        names = os.listdir(data_dir)
    except OSError as err:
        _log.warning("%s", err)
        return
    now = time.time()
    for name in names:
        path = os.path.join(data_dir, name)
        if is_old_temp_file(path, now):
            try:
                os.remove(path)
            except OSError as err:
                _log.warning("%s", err)


def _random_string(length: int) -> str:
    return "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(length))


class FileStore:
    """Metadata and hotlinks of shared files whose content lives in data_dir.

    Ids in ``downloading`` belong to files with a download in progress;
    such files are kept by a clean-up even when expired.
    """

    def __init__(
        self,
        data_dir: str,
        id_length: int = 20,
        password_salt: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.data_dir = data_dir
        self.id_length = id_length
        self.password_salt = password_salt
        self.metadata: dict[str, FileRecord] = {}
        self.hotlinks: dict[str, str] = {}
        self.downloading: set[str] = set()
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def _new_id(self) -> str:
        return _random_string(self.id_length)

    def _hash_password(self, password: str) -> str:
        if not password:
            return ""
        return hashlib.sha1((password + self.password_salt).encode("utf-8")).hexdigest()

    def _content_path(self, file: FileRecord) -> str:
        return f"{self.data_dir}/{file.sha1}"

    def _content_exists(self, file: FileRecord) -> bool:
        if not file.is_local_storage:
            try:
                found, size = aws.file_exists(file)
            except aws.AwsNotSupportedError as err:
                _log.warning("Warning, cannot check file %s: %s", file.id, err)
                return True
            if not found:
                return False
            return not (size == 0 and file.size != "0 B")
        return os.path.exists(self._content_path(file))

    def _delete_source(self, file: FileRecord) -> None:
        try:
            if file.is_local_storage:
                os.remove(self._content_path(file))
            else:
                aws.delete_object(file)
        except (OSError, aws.AwsNotSupportedError) as err:
            _log.warning("Warning, cannot delete file %s: %s", file.id, err)

    def save(self, file: FileRecord) -> None:
        """Store the metadata of a file, replacing any with the same id."""
        self.metadata[file.id] = dataclasses.replace(file)

    def get_file(self, file_id: str) -> FileRecord | None:
        """Return a valid, unexpired file with existing content, or None."""
        if not file_id:
            return None
        file = self.metadata.get(file_id)
        if file is None:
            return None
        if is_expired_file(file, self._now()):
            return None
        if not self._content_exists(file):
            return None
        return dataclasses.replace(file)

    def get_file_by_hotlink(self, hotlink_id: str) -> FileRecord | None:
        """Return the valid file a hotlink points to, or None."""
        if not hotlink_id:
            return None
        file_id = self.hotlinks.get(hotlink_id)
        if file_id is None:
            return None
        return self.get_file(file_id)

    def add_hotlink(self, file: FileRecord) -> None:
        """Give a hotlinkable file a new hotlink id and register it."""
        if not is_able_hotlink(file):
            return
        file.hotlink_id = _random_string(_HOTLINK_LENGTH) + get_file_extension(file.name)
        self.hotlinks[file.hotlink_id] = file.id

    def upload_counts(self) -> dict[int, int]:
        """Return the number of unexpired files per user id."""
        now = self._now()
        counts: dict[int, int] = {}
        for file in self.metadata.values():
            if not is_expired_file(file, now):
                counts[file.user_id] = counts.get(file.user_id, 0) + 1
        return counts

    def replace_file(self, file_id: str, new_content_id: str, delete: bool) -> FileRecord:
        """Give file_id the content of new_content_id; optionally delete the latter."""
        file = self.get_file(file_id)
        if file is None:
            raise StoredFileNotFoundError()
        new_content = self.get_file(new_content_id)
        if new_content is None:
            raise StoredFileNotFoundError()
        if file.is_end_to_end_encrypted or new_content.is_end_to_end_encrypted:
            raise ReplaceE2EFileError()
        file = dataclasses.replace(
            file,
            name=new_content.name,
            size=new_content.size,
            sha1=new_content.sha1,
            content_type=new_content.content_type,
            aws_bucket=new_content.aws_bucket,
            size_bytes=new_content.size_bytes,
            is_encrypted=new_content.is_encrypted,
            is_end_to_end_encrypted=new_content.is_end_to_end_encrypted,
            decryption_key=new_content.decryption_key,
            nonce=new_content.nonce,
        )
        self.save(file)
        if delete:
            self.delete_file(new_content.id, False)
        return file

    def duplicate_file(
        self,
        file: FileRecord,
        parameters: int,
        new_name: str,
        request: UploadRequest,
    ) -> FileRecord:
        """Store and return a copy of file with the requested changes."""
        new_file = apply_duplicate_parameters(
            file,
            parameters,
            new_name,
            request,
            self._new_id(),
            self._hash_password(request.password),
        )
        self.add_hotlink(new_file)
        self.save(new_file)
        return new_file

    def delete_file(self, file_id: str, delete_source: bool) -> bool:
        """Expire a file; return False if the id is unknown.

        With delete_source, a clean-up runs and removes the content if no
        other file uses it.
        """
        if not file_id:
            return False
        item = self.metadata.get(file_id)
        if item is None:
            return False
        self.save(dataclasses.replace(item, expire_at=0, unlimited_time=False))
        self.downloading.discard(item.id)
        if delete_source:
            self.clean_up()
        return True

    def clean_up(self) -> None:
        """Remove expired files and content no longer referenced, old temp files and stale hotlinks."""
        while self._remove_expired():
            pass
        clean_old_temp_files(self.data_dir)
        for hotlink_id in list(self.hotlinks):
            if self.get_file_by_hotlink(hotlink_id) is None:
                self.hotlinks.pop(hotlink_id, None)

    def _remove_expired(self) -> bool:
        now = self._now()
        deleted = False
        for key, file in list(self.metadata.items()):
            exists = self._content_exists(file)
            expired = file.id not in self.downloading and is_expired_file(file, now)
            if exists and not expired:
                continue
            shared = any(
                other.id != file.id and other.sha1 == file.sha1
                for other in self.metadata.values()
            )
            if exists and not shared:
                self._delete_source(file)
            if file.hotlink_id:
                self.hotlinks.pop(file.hotlink_id, None)
            del self.metadata[key]
            deleted = True
        return deleted