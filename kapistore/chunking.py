"""Parsing of chunked upload requests and storage of the chunk files."""

from __future__ import annotations

import io
import os
import re
import shutil
from dataclasses import dataclass
from typing import BinaryIO, Mapping, Sequence, Union
from urllib.parse import unquote_plus

Form = Union[Mapping[str, Union[str, Sequence[str]]], str, bytes]

_UUID_DISALLOWED = re.compile(r"[^a-zA-Z0-9-]")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_MIN_UUID_LENGTH = 10

_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ico": "image/vnd.microsoft.icon",
}
_DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ChunkingError(ValueError):
    """Raised when chunk data or upload form values are invalid."""


@dataclass
class ChunkInfo:
    """Information about one uploaded chunk."""

    total_filesize_bytes: int
    offset: int
    uuid: str


@dataclass
class FileHeader:
    """Information about an uploaded file."""

    filename: str
    content_type: str
    size: int


def _unescape(text: str) -> str:
    if _BAD_ESCAPE.search(text):
        raise ChunkingError(f"invalid URL escape in {text!r}")
    return unquote_plus(text)


def _parse_body(body: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in body.split("&"):
        if not pair:
            continue
        if ";" in pair:
            raise ChunkingError("invalid semicolon separator in query")
        key, _, value = pair.partition("=")
        values.setdefault(_unescape(key), _unescape(value))
    return values


def _form_values(form: Form) -> dict[str, str]:
    """Return the first value of every form field."""
    if isinstance(form, bytes):
        form = form.decode("utf-8", errors="replace")
    if isinstance(form, str):
        return _parse_body(form)
    values: dict[str, str] = {}
    for key, value in form.items():
        if isinstance(value, str):
            values[key] = value
        else:
            values[key] = next(iter(value), "")
    return values


def _parse_int(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ChunkingError(f"invalid integer: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ChunkingError(f"integer out of range: {text!r}")
    return value


def _parse_non_negative(text: str) -> int:
    value = _parse_int(text)
    if value < 0:
        raise ChunkingError("value cannot be negative")
    return value


def _extension(filename: str) -> str:
    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def _sanitise_uuid(uuid: str) -> str:
    return _UUID_DISALLOWED.sub("_", uuid)


def parse_chunk_info(form: Form, is_api_call: bool) -> ChunkInfo:
    """Read the chunk information from posted form values."""
    values = _form_values(form)
    if is_api_call:
        size_field, offset_field, uuid_field = "filesize", "offset", "uuid"
    else:
        size_field, offset_field, uuid_field = "dztotalfilesize", "dzchunkbyteoffset", "dzuuid"

    total = _parse_non_negative(values.get(size_field, ""))
    offset = _parse_non_negative(values.get(offset_field, ""))
    uuid = values.get(uuid_field, "")
    if len(uuid) < _MIN_UUID_LENGTH:
        raise ChunkingError("invalid uuid submitted, needs to be at least 10 characters long")
    return ChunkInfo(total_filesize_bytes=total, offset=offset, uuid=_sanitise_uuid(uuid))


def parse_content_type(form: Form) -> str:
    """Return the submitted content type, or one derived from the file name."""
    values = _form_values(form)
    content_type = values.get("filecontenttype", "")
    if content_type:
        return content_type
    extension = _extension(values.get("filename", "")).lower()
    return _CONTENT_TYPES.get(extension, _DEFAULT_CONTENT_TYPE)


def parse_file_header(form: Form) -> FileHeader:
    """Read the file information from posted form values."""
    values = _form_values(form)
    name = values.get("filename", "")
    if not name:
        raise ChunkingError("empty filename provided")
    content_type = parse_content_type(values)
    size_text = values.get("filesize", "")
    if not size_text:
        raise ChunkingError("empty size provided")
    size = _parse_non_negative(size_text)
    return FileHeader(filename=name, content_type=content_type, size=size)


def parse_multipart_header(filename: str, size: int, content_type: str) -> FileHeader:
    """Build a FileHeader from the parts of a multipart file header."""
    if not filename:
        raise ChunkingError("empty filename provided")
    if not content_type:
        raise ChunkingError("empty content-type provided")
    return FileHeader(filename=filename, content_type=content_type, size=size)


class ChunkStore:
    """Chunk files of uploads in progress, kept in a data directory."""

    def __init__(self, data_dir: str) -> None:
        self.data_dir = data_dir

    def chunk_file_path(self, chunk_id: str) -> str:
        """Return the path of the chunk file for an id."""
        return f"{self.data_dir}/chunk-{chunk_id}"

    def exists(self, chunk_id: str) -> bool:
        """Return True if a chunk file exists for the id."""
        return os.path.exists(self.chunk_file_path(chunk_id))

    def open_chunk(self, chunk_id: str) -> BinaryIO:
        """Open the chunk file for reading and writing."""
        if not chunk_id:
            raise ChunkingError("empty chunk id provided")
        if not self.exists(chunk_id):
            raise ChunkingError("chunk file does not exist")
        return open(self.chunk_file_path(chunk_id), "r+b")

    def new_chunk(self, content: BinaryIO | bytes, size: int, info: ChunkInfo) -> None:
        """Allocate the chunk file if needed and write the chunk at its offset."""
        self._allocate(info)
        self._write(content, size, info)

    def _allocate(self, info: ChunkInfo) -> None:
        if self.exists(info.uuid):
            return
        if info.total_filesize_bytes < 0:
            raise ChunkingError("value cannot be negative")
        fd = os.open(self.chunk_file_path(info.uuid), os.O_RDWR | os.O_CREAT, 0o600)
        try:
            os.ftruncate(fd, info.total_filesize_bytes)
        finally:
            os.close(fd)

    def _write(self, content: BinaryIO | bytes, size: int, info: ChunkInfo) -> None:
        if info.offset + size > info.total_filesize_bytes:
            raise ChunkingError("chunksize will be bigger than total filesize from this offset")
        if isinstance(content, (bytes, bytearray)):
            content = io.BytesIO(content)
        with self.open_chunk(info.uuid) as chunk_file:
            chunk_file.seek(info.offset)
            shutil.copyfileobj(content, chunk_file)