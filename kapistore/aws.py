"""S3 access for builds without cloud storage support.

Every operation that needs S3 raises AwsNotSupportedError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, NoReturn, Optional

IS_INCLUDED_IN_BUILD = False
IS_MOCK_API = False

_ERROR_TEXT = "AWS not supported in this build"


class AwsNotSupportedError(RuntimeError):
    """Raised when S3 storage is requested but not supported."""

    def __init__(self, message: str = _ERROR_TEXT, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


@dataclass
class _Session:
    config: Any = None
    logged_in: bool = False


_session = _Session()


def _unsupported(operation: str, *targets: Any) -> NoReturn:
    """Raise the error for an S3 operation that this build cannot perform."""
    error = AwsNotSupportedError(operation=operation)
    error.targets = targets
    raise error


def init(config: Any) -> bool:
    """Read the credentials and return True if they are valid; never valid here."""
    _session.config = config
    try:
        _session.logged_in = is_valid_login(config)
    except AwsNotSupportedError:
        _session.logged_in = False
    return _session.logged_in


def is_available() -> bool:
    """Return True if valid credentials have been passed."""
    return _session.logged_in


def is_valid_login(config: Any) -> bool:
    """Check whether the given credentials are valid."""
    return _unsupported("login", config)


def add_bucket_name(file: Any) -> None:
    """Add the default bucket name to a file, if there is one."""
    bucket = get_default_bucket_name()
    if bucket:
        file.aws_bucket = bucket


def upload(source: BinaryIO, file: Any) -> str:
    """Upload a file to S3 and return its location."""
    return _unsupported("upload", source, file)


def download(writer: BinaryIO, file: Any) -> int:
    """Download a file from S3 and return its size."""
    return _unsupported("download", writer, file)


def log_out() -> None:
    """Reset the credentials."""
    _session.config = None
    _session.logged_in = False


def serve_file(file: Any, force_download: bool) -> bool:
    """Serve a file from S3; return True if the operation blocks."""
    return _unsupported("serve", file, force_download)


def file_exists(file: Any) -> tuple[bool, int]:
    """Return whether the object is stored in S3, and its size."""
    return _unsupported("exists", file)


def delete_object(file: Any) -> bool:
    """Delete a file from S3."""
    return _unsupported("delete", file)


def is_cors_correctly_set(bucket: str, url: str) -> bool:
    """Return True if the bucket's CORS rules allow downloads from url."""
    return _unsupported("cors", bucket, url)


def get_default_bucket_name() -> str:
    """Return the bucket where new files are stored."""
    return ""