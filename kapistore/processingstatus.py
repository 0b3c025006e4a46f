"""Processing stages of a completed chunked upload."""

from __future__ import annotations

from enum import IntEnum

from .pstatusdb import StatusStore, UploadStatus


class ProcessingStatus(IntEnum):
    """Stages an upload passes through after its last chunk arrives."""

    HASHING_OR_ENCRYPTING = 0
    UPLOADING = 1
    FINISHED = 2
    ERROR = 3


def set_status(
    store: StatusStore,
    chunk_id: str,
    status: int,
    file_id: str = "",
    error: BaseException | None = None,
) -> None:
    """Record the processing status of an upload."""
    store.set(
        UploadStatus(
            chunk_id=chunk_id,
            current_status=int(status),
            file_id=file_id,
            error_message=str(error) if error is not None else "",
        )
    )