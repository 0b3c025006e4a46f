# kapistore

The storage layer of a self-hosted file sharing service. Uploads arrive in
chunks and are written into a pre-allocated file. File metadata can expire by
date or by download count. Content is stored under its SHA-1 hash, so several
records can share one file. Images can get hotlinks. Expired entries, and
content no longer referenced, are cleaned up.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `kapistore.chunking`
  - `parse_chunk_info(form, is_api_call)` reads form values into a `ChunkInfo`.
    The form may be a mapping or a URL-encoded body. Without `is_api_call` it
    reads the fields `dztotalfilesize`, `dzchunkbyteoffset` and `dzuuid`; with
    it, `filesize`, `offset` and `uuid`. The uuid must be at least 10
    characters long. Characters other than letters, digits and `-` in the uuid
    are replaced by `_`.
  - `parse_file_header(form)` reads a `FileHeader`.
  - `parse_content_type(form)` returns `filecontenttype` if it is set. If not,
    it guesses an image type from the file name's extension, and falls back to
    `application/octet-stream`.
  - `parse_multipart_header(filename, size, content_type)` builds a
    `FileHeader` from the parts of a multipart header.
  - `ChunkStore(data_dir)` keeps chunk files named `chunk-<uuid>`. Its method
    `new_chunk(content, size, info)` allocates the file at its full size and
    writes the chunk at its offset.
  - Invalid input raises `ChunkingError`.
- `kapistore.fileinfo`
  - `FileRecord` holds the metadata of a file. `UploadRequest` holds the
    settings chosen for an upload.
  - `Param` is a flag set. `apply_duplicate_parameters` uses it to decide which
    settings a copy of a file takes over.
  - `is_expired_file`, `format_timestamp`, `get_file_extension`,
    `is_picture_file`, `is_able_hotlink` and `is_change_requested` are the rules
    that apply to metadata.
- `kapistore.fileserving`
  - `FileStore(data_dir, id_length=20, password_salt="")` keeps file metadata
    and hotlinks in memory.
  - `get_file` returns a record only while it is unexpired and its content
    exists in `data_dir`. Otherwise it returns `None`.
  - The store also offers `get_file_by_hotlink`, `add_hotlink`,
    `upload_counts`, `replace_file`, `duplicate_file`, `delete_file` and
    `clean_up`.
  - `clean_up` removes expired records and content that no other record uses.
    It also removes stale hotlinks and `upload*` and `chunk-*` files older than
    24 hours. Ids in `downloading` are spared.
  - The module-level helpers are `hash_file`, `is_allowed_file_size`,
    `is_old_temp_file` and `clean_old_temp_files`.
- `kapistore.localstorage` and `kapistore.s3filesystem` are storage drivers
  that implement `kapistore.interfaces.StorageSystem`.
  `kapistore.filesystem.StorageRegistry` holds the drivers. Its `active`
  attribute is the driver in use.
- `kapistore.pstatusdb` and `kapistore.processingstatus`
  - `StatusStore` keeps the `UploadStatus` of each upload for 24 hours.
  - A status never moves back to an earlier stage.
  - `set_status(store, chunk_id, status, file_id, error)` records a
    `ProcessingStatus` stage.
- `kapistore.aws` reports that S3 is not supported.
  - `init` and `is_available` return `False`.
  - `get_default_bucket_name` returns an empty string.
  - Every other S3 operation raises `AwsNotSupportedError`.

## Example

```python
from kapistore.chunking import ChunkStore, parse_chunk_info
from kapistore.processingstatus import ProcessingStatus, set_status
from kapistore.pstatusdb import StatusStore

chunks = ChunkStore("data")
info = parse_chunk_info(
    {"dztotalfilesize": "22", "dzchunkbyteoffset": "0", "dzuuid": "upload-0000000001"},
    False,
)
with open("part.bin", "rb") as content:
    chunks.new_chunk(content, 22, info)

statuses = StatusStore(gc_interval=None)
set_status(statuses, info.uuid, ProcessingStatus.FINISHED, file_id="abc")
print([s.current_status for s in statuses.get_all()])
```

## What it does not do

- There is no HTTP server, no request handling and no serving of file
  downloads. Callers pass form values in and get data back.
- `FileStore` keeps metadata and hotlinks in memory only. Nothing is written
  to a database.
- Nothing turns a finished chunk file into a stored file. Hashing, moving it
  into place with a driver and saving the record are left to the caller.
- File contents are not encrypted or decrypted. `FileRecord` only records
  whether a file is encrypted.
- S3 storage is not available. The S3 driver can be configured, but every
  call that would reach S3 raises `AwsNotSupportedError`. `StorageRegistry.set_aws`
  leaves the active driver unchanged.
- There is no command-line program.