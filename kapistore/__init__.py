"""Chunked uploads, file metadata with expiry and hotlinks, storage drivers and upload status tracking."""

__version__ = "0.1.0"