"""Readers and writers that move bytes in and out of blobs."""

from __future__ import annotations

import hashlib
import logging
import os
from abc import ABC, abstractmethod

from .blob import DummyBlob, FileSystemBlob
from .state import (
    Destination,
    DummyDestination,
    DummySource,
    FileDestination,
    FileSource,
    Source,
)

logger = logging.getLogger(__name__)


def _check_position(pos: int) -> int:
    if pos < 0:
        raise ValueError(f"negative blob position: {pos}")
    return pos


class BlobReader(ABC):
    """A source of bytes with a known size and a current position."""

    position: int

    @property
    @abstractmethod
    def size(self) -> int:
        """Total size of the blob in bytes."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; an empty result means the end."""

    @abstractmethod
    def seek(self, pos: int) -> None:
        """Move to an absolute position."""

    @abstractmethod
    def to_state(self) -> Source:
        """Describe the reader for a stored session state."""

    def close(self) -> None:
        """Release any resources held by the reader."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class BlobWriter(ABC):
    """A sink of bytes with a current position."""

    position: int

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes written."""

    @abstractmethod
    def seek(self, pos: int) -> None:
        """Move to an absolute position."""

    @abstractmethod
    def to_state(self) -> Destination:
        """Describe the writer for a stored session state."""

    def flush(self) -> None:
        """Push buffered bytes to the underlying storage."""

    def close(self) -> None:
        """Release any resources held by the writer."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class DummyBlobReader(BlobReader):
    """An endless stream of zero bytes.

    Every read is filled completely; the reported size follows the number
    of bytes handed out so far, while ``blob_size`` is what the state records.
    """

    def __init__(self, blob: DummyBlob, blob_size: int) -> None:
        self.blob = blob
        self.blob_size = _check_position(blob_size)
        self.position = 0

    @property
    def size(self) -> int:
        return self.position

    def read(self, size: int) -> bytes:
        chunk = bytes(size)
        self.position += size
        return chunk

    def seek(self, pos: int) -> None:
        self.position = _check_position(pos)

    def to_state(self) -> DummySource:
        return DummySource(size_bytes=self.blob_size)


class DummyBlobWriter(BlobWriter):
    """Accepts and discards everything written to it."""

    def __init__(self, blob: DummyBlob) -> None:
        self.blob = blob
        self.position = 0

    def write(self, data: bytes) -> int:
        written = len(data)
        self.position += written
        logger.debug(
            "DummyBlobWriter: write chunk of %d bytes, current_position is %d.",
            written,
            self.position,
        )
        return written

    def seek(self, pos: int) -> None:
        self.position = _check_position(pos)

    def flush(self) -> None:
        pass

    def to_state(self) -> DummyDestination:
        return DummyDestination()


class FileSystemBlobReader(BlobReader):
    """Reads a local file or block device."""

    def __init__(self, blob: FileSystemBlob) -> None:
        self.blob = blob
        self._file = open(blob.file_path, "rb")
        # Seeking to the end also gives the size of block devices.
        self.file_size = self._file.seek(0, os.SEEK_END)
        self._file.seek(0)
        self.position = 0
        self.hasher = hashlib.blake2b()

    @property
    def size(self) -> int:
        return self.file_size

    def read(self, size: int) -> bytes:
        chunk = self._file.read(size)
        self.position += len(chunk)
        return chunk

    def seek(self, pos: int) -> None:
        self.position = self._file.seek(_check_position(pos))

    def close(self) -> None:
        self._file.close()

    def to_state(self) -> FileSource:
        return FileSource(size_bytes=self.file_size, path=self.blob.file_path)


class FileSystemBlobWriter(BlobWriter):
    """Writes a local file, creating it or truncating what was there."""

    def __init__(self, blob: FileSystemBlob, content_mime_type: str, uploaded_bytes: int) -> None:
        self.blob = blob
        self.mime_type = content_mime_type
        self._file = open(blob.file_path, "wb")
        start = os.fstat(self._file.fileno()).st_size
        self.position = self._file.seek(start)

    def write(self, data: bytes) -> int:
        written = self._file.write(data)
        self.position += written
        return written

    def seek(self, pos: int) -> None:
        self.position = self._file.seek(_check_position(pos))

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()

    def to_state(self) -> FileDestination:
        return FileDestination(
            size_bytes=self.position,
            path=self.blob.file_path,
            mime=self.mime_type,
            uploaded_bytes=self.position,
        )