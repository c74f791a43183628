"""A copy session that moves a blob from a source storage to a destination."""

from __future__ import annotations

from .blob import DummyBlob, FileSystemBlob
from .state import (
    DummyDestination,
    DummySource,
    FileDestination,
    FileSource,
    GoogleCloudDestination,
    GoogleCloudSource,
    SessionState,
)
from .storage import (
    BlobReader,
    BlobWriter,
    DummyBlobReader,
    DummyBlobWriter,
    FileSystemBlobReader,
)

_U32_LIMIT = 2**32


class SessionCreateError(Exception):
    """Raised when a session cannot be built from a stored state."""


class SessionProcessError(Exception):
    """Raised when copying between the source and the destination fails."""


class SessionInternalError(SessionProcessError):
    """Raised when a session is driven with values it cannot work with."""


def _reader_from_state(source) -> BlobReader:
    if isinstance(source, DummySource):
        return DummyBlobReader(DummyBlob(), source.size_bytes)
    if isinstance(source, FileSource):
        try:
            return FileSystemBlobReader(FileSystemBlob(source.path))
        except OSError as exc:
            raise SessionCreateError(f"cannot open source {source.path!r}: {exc}") from exc
    if isinstance(source, GoogleCloudSource):
        raise SessionCreateError("resuming from a Google Cloud source is not supported")
    raise SessionCreateError(f"unknown source {source!r}")


def _writer_from_state(destination) -> BlobWriter:
    if isinstance(destination, DummyDestination):
        return DummyBlobWriter(DummyBlob())
    if isinstance(destination, FileDestination):
        raise SessionCreateError("resuming to a file destination is not supported")
    if isinstance(destination, GoogleCloudDestination):
        raise SessionCreateError("resuming to a Google Cloud destination is not supported")
    raise SessionCreateError(f"unknown destination {destination!r}")


class Session:
    """Copies everything from a reader into a writer, resuming at the writer's position."""

    def __init__(self, source_reader: BlobReader, destination_writer: BlobWriter) -> None:
        self.source_reader = source_reader
        self.destination_writer = destination_writer

    @classmethod
    def from_state(cls, state: SessionState) -> "Session":
        """Rebuild a session from a stored state."""
        reader = _reader_from_state(state.source)
        try:
            writer = _writer_from_state(state.destination)
        except SessionCreateError:
            reader.close()
            raise
        return cls(reader, writer)

    def process(self, buffer_size: int) -> None:
        """Copy the rest of the source into the destination in chunks of ``buffer_size``."""
        if not 0 <= buffer_size < _U32_LIMIT:
            raise SessionInternalError("Wrong buffer_size value")

        reader = self.source_reader
        writer = self.destination_writer
        source_len = reader.size
        start_pos = writer.position

        try:
            reader.seek(start_pos)
        except (OSError, ValueError) as exc:
            raise SessionProcessError(str(exc)) from exc

        total = start_pos
        while True:
            try:
                chunk = reader.read(buffer_size)
            except OSError as exc:
                raise SessionProcessError(str(exc)) from exc
            if not chunk:
                break

            try:
                written = writer.write(chunk)
            except OSError as exc:
                raise SessionProcessError(str(exc)) from exc

            if written != len(chunk):
                raise SessionProcessError(
                    "Write size is smaller than read size. Cannot continue."
                )

            total += written
            print(f"{total}/{source_len} (write chunk {written} bytes)")

    def to_state(self) -> SessionState:
        """Describe the session so that it can be stored and resumed."""
        return SessionState(
            source=self.source_reader.to_state(),
            destination=self.destination_writer.to_state(),
        )

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        try:
            self.source_reader.close()
        finally:
            self.destination_writer.close()