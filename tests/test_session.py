import pytest

from contbackup.blob import DummyBlob, FileSystemBlob
from contbackup.session import (
    Session,
    SessionCreateError,
    SessionInternalError,
    SessionProcessError,
)
from contbackup.state import (
    DummyDestination,
    DummySource,
    FileDestination,
    FileSource,
    GoogleCloudDestination,
    GoogleCloudSource,
    SessionState,
)
from contbackup.storage import (
    BlobReader,
    BlobWriter,
    DummyBlobReader,
    DummyBlobWriter,
    FileSystemBlobReader,
    FileSystemBlobWriter,
)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "source.bin"
    path.write_bytes(bytes(range(10)))
    return path


class _ShortWriter(BlobWriter):
    def __init__(self):
        self.position = 0

    def write(self, data):
        return max(len(data) - 1, 0)

    def seek(self, pos):
        self.position = pos

    def to_state(self):
        return DummyDestination()


class _FailingReader(BlobReader):
    def __init__(self):
        self.position = 0

    @property
    def size(self):
        return 5

    def read(self, size):
        raise OSError("disk on fire")

    def seek(self, pos):
        self.position = pos

    def to_state(self):
        return DummySource(size_bytes=5)


def test_from_state_file_to_dummy_copies_everything(source_file, capsys):
    state = SessionState(
        source=FileSource(size_bytes=10, path=str(source_file)),
        destination=DummyDestination(),
    )
    with Session.from_state(state) as session:
        session.process(4)
        assert session.destination_writer.position == 10
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert lines[-1] == "10/10 (write chunk 2 bytes)"


def test_file_to_file_copy_preserves_content(source_file, tmp_path, capsys):
    target = tmp_path / "target.bin"
    reader = FileSystemBlobReader(FileSystemBlob(str(source_file)))
    writer = FileSystemBlobWriter(FileSystemBlob(str(target)), "application/octet-stream", 0)
    with Session(reader, writer) as session:
        session.process(3)
    assert target.read_bytes() == source_file.read_bytes()


def test_to_state_describes_both_ends(source_file, tmp_path, capsys):
    target = tmp_path / "target.bin"
    reader = FileSystemBlobReader(FileSystemBlob(str(source_file)))
    writer = FileSystemBlobWriter(FileSystemBlob(str(target)), "image/png", 0)
    with Session(reader, writer) as session:
        session.process(1024)
        state = session.to_state()
    assert state.source == FileSource(size_bytes=10, path=str(source_file))
    assert state.destination == FileDestination(
        size_bytes=10, path=str(target), mime="image/png", uploaded_bytes=10
    )


def test_state_round_trips_through_json(source_file):
    state = SessionState(
        source=FileSource(size_bytes=10, path=str(source_file)),
        destination=DummyDestination(),
    )
    with Session.from_state(state) as session:
        restored = SessionState.from_json(session.to_state().to_json())
    assert restored == state


def test_from_state_dummy_source_keeps_size():
    state = SessionState(source=DummySource(size_bytes=4096), destination=DummyDestination())
    session = Session.from_state(state)
    assert session.to_state() == state


def test_resume_starts_at_writer_position(source_file, capsys):
    reader = FileSystemBlobReader(FileSystemBlob(str(source_file)))
    writer = DummyBlobWriter(DummyBlob())
    writer.seek(3)
    with Session(reader, writer) as session:
        session.process(100)
        assert session.destination_writer.position == 10
        assert session.source_reader.position == 10
    assert capsys.readouterr().out.splitlines() == ["10/10 (write chunk 7 bytes)"]


@pytest.mark.parametrize(
    "source",
    [
        GoogleCloudSource(
            bucket_name="backups",
            object_name="a.png",
            size_bytes=1,
            mime="image/png",
            session_url="https://storage.example.com/upload",
            uploaded_bytes=0,
        ),
    ],
)
def test_from_state_google_cloud_source_fails(source):
    state = SessionState(source=source, destination=DummyDestination())
    with pytest.raises(SessionCreateError):
        Session.from_state(state)


@pytest.mark.parametrize(
    "destination",
    [
        FileDestination(size_bytes=1, path="/tmp/out.bin", mime="image/png", uploaded_bytes=0),
        GoogleCloudDestination(
            bucket_name="backups",
            object_name="a.png",
            size_bytes=1,
            mime="image/png",
            session_url="https://storage.example.com/upload",
            uploaded_bytes=0,
        ),
    ],
)
def test_from_state_unsupported_destination_fails(destination):
    state = SessionState(source=DummySource(size_bytes=1), destination=destination)
    with pytest.raises(SessionCreateError):
        Session.from_state(state)


def test_from_state_missing_source_file(tmp_path):
    state = SessionState(
        source=FileSource(size_bytes=1, path=str(tmp_path / "missing.bin")),
        destination=DummyDestination(),
    )
    with pytest.raises(SessionCreateError):
        Session.from_state(state)


@pytest.mark.parametrize("buffer_size", [-1, 2**32])
def test_process_rejects_bad_buffer_size(buffer_size):
    session = Session(DummyBlobReader(DummyBlob(), 10), DummyBlobWriter(DummyBlob()))
    with pytest.raises(SessionInternalError, match="Wrong buffer_size value"):
        session.process(buffer_size)


def test_internal_error_is_a_process_error():
    session = Session(DummyBlobReader(DummyBlob(), 10), DummyBlobWriter(DummyBlob()))
    with pytest.raises(SessionProcessError):
        session.process(-5)


def test_process_short_write_fails(source_file):
    reader = FileSystemBlobReader(FileSystemBlob(str(source_file)))
    with Session(reader, _ShortWriter()) as session:
        with pytest.raises(SessionProcessError, match="Write size is smaller"):
            session.process(4)


def test_process_read_failure_is_wrapped():
    session = Session(_FailingReader(), DummyBlobWriter(DummyBlob()))
    with pytest.raises(SessionProcessError, match="disk on fire"):
        session.process(4)


def test_process_empty_source_writes_nothing(tmp_path, capsys):
    empty = tmp_path / "empty.bin"
    empty.write_bytes(b"")
    reader = FileSystemBlobReader(FileSystemBlob(str(empty)))
    with Session(reader, DummyBlobWriter(DummyBlob())) as session:
        session.process(8)
        assert session.destination_writer.position == 0
    assert capsys.readouterr().out == ""