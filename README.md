# contbackup

`contbackup` copies a blob to a destination in chunks of a fixed size. A blob
can be a local file, a block device or a synthetic "dummy" stream. A copy is
described by a *session state*. You can save the state as JSON and load it
again later to rebuild the session.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install .[test]
pytest
```

## Modules

### `contbackup.blob`

These frozen dataclasses describe where data lives:

- `DummyBlob`
- `FileSystemBlob(file_path)`
- `GoogleCloudBlob(bucket_name, object_name)`

### `contbackup.storage`

Readers and writers for blobs. Every reader and writer has a `position`
attribute and a `seek(pos)` method, and works as a context manager that closes
it on exit. `to_state()` returns the state record that describes it.

- `BlobReader`: the abstract base of the readers. `read(size)` returns up to
  `size` bytes, and an empty result means the end. `size` is a property that
  gives the length of the blob.
- `BlobWriter`: the abstract base of the writers. `write(data)` returns the
  number of bytes written. Writers also have `flush()`.
- `FileSystemBlobReader(blob)`: opens the file for reading. It finds the size
  by seeking to the end, so block devices work too.
- `FileSystemBlobWriter(blob, content_mime_type, uploaded_bytes)`: creates the
  file. If the file already exists, it is truncated.
- `DummyBlobReader(blob, blob_size)`: returns zero bytes and never reaches an
  end. Its `size` is the number of bytes it has handed out so far. The state
  records `blob_size`.
- `DummyBlobWriter(blob)`: discards everything written to it. It counts the
  bytes in `position` and logs each chunk at debug level.

A negative position passed to `seek` raises `ValueError`.

### `contbackup.state`

The records are frozen dataclasses:

- Source records: `DummySource`, `FileSource`, `GoogleCloudSource`.
- Destination records: `DummyDestination`, `FileDestination`,
  `GoogleCloudDestination`.

Each record has a `kind` (`dummy`, `file` or `googleCloud`) and a `to_dict()`
method. `source_from_dict(data)` and `destination_from_dict(data)` decode
records.

`SessionState(source, destination)` holds one of each. It provides:

- `to_dict()` / `from_dict(data)`
- `to_json()` / `from_json(text)`
- `print()`, which writes the JSON to standard output

Malformed input raises `StateError`. This covers bad JSON, an unknown kind, a
missing field, a field of the wrong type, or a byte count outside the unsigned
64-bit range. `StateError` is a `ValueError`.

The JSON of a state looks like this:

```json
{
  "source": {
    "kind": "file",
    "fileSizeBytes": 1048576,
    "filePath": "/var/tmp/image.png"
  },
  "destination": {
    "kind": "dummy"
  }
}
```

### `contbackup.session`

`Session(source_reader, destination_writer)` copies bytes from a reader to a
writer.

- `process(buffer_size)` seeks the reader to the writer's current position.
  It then copies chunk by chunk until the reader returns no more data, and
  prints a `copied/total (write chunk N bytes)` line after each chunk.
- If a read, write or seek fails, or a write is short, `process` raises
  `SessionProcessError`.
- If `buffer_size` is outside the unsigned 32-bit range, `process` raises
  `SessionInternalError`, which is a subclass of `SessionProcessError`.
- `to_state()` returns the `SessionState` of the session.
- `Session.from_state(state)` rebuilds a session from a saved state. It
  supports a dummy or file source together with a dummy destination. Any
  other combination raises `SessionCreateError`, and so does a source file
  that cannot be opened.
- When used as a context manager, a session closes its reader and writer on
  exit.

Example:

```python
from contbackup.blob import DummyBlob, FileSystemBlob
from contbackup.session import Session
from contbackup.storage import DummyBlobWriter, FileSystemBlobReader

reader = FileSystemBlobReader(FileSystemBlob("/var/tmp/image.png"))
writer = DummyBlobWriter(DummyBlob())
with Session(reader, writer) as session:
    session.process(8 * 1024 * 1024)     # 8 MiB chunks
    print(session.to_state().to_json())
```

A dummy source never runs out of data, so `process` on a session that reads
from one does not stop on its own.

### `contbackup.settings`

This module parses the arguments of the `copy-session` and `snapshot`
commands into command objects. Use `parse(argv)`. When `argv` is omitted, it
reads `sys.argv[1:]`.

```python
from contbackup.settings import parse

command = parse([
    "copy-session", "create",
    "--source-file=/var/tmp/image.png",
    "--destination-dummy",
])
```

`parse` returns one of these:

- `CopySessionCreate(buffer_size, source, destination)`. The source is a
  `DummySourceSpec`, `FileSourceSpec` or `GoogleCloudSourceSpec`. The
  destination is a `DummyDestinationSpec`, `FileDestinationSpec` or
  `GoogleCloudDestinationSpec`. `--buffer-size` defaults to 8388608 bytes.
  `--destination-file` needs `--destination-file-mime-type`. The Google Cloud
  options for one side must be given all together.
- `CopySessionList(session_storage_url)`
- `CopySessionResume(session_id, session_storage_url)`
- `Nope`, for `snapshot`. That command requires `-v/--volume-group` and
  `-l/--logical-volume-name`.

`parse` raises `UsageError` in these cases:

- conflicting options
- a missing required option
- a value out of range
- a session storage URL without a scheme

`parse_args(argv)` returns the validated `argparse.Namespace`, and
`build_parser()` returns the parser itself. `print_usage_and_exit()` prints
the help text and exits with status 255.

## What the package does not do

- It installs no command-line program. `contbackup.settings` only turns
  arguments into command objects and does not run them.
- It cannot read from or write to Google Cloud Storage. `GoogleCloudBlob` and
  the Google Cloud state records only describe such objects.
- It does not store or list sessions. Saving and loading state JSON is up to
  the caller.
- It does not manage volume snapshots.