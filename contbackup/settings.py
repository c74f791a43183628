"""Command-line settings: parse arguments into commands to run."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, Union
from urllib.parse import urlsplit

from .blob import DummyBlob, FileSystemBlob, GoogleCloudBlob

DEFAULT_BUFFER_SIZE = 8 * 1024 * 1024


class UsageError(ValueError):
    """Raised when the command line is not valid."""


@dataclass(frozen=True)
class DummySourceSpec:
    blob: DummyBlob
    blob_size: int


@dataclass(frozen=True)
class FileSourceSpec:
    blob: FileSystemBlob


@dataclass(frozen=True)
class GoogleCloudSourceSpec:
    blob: GoogleCloudBlob
    service_account_json_file: str


@dataclass(frozen=True)
class DummyDestinationSpec:
    blob: DummyBlob


@dataclass(frozen=True)
class FileDestinationSpec:
    blob: FileSystemBlob
    mime_type: str


@dataclass(frozen=True)
class GoogleCloudDestinationSpec:
    blob: GoogleCloudBlob
    mime_type: str
    service_account_json_file: str


SourceSpec = Union[DummySourceSpec, FileSourceSpec, GoogleCloudSourceSpec]
DestinationSpec = Union[DummyDestinationSpec, FileDestinationSpec, GoogleCloudDestinationSpec]


@dataclass(frozen=True)
class CopySessionCreate:
    buffer_size: int
    source: SourceSpec
    destination: DestinationSpec


@dataclass(frozen=True)
class CopySessionList:
    session_storage_url: Optional[str]


@dataclass(frozen=True)
class CopySessionResume:
    session_id: Optional[str]
    session_storage_url: Optional[str]


@dataclass(frozen=True)
class Nope:
    """A command that does nothing."""


Command = Union[CopySessionCreate, CopySessionList, CopySessionResume, Nope]


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


def _unsigned(bits: int):
    limit = 2**bits

    def convert(text: str) -> int:
        try:
            value = int(text, 10)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid digit found in {text!r}") from None
        if not 0 <= value < limit:
            raise argparse.ArgumentTypeError(f"{text} is not in 0..{limit - 1}")
        return value

    convert.__name__ = f"u{bits}"
    return convert


_SGC = (
    "source_google_cloud_bucket_name",
    "source_google_cloud_object_name",
    "source_google_cloud_mime_type",
    "source_google_cloud_service_account_json_file",
)
_DGC = (
    "destination_google_cloud_bucket_name",
    "destination_google_cloud_object_name",
    "destination_google_cloud_mime_type",
    "destination_google_cloud_service_account_json_file",
)


def _group_rules(group: tuple[str, ...], others: tuple[str, ...]):
    return {
        name: (others, tuple(n for n in group if n != name)) for name in group
    }


# Each option maps to (options it conflicts with, options it requires).
_CREATE_RULES: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "source_dummy_size": (("source_file",) + _SGC, ()),
    "source_file": (("source_dummy_size",) + _SGC, ()),
    **_group_rules(_SGC, ("source_dummy_size", "source_file")),
    "destination_dummy": (("destination_file",) + _DGC, ()),
    "destination_file": (("destination_dummy",) + _DGC, ()),
    "destination_file_mime_type": (
        ("destination_dummy", "destination_google_cloud_bucket_name"),
        ("destination_file",),
    ),
    **_group_rules(_DGC, ("destination_dummy", "destination_file")),
}


def _flag(dest: str) -> str:
    return "--" + dest.replace("_", "-")


def _given(ns: argparse.Namespace, dest: str) -> bool:
    value = getattr(ns, dest)
    return value is not None and value is not False


def _check_create_rules(ns: argparse.Namespace) -> None:
    for dest, (conflicts, requires) in _CREATE_RULES.items():
        if not _given(ns, dest):
            continue
        for other in conflicts:
            if _given(ns, other):
                raise UsageError(
                    f"the argument '{_flag(dest)}' cannot be used with '{_flag(other)}'"
                )
        for other in requires:
            if not _given(ns, other):
                raise UsageError(
                    f"the argument '{_flag(dest)}' requires '{_flag(other)}'"
                )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``continuously`` command."""
    parser = _Parser(
        prog="continuously",
        description="Copy blobs between storages and resume interrupted copies.",
        allow_abbrev=False,
    )
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    copy_session = commands.add_parser(
        "copy-session",
        help="Session to copy a blob between storages",
        allow_abbrev=False,
    )
    session_commands = copy_session.add_subparsers(
        dest="copy_session_command", required=True, metavar="COMMAND"
    )

    create = session_commands.add_parser(
        "create", help="Session to copy a blob between storages", allow_abbrev=False
    )
    create.add_argument("--buffer-size", type=_unsigned(32), default=DEFAULT_BUFFER_SIZE)
    create.add_argument("--session-storage-url")
    create.add_argument("--source-dummy-size", type=_unsigned(64))
    create.add_argument(
        "--source-file", help="Use local (or block device) file as source blob"
    )
    for dest in _SGC:
        create.add_argument(_flag(dest))
    create.add_argument("--destination-dummy", action="store_true")
    create.add_argument(
        "--destination-file", help="Use local (or block device) file as destination blob"
    )
    create.add_argument("--destination-file-mime-type")
    for dest in _DGC:
        create.add_argument(_flag(dest))

    listing = session_commands.add_parser("list", help="List sessions", allow_abbrev=False)
    listing.add_argument("--session-storage-url")

    resume = session_commands.add_parser("resume", help="Resume a session", allow_abbrev=False)
    resume.add_argument("--session-id")
    resume.add_argument("--session-storage-url")

    snapshot = commands.add_parser("snapshot", help="Manage snapshots", allow_abbrev=False)
    snapshot.add_argument(
        "-v", "--volume-group", required=True, help="Volume group of the logical volume"
    )
    snapshot.add_argument(
        "-l", "--logical-volume-name", required=True, help="Name of the logical volume"
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and validate the raw command-line options."""
    ns = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    if ns.command == "copy-session" and ns.copy_session_command == "create":
        _check_create_rules(ns)
    return ns


def _parse_url(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    try:
        parts = urlsplit(text)
    except ValueError as exc:
        raise UsageError(f"invalid URL {text!r}: {exc}") from exc
    if not parts.scheme:
        raise UsageError(f"invalid URL {text!r}: relative URL without a base")
    return text


def _source(ns: argparse.Namespace) -> SourceSpec:
    if ns.source_dummy_size is not None:
        return DummySourceSpec(blob=DummyBlob(), blob_size=ns.source_dummy_size)
    if ns.source_file is not None:
        return FileSourceSpec(blob=FileSystemBlob(ns.source_file))
    if ns.source_google_cloud_bucket_name is not None:
        return GoogleCloudSourceSpec(
            blob=GoogleCloudBlob(
                ns.source_google_cloud_bucket_name, ns.source_google_cloud_object_name
            ),
            service_account_json_file=ns.source_google_cloud_service_account_json_file,
        )
    raise UsageError("a source blob is required")


def _destination(ns: argparse.Namespace) -> DestinationSpec:
    if ns.destination_dummy:
        return DummyDestinationSpec(blob=DummyBlob())
    if ns.destination_file is not None:
        if ns.destination_file_mime_type is None:
            raise UsageError(
                "the argument '--destination-file' requires '--destination-file-mime-type'"
            )
        return FileDestinationSpec(
            blob=FileSystemBlob(ns.destination_file),
            mime_type=ns.destination_file_mime_type,
        )
    if ns.destination_google_cloud_bucket_name is not None:
        return GoogleCloudDestinationSpec(
            blob=GoogleCloudBlob(
                ns.destination_google_cloud_bucket_name,
                ns.destination_google_cloud_object_name,
            ),
            mime_type=ns.destination_google_cloud_mime_type,
            service_account_json_file=ns.destination_google_cloud_service_account_json_file,
        )
    raise UsageError("a destination blob is required")


def parse(argv: Optional[Sequence[str]] = None) -> Command:
    """Parse the command line into the command to run."""
    ns = parse_args(argv)
    if ns.command == "snapshot":
        return Nope()
    if ns.copy_session_command == "create":
        return CopySessionCreate(
            buffer_size=ns.buffer_size, source=_source(ns), destination=_destination(ns)
        )
    if ns.copy_session_command == "list":
        return CopySessionList(session_storage_url=_parse_url(ns.session_storage_url))
    return CopySessionResume(
        session_id=ns.session_id, session_storage_url=_parse_url(ns.session_storage_url)
    )


def print_usage_and_exit() -> None:
    """Print the help text and leave the process with a failure status."""
    try:
        build_parser().print_help()
    except OSError:
        pass
    sys.exit(255)