"""Serializable state of a copy session, so that it can be resumed later."""

import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Union

_U64_LIMIT = 2**64


class StateError(ValueError):
    """Raised when a stored session state cannot be decoded."""


def _key(name: str) -> Any:
    return field(metadata={"key": name})


def _record_to_dict(record: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"kind": record.kind}
    for f in fields(record):
        out[f.metadata["key"]] = getattr(record, f.name)
    return out


def _check_value(key: str, value: Any, expected: type) -> Any:
    if expected is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise StateError(f"field {key!r} must be an integer, got {value!r}")
        if not 0 <= value < _U64_LIMIT:
            raise StateError(f"field {key!r} is out of range: {value}")
    elif not isinstance(value, expected):
        raise StateError(f"field {key!r} must be a string, got {value!r}")
    return value


def _record_from_dict(cls: type, data: Mapping[str, Any]) -> Any:
    kwargs = {}
    for f in fields(cls):
        key = f.metadata["key"]
        if key not in data:
            raise StateError(f"missing field {key!r} for kind {cls.kind!r}")
        kwargs[f.name] = _check_value(key, data[key], f.type)
    return cls(**kwargs)


@dataclass(frozen=True)
class DummySource:
    kind: ClassVar[str] = "dummy"
    size_bytes: int = _key("dummySizeBytes")

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class FileSource:
    kind: ClassVar[str] = "file"
    size_bytes: int = _key("fileSizeBytes")
    path: str = _key("filePath")

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class GoogleCloudSource:
    kind: ClassVar[str] = "googleCloud"
    bucket_name: str = _key("googleCloudBucketName")
    object_name: str = _key("googleCloudObjectName")
    size_bytes: int = _key("googleCloudSizeBytes")
    mime: str = _key("googleCloudMimeType")
    session_url: str = _key("googleCloudSessionUrl")
    uploaded_bytes: int = _key("googleCloudUploadedBytes")

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class DummyDestination:
    kind: ClassVar[str] = "dummy"

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class FileDestination:
    kind: ClassVar[str] = "file"
    size_bytes: int = _key("fileTotalBytes")
    path: str = _key("filePath")
    mime: str = _key("fileMimeType")
    uploaded_bytes: int = _key("fileUploadedBytes")

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


@dataclass(frozen=True)
class GoogleCloudDestination:
    kind: ClassVar[str] = "googleCloud"
    bucket_name: str = _key("googleCloudBucketName")
    object_name: str = _key("googleCloudObjectName")
    size_bytes: int = _key("googleCloudTotalBytes")
    mime: str = _key("googleCloudMimeType")
    session_url: str = _key("googleCloudSessionUrl")
    uploaded_bytes: int = _key("googleCloudUploadedBytes")

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)


Source = Union[DummySource, FileSource, GoogleCloudSource]
Destination = Union[DummyDestination, FileDestination, GoogleCloudDestination]

_SOURCE_KINDS = {cls.kind: cls for cls in (DummySource, FileSource, GoogleCloudSource)}
_DESTINATION_KINDS = {
    cls.kind: cls for cls in (DummyDestination, FileDestination, GoogleCloudDestination)
}


def _from_tagged(kinds: Mapping[str, type], role: str, data: Any) -> Any:
    if not isinstance(data, Mapping):
        raise StateError(f"{role} must be an object, got {type(data).__name__}")
    kind = data.get("kind")
    cls = kinds.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise StateError(f"unknown {role} kind {kind!r}")
    return _record_from_dict(cls, data)


def source_from_dict(data: Any) -> Source:
    """Decode a source description tagged by its ``kind`` key."""
    return _from_tagged(_SOURCE_KINDS, "source", data)


def destination_from_dict(data: Any) -> Destination:
    """Decode a destination description tagged by its ``kind`` key."""
    return _from_tagged(_DESTINATION_KINDS, "destination", data)


@dataclass(frozen=True)
class SessionState:
    """Where a session reads from and where it writes to, with progress."""

    source: Source
    destination: Destination

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source.to_dict(), "destination": self.destination.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> "SessionState":
        if not isinstance(data, Mapping):
            raise StateError("session state must be an object")
        for key in ("source", "destination"):
            if key not in data:
                raise StateError(f"missing field {key!r}")
        return cls(
            source=source_from_dict(data["source"]),
            destination=destination_from_dict(data["destination"]),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> "SessionState":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StateError(f"invalid session state JSON: {exc}") from exc
        return cls.from_dict(data)

    def print(self) -> None:
        """Write the state as pretty JSON, one document per line, to standard output."""
        stream = sys.stdout
        stream.write(f"{self.to_json()}\n")
        stream.flush()