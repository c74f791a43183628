"""Descriptions of the blobs a session copies between storages."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DummyBlob:
    """A blob that lives nowhere: reads yield zeros, writes are discarded."""


@dataclass(frozen=True)
class FileSystemBlob:
    """A local file or block device."""

    file_path: str


@dataclass(frozen=True)
class GoogleCloudBlob:
    """An object in a Google Cloud Storage bucket."""

    bucket_name: str
    object_name: str


Blob = Union[DummyBlob, FileSystemBlob, GoogleCloudBlob]