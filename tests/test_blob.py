import dataclasses

import pytest

from contbackup.blob import DummyBlob, FileSystemBlob, GoogleCloudBlob


def test_file_system_blob_keeps_path():
    blob = FileSystemBlob("/var/tmp/image.png")
    assert blob.file_path == "/var/tmp/image.png"


def test_google_cloud_blob_keeps_names():
    blob = GoogleCloudBlob("backups", "debug/image-20250105-01.png")
    assert blob.bucket_name == "backups"
    assert blob.object_name == "debug/image-20250105-01.png"


def test_blobs_compare_by_value():
    assert FileSystemBlob("/a") == FileSystemBlob("/a")
    assert FileSystemBlob("/a") != FileSystemBlob("/b")
    assert GoogleCloudBlob("b", "o") == GoogleCloudBlob("b", "o")
    assert DummyBlob() == DummyBlob()


def test_blobs_are_hashable():
    blobs = {FileSystemBlob("/a"), FileSystemBlob("/a"), GoogleCloudBlob("b", "o")}
    assert len(blobs) == 2


def test_blobs_are_immutable():
    blob = FileSystemBlob("/a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        blob.file_path = "/b"
    assert blob.file_path == "/a"