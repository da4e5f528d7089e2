import io
from datetime import datetime, timezone

import pytest

from azdext.azure.cloud import azure_china, azure_public
from azdext.azure.storage.blob_client import (
    AccountConfig,
    Blob,
    BlobClient,
    ContainerNotFoundError,
    blob_endpoint,
)


class FakeBlobService:
    def __init__(self, containers=(), blobs=None, fail=None):
        self.containers = list(containers)
        self.blobs = dict(blobs or {})
        self.created = []
        self.uploaded = {}
        self.deleted = []
        self.fail = fail or set()

    def _check(self, op):
        if op in self.fail:
            raise OSError(f"{op} broke")

    def list_containers(self):
        self._check("list_containers")
        return [{"name": name} for name in self.containers]

    def create_container(self, name):
        self._check("create_container")
        self.created.append(name)
        self.containers.append(name)

    def list_blobs(self, container):
        self._check("list_blobs")
        return self.blobs.get(container, [])

    def download(self, container, blob_path):
        self._check("download")
        return io.BytesIO(self.uploaded[(container, blob_path)])

    def upload(self, container, blob_path, reader):
        self._check("upload")
        self.uploaded[(container, blob_path)] = reader.read()

    def delete_blob(self, container, blob_path):
        self._check("delete_blob")
        self.deleted.append((container, blob_path))


def make_client(service, container="data"):
    return BlobClient(AccountConfig(account_name="acct", container_name=container), service)


def test_blob_endpoint_defaults_from_cloud():
    config = AccountConfig(account_name="acct", container_name="data")
    assert blob_endpoint(config, azure_public()) == "https://acct.blob.core.windows.net"
    assert config.endpoint == "https://acct.blob.core.windows.net"


def test_blob_endpoint_keeps_configured_endpoint():
    config = AccountConfig(account_name="acct", container_name="data", endpoint="https://custom")
    assert blob_endpoint(config, azure_china()) == "https://custom"


def test_blob_endpoint_uses_cloud_suffix():
    config = AccountConfig(account_name="acct", container_name="data")
    assert blob_endpoint(config, azure_china()).endswith(azure_china().storage_endpoint_suffix)


def test_items_converts_blobs():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    modified = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    service = FakeBlobService(
        containers=["data"],
        blobs={
            "data": [
                {
                    "name": "env/dev/config.json",
                    "properties": {"creationTime": created, "lastModified": modified},
                }
            ]
        },
    )
    items = make_client(service).items()
    assert items == [
        Blob(
            name="config.json",
            path="env/dev/config.json",
            creation_time=created,
            last_modified=modified,
        )
    ]
    assert service.created == []


def test_items_parses_string_timestamps():
    service = FakeBlobService(
        containers=["data"],
        blobs={
            "data": [
                {
                    "name": "a.txt",
                    "properties": {
                        "creationTime": "2024-01-02T03:04:05Z",
                        "lastModified": "2024-01-02T03:04:05Z",
                    },
                }
            ]
        },
    )
    (item,) = make_client(service).items()
    assert item.creation_time == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert item.last_modified == item.creation_time


def test_missing_container_is_created():
    service = FakeBlobService(containers=["other"])
    assert make_client(service).items() == []
    assert service.created == ["data"]


def test_upload_then_download_round_trip():
    service = FakeBlobService()
    client = make_client(service)
    client.upload("dir/file.bin", io.BytesIO(b"payload"))
    assert client.download("dir/file.bin").read() == b"payload"
    assert service.created == ["data"]


def test_delete_removes_blob():
    service = FakeBlobService(containers=["data"])
    make_client(service).delete("dir/file.bin")
    assert service.deleted == [("data", "dir/file.bin")]


def test_download_failure_is_wrapped():
    service = FakeBlobService(containers=["data"], fail={"download"})
    with pytest.raises(RuntimeError, match="failed to download blob 'x.txt'") as info:
        make_client(service).download("x.txt")
    assert isinstance(info.value.__cause__, OSError)


def test_upload_failure_is_wrapped():
    service = FakeBlobService(containers=["data"], fail={"upload"})
    with pytest.raises(RuntimeError, match="failed to upload blob 'x.txt'"):
        make_client(service).upload("x.txt", io.BytesIO(b""))


def test_delete_failure_is_wrapped():
    service = FakeBlobService(containers=["data"], fail={"delete_blob"})
    with pytest.raises(RuntimeError, match="failed to delete blob 'x.txt'"):
        make_client(service).delete("x.txt")


def test_create_container_failure_is_wrapped():
    service = FakeBlobService(fail={"create_container"})
    with pytest.raises(RuntimeError, match="failed to create container 'data'"):
        make_client(service).items()


def test_list_containers_failure_is_wrapped():
    service = FakeBlobService(fail={"list_containers"})
    with pytest.raises(RuntimeError, match="failed getting next page of containers"):
        make_client(service).delete("x")
    assert service.deleted == []


def test_list_blobs_failure_is_wrapped():
    service = FakeBlobService(containers=["data"], fail={"list_blobs"})
    with pytest.raises(RuntimeError, match="failed to get next page of blobs"):
        make_client(service).items()


def test_container_not_found_error_message():
    error = ContainerNotFoundError("data")
    assert str(error) == "container not found: data"
    assert isinstance(error, LookupError)