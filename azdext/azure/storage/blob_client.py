"""Manage the blobs of one storage account container.

``client`` is a blob service client with these methods:

- ``list_containers()`` yields containers as dicts holding a ``name``;
- ``create_container(name)`` creates a container;
- ``list_blobs(container)`` yields blobs as dicts holding a ``name`` and
  ``properties`` with ``creationTime`` and ``lastModified``;
- ``download(container, blob_path)`` returns a readable binary stream;
- ``upload(container, blob_path, reader)`` stores what ``reader`` holds;
- ``delete_blob(container, blob_path)`` removes a blob.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Optional

from azdext.azure.cloud import Cloud
from azdext.azure.standard_deployments import _parse_timestamp


@dataclass
class AccountConfig:
    """How to reach a storage account and the container to use."""

    account_name: str
    container_name: str
    endpoint: str = ""


class ContainerNotFoundError(LookupError):
    """Raised when a storage container cannot be found."""

    def __init__(self, container_name: str = "") -> None:
        message = "container not found"
        if container_name:
            message = f"{message}: {container_name}"
        super().__init__(message)
        self.container_name = container_name


@dataclass
class Blob:
    """A blob within a storage account container."""

    name: str
    path: str
    creation_time: Optional[datetime] = None
    last_modified: Optional[datetime] = None


def _base_name(path: str) -> str:
    trimmed = path.rstrip("/")
    if not trimmed:
        return "/" if path else "."
    return trimmed.rsplit("/", 1)[-1]


def blob_endpoint(account_config: AccountConfig, cloud: Cloud) -> str:
    """The blob endpoint of the account.

    When the configuration names no endpoint, the cloud's default one is
    stored in it and returned.
    """
    if not account_config.endpoint:
        account_config.endpoint = (
            f"https://{account_config.account_name}.blob.{cloud.storage_endpoint_suffix}"
        )
    return account_config.endpoint


class BlobClient:
    """Lists, downloads, uploads and deletes blobs of the configured container.

    The container is created on first use when it does not exist.
    """

    def __init__(self, config: AccountConfig, client: Any) -> None:
        self._config = config
        self._client = client

    @property
    def config(self) -> AccountConfig:
        return self._config

    def items(self) -> list[Blob]:
        """The blobs in the container."""
        self._ensure_container_exists()
        container = self._config.container_name
        try:
            listed = list(self._client.list_blobs(container))
        except Exception as exc:
            raise RuntimeError(f"failed to get next page of blobs, {exc}") from exc

        blobs: list[Blob] = []
        for item in listed:
            path = item["name"]
            properties = item.get("properties") or {}
            blobs.append(
                Blob(
                    name=_base_name(path),
                    path=path,
                    creation_time=_parse_timestamp(properties.get("creationTime")),
                    last_modified=_parse_timestamp(properties.get("lastModified")),
                )
            )
        return blobs

    def download(self, blob_path: str) -> BinaryIO:
        """A readable stream of the blob's content."""
        self._ensure_container_exists()
        try:
            return self._client.download(self._config.container_name, blob_path)
        except Exception as exc:
            raise RuntimeError(f"failed to download blob '{blob_path}', {exc}") from exc

    def upload(self, blob_path: str, reader: BinaryIO) -> None:
        """Store what ``reader`` holds as the blob at ``blob_path``."""
        self._ensure_container_exists()
        try:
            self._client.upload(self._config.container_name, blob_path, reader)
        except Exception as exc:
            raise RuntimeError(f"failed to upload blob '{blob_path}', {exc}") from exc

    def delete(self, blob_path: str) -> None:
        """Remove the blob at ``blob_path``."""
        self._ensure_container_exists()
        try:
            self._client.delete_blob(self._config.container_name, blob_path)
        except Exception as exc:
            raise RuntimeError(f"failed to delete blob '{blob_path}', {exc}") from exc

    def _ensure_container_exists(self) -> None:
        container = self._config.container_name
        try:
            exists = any(
                item.get("name") == container for item in self._client.list_containers()
            )
        except Exception as exc:
            raise RuntimeError(f"failed getting next page of containers: {exc}") from exc

        if exists:
            return
        try:
            self._client.create_container(container)
        except Exception as exc:
            raise RuntimeError(f"failed to create container '{container}', {exc}") from exc