"""Upload local files to a file share.

``client_factory(share_url)`` returns a share client with these methods:

- ``create_directory(path)`` creates a directory in the share;
- ``create_file(path, size)`` creates an empty file of ``size`` bytes;
- ``upload_file(path, stream)`` writes what ``stream`` holds to the file.

Share paths use ``/`` between their parts.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Iterator

_ALREADY_EXISTS = "ResourceAlreadyExists"


def _walk_files(root: str) -> Iterator[str]:
    """Every file under ``root`` in lexical order; ``root`` itself if it is a file."""
    if not os.path.isdir(root) or os.path.islink(root):
        os.lstat(root)
        yield root
        return
    with os.scandir(root) as scanned:
        entries = sorted(scanned, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(entry.path)
        else:
            yield entry.path


class FileShareService:
    """Uploads directory trees to file shares."""

    def __init__(self, client_factory: Callable[[str], Any]) -> None:
        self._client_factory = client_factory

    def upload_path(self, subscription_id: str, share_url: str, source: str) -> None:
        """Upload every file under ``source`` to the share, keeping relative paths."""
        prefix = source + os.sep
        for path in _walk_files(source):
            destination = path[len(prefix):] if path.startswith(prefix) else path
            try:
                self._upload_file(share_url, path, destination)
            except Exception as exc:
                raise RuntimeError(f"error uploading file to file share: {exc}") from exc

    def _upload_file(self, share_url: str, source: str, destination: str) -> None:
        client = self._client_factory(share_url)

        parts = destination.split(os.sep)
        directory = ""
        for part in parts[:-1]:
            if not part:
                continue
            directory = f"{directory}/{part}" if directory else part
            try:
                client.create_directory(directory)
            except Exception as exc:
                if _ALREADY_EXISTS not in str(exc):
                    raise

        file_name = parts[-1]
        share_path = f"{directory}/{file_name}" if directory else file_name
        with open(source, "rb") as stream:
            size = os.fstat(stream.fileno()).st_size
            client.create_file(share_path, size)
            client.upload_file(share_path, stream)