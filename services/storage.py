"""
Storage Gateway

Uploads binary files (payment screenshots, invoices, shipping labels) and
returns a public URL. Uploading to an existing path overwrites it, so a
re-driven document task never leaves duplicates behind.
"""

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol

import config
from exceptions.document import StorageUploadException

logger = logging.getLogger(__name__)


class StorageGateway(Protocol):
    async def upload(self, file_bytes: bytes, content_type: str, destination_path: str) -> str:
        ...


class LocalStorageGateway:
    """
    Filesystem-backed gateway.

    Files land under root/<destination_path>; the returned URL is
    public_url/<destination_path> (served by a static file server or CDN).
    """

    def __init__(self, root: str | Path | None = None, public_url: str | None = None):
        self.root = Path(root if root is not None else config.STORAGE_ROOT)
        self.public_url = (public_url if public_url is not None else config.STORAGE_PUBLIC_URL).rstrip("/")

    def _resolve(self, destination_path: str) -> Path:
        relative = PurePosixPath(destination_path)
        if not destination_path or relative.is_absolute() or ".." in relative.parts:
            raise StorageUploadException(destination_path, "path must be relative and stay inside the storage root")
        return self.root.joinpath(*relative.parts)

    def _write(self, target: Path, file_bytes: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write to a temp file first so readers never see a half-written document
        tmp_target = target.with_name(target.name + ".tmp")
        tmp_target.write_bytes(file_bytes)
        tmp_target.replace(target)

    async def upload(self, file_bytes: bytes, content_type: str, destination_path: str) -> str:
        if not file_bytes:
            raise StorageUploadException(destination_path, "empty payload")
        target = self._resolve(destination_path)

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._write, target, file_bytes)
        except OSError as e:
            raise StorageUploadException(destination_path, str(e)) from e

        url = f"{self.public_url}/{destination_path}"
        logger.info(f"Uploaded {len(file_bytes)} bytes ({content_type}) to {destination_path}")
        return url


_gateway: StorageGateway | None = None


def get_storage_gateway() -> StorageGateway:
    global _gateway
    if _gateway is None:
        _gateway = LocalStorageGateway()
    return _gateway


def set_storage_gateway(gateway: StorageGateway | None) -> None:
    """Swap the process-wide gateway (e.g. an object store client); None restores the default."""
    global _gateway
    _gateway = gateway
