"""In-memory file storage with HMAC-signed download URLs."""

import hashlib
import hmac
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs, urlparse
from uuid import uuid4

from buildops.core.config import FileStorageConfig
from buildops.core.domain.ports import FileStorageService, StoredFile
from buildops.core.errors import NotFoundError, ValidationError
from buildops.core.logging import get_logger

logger = get_logger(__name__)


class InMemoryFileStorage(FileStorageService):
    """
    Keeps uploaded files in a dict.

    Signed URLs look like ``/files/{id}?expires=1700000000&signature=ab12...``
    where the signature is HMAC-SHA256 of ``"{id}:{expires}"`` keyed by the
    configured secret.
    """

    def __init__(
        self,
        config: FileStorageConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or FileStorageConfig()
        self._clock = clock
        self._files: dict[str, tuple[StoredFile, bytes]] = {}

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> StoredFile:
        if not content:
            raise ValidationError("File is empty", field="file")
        if len(content) > self.config.max_file_size_bytes:
            raise ValidationError(
                f"File exceeds {self.config.max_file_size_bytes} bytes", field="file"
            )

        stored = StoredFile(
            file_id=str(uuid4()),
            filename=filename,
            content_type=content_type,
            size_bytes=len(content),
            metadata=dict(metadata or {}),
        )
        self._files[stored.file_id] = (stored, bytes(content))

        logger.info(
            "File uploaded",
            file_id=stored.file_id,
            filename=filename,
            content_type=content_type,
            size_bytes=stored.size_bytes,
        )
        return stored

    async def download_file(self, file_id: str) -> bytes:
        if file_id not in self._files:
            raise NotFoundError("file", file_id)
        return self._files[file_id][1]

    async def get_file_metadata(self, file_id: str) -> StoredFile | None:
        entry = self._files.get(file_id)
        return entry[0] if entry else None

    async def delete_file(self, file_id: str) -> bool:
        removed = self._files.pop(file_id, None) is not None
        if removed:
            logger.info("File deleted", file_id=file_id)
        return removed

    async def generate_signed_url(self, file_id: str, expires_in_seconds: int = 3600) -> str:
        if file_id not in self._files:
            raise NotFoundError("file", file_id)
        expires = int(self._clock()) + expires_in_seconds
        signature = self._sign(file_id, expires)
        return f"{self.config.base_url}/{file_id}?expires={expires}&signature={signature}"

    def verify_signed_url(self, url: str) -> bool:
        """True when ``url`` was signed by this storage and has not expired."""
        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        try:
            expires = int(params["expires"][0])
            signature = params["signature"][0]
        except (KeyError, IndexError, ValueError):
            return False

        file_id = parsed.path.rsplit("/", 1)[-1]
        if expires < self._clock():
            return False
        return hmac.compare_digest(signature, self._sign(file_id, expires))

    def _sign(self, file_id: str, expires: int) -> str:
        return hmac.new(
            self.config.signing_secret.encode("utf-8"),
            f"{file_id}:{expires}".encode(),
            hashlib.sha256,
        ).hexdigest()

    def __len__(self) -> int:
        return len(self._files)


__all__ = ["InMemoryFileStorage"]
