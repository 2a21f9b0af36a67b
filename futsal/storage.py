"""Disk storage for uploaded images (payment proofs)."""

from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import UploadFile
from loguru import logger

from futsal import settings
from futsal.errors import BadRequest

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB
_CHUNK_SIZE = 64 * 1024

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

PAYMENT_PROOFS = "payment-proofs"


class LocalImageStorage:
    """Writes images below `root/<folder>/` and returns their public URL."""

    def __init__(self, root: str | Path | None = None, base_url: str | None = None):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")

    def public_url(self, folder: str, filename: str) -> str:
        return f"{self.base_url}/uploads/{folder}/{filename}"

    @staticmethod
    def validate(content_type: str | None, size: int) -> None:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise BadRequest("Unsupported file format. Use JPG, PNG or WEBP")
        if size == 0:
            raise BadRequest("Uploaded file is empty")
        if size > MAX_IMAGE_BYTES:
            raise BadRequest("Maximum file size is 5MB")

    @staticmethod
    async def _read_limited(upload: UploadFile) -> bytes:
        """Body of the upload; stops reading once past the size limit."""
        content = bytearray()
        while chunk := await upload.read(_CHUNK_SIZE):
            content.extend(chunk)
            if len(content) > MAX_IMAGE_BYTES:
                raise BadRequest("Maximum file size is 5MB")
        return bytes(content)

    async def save_image(self, upload: UploadFile, folder: str = PAYMENT_PROOFS) -> str:
        self.validate(upload.content_type, upload.size or 1)
        content = await self._read_limited(upload)
        self.validate(upload.content_type, len(content))

        suffix = Path(upload.filename or "").suffix.lower() or _EXTENSIONS[
            upload.content_type  # type: ignore[index]
        ]
        filename = f"{uuid.uuid4()}{suffix}"
        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(content)

        logger.debug("Stored upload {} ({} bytes)", filename, len(content))
        return self.public_url(folder, filename)


_storage = LocalImageStorage()


def get_storage() -> LocalImageStorage:
    return _storage
