"""
Catalog API — Image Upload Pipeline
===================================

What:  Two-stage pipeline turning the `productImage` multipart field into a public URL.
Why:   ProductService needs a URL (or None) to store; everything between the
       raw upload and that URL lives here.
How:
    Stage 1, buffer():  read the whole file into memory (never to disk),
                        reject empty, oversized or non-image uploads.
    Stage 2, publish(): hand the buffer to the ImageStore and return its URL.

    ProductService runs the field validator between the two stages, so a
    payload with invalid fields never reaches the object store.

Validation order (cheap first):
    1. Content type allow-list, from the multipart part header
    2. Size, checked against the bytes actually read
    3. Content sniffing: libmagic reads the header bytes, so a renamed
       script declared as image/png is still rejected
"""

import logging
from dataclasses import dataclass
from typing import Optional

import magic
from fastapi import UploadFile

from catalog.config import settings
from catalog.exceptions import CatalogError, ImageUploadError, ValidationError
from catalog.services.image_store import ImageStore

logger = logging.getLogger(__name__)

IMAGE_FIELD = "productImage"

ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
}


@dataclass(frozen=True)
class BufferedImage:
    """An uploaded image held fully in memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class UploadService:
    """Stateless pipeline; limits come from settings unless overridden."""

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_content_type(self, content_type: Optional[str]) -> str:
        normalized = (content_type or "").split(";")[0].strip().lower()
        if normalized not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message=(
                    f"File type '{normalized or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
                ),
                field=IMAGE_FIELD,
                context={"content_type": normalized},
            )
        return normalized

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError(message="Uploaded image is empty", field=IMAGE_FIELD)
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field=IMAGE_FIELD,
                context={"max_size": self.max_file_size, "actual_size": size},
            )

    def validate_detected_type(self, content: bytes, filename: str) -> str:
        """
        Check the type libmagic detects from the file bytes.

        The part header is chosen by the client; the detected type is what
        gets forwarded to the image store.
        """
        try:
            detected = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise ImageUploadError(
                message="Could not verify the image type",
                context={"error": str(e)},
            ) from e

        if detected not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{detected}' is not supported. "
                    f"The file must be a valid image."
                ),
                field=IMAGE_FIELD,
                context={"detected_mime": detected},
            )
        return detected

    async def buffer(self, upload: Optional[UploadFile]) -> Optional[BufferedImage]:
        """
        Stage 1: read the upload into memory.

        Returns None when no file was sent. Browsers submit an empty part with
        an empty filename when the file input is left blank; that counts as
        no file too.
        """
        if upload is None or not upload.filename:
            return None

        try:
            content_type = self.validate_content_type(upload.content_type)
            content = await upload.read()
            self.validate_size(len(content))
            content_type = self.validate_detected_type(content, upload.filename)
        finally:
            await upload.close()

        logger.info(
            "Buffered upload: filename=%s, type=%s, size=%d bytes",
            upload.filename,
            content_type,
            len(content),
        )
        return BufferedImage(filename=upload.filename, content_type=content_type, content=content)

    async def publish(self, image: Optional[BufferedImage], store: ImageStore) -> Optional[str]:
        """
        Stage 2: push the buffer to the object store.

        Returns the public URL, or None when there is no image.

        Raises:
            ImageUploadError: the store failed; the request stops before persistence.
        """
        if image is None:
            return None
        try:
            return await store.upload(image.content, image.filename, image.content_type)
        except CatalogError:
            raise
        except Exception as e:
            logger.error("Unexpected image store error: %s", str(e), exc_info=True)
            raise ImageUploadError(
                message=f"Image upload failed: {e}",
                context={"error_type": type(e).__name__},
            ) from e


upload_service = UploadService()
