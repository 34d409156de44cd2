"""
Catalog API — Image Store (Object Storage Client)
=================================================

What:  Interface for the external image host plus the Cloudinary implementation.
Why:   The upload pipeline only needs "bytes in, public URL out". Keeping that
       behind an abstract class lets tests and other providers plug in
       without touching ProductService.
How:   CloudinaryImageStore performs a signed multipart POST to Cloudinary's
       REST upload endpoint with httpx and returns the `secure_url` field.

Cloudinary request signing:
    signature = sha1("folder=products&timestamp=1700000000" + api_secret)
    Parameters are sorted by key and joined with '&'; `file`, `api_key`,
    `resource_type` and `signature` itself are excluded from the signed string.
"""

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from catalog.config import settings
from catalog.exceptions import ImageUploadError

logger = logging.getLogger(__name__)


class ImageStore(ABC):
    """
    Contract:
        - upload() accepts raw bytes and returns a publicly reachable URL
        - every provider failure is raised as ImageUploadError
    """

    @abstractmethod
    async def upload(self, content: bytes, filename: str, content_type: str) -> str:
        ...

    @property
    def configured(self) -> bool:
        return True


class CloudinaryImageStore(ImageStore):
    """Cloudinary image host accessed through its REST upload API."""

    UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            transport: Override the httpx transport (tests pass httpx.MockTransport).
        """
        self.cloud_name = cloud_name if cloud_name is not None else settings.cloudinary_cloud_name
        self.api_key = api_key if api_key is not None else settings.cloudinary_api_key
        self.api_secret = api_secret if api_secret is not None else settings.cloudinary_api_secret
        self.folder = folder if folder is not None else settings.cloudinary_folder
        self.timeout = timeout or settings.upload_timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params: Dict[str, str]) -> str:
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] != "")
        return hashlib.sha1((to_sign + self.api_secret).encode("utf-8")).hexdigest()

    async def upload(self, content: bytes, filename: str, content_type: str) -> str:
        if not self.configured:
            raise ImageUploadError(
                message="Image storage is not configured",
                context={"provider": "cloudinary"},
            )

        params = {"timestamp": str(int(time.time()))}
        if self.folder:
            params["folder"] = self.folder
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
        files = {"file": (filename, content, content_type)}
        url = self.UPLOAD_URL.format(cloud_name=self.cloud_name)

        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error("Cloudinary upload transport error: %s", str(e))
            raise ImageUploadError(
                message=f"Image upload failed: {e}",
                context={"provider": "cloudinary", "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not 200 <= resp.status_code < 300:
            logger.error(
                "Cloudinary rejected upload of %s with %d after %.0fms: %s",
                filename,
                resp.status_code,
                duration_ms,
                resp.text[:200],
            )
            raise ImageUploadError(
                message=f"Image upload failed with status {resp.status_code}",
                context={"provider": "cloudinary", "status": resp.status_code},
            )

        try:
            secure_url = resp.json()["secure_url"]
        except (ValueError, KeyError, TypeError) as e:
            raise ImageUploadError(
                message="Image upload response did not include a URL",
                context={"provider": "cloudinary"},
            ) from e

        logger.info(
            "Uploaded %s (%d bytes) to Cloudinary in %.0fms",
            filename,
            len(content),
            duration_ms,
        )
        return secure_url


image_store = CloudinaryImageStore()


def get_image_store() -> ImageStore:
    """FastAPI dependency; overridden in tests with an in-memory fake."""
    return image_store
