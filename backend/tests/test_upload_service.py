"""
Catalog API — Upload Pipeline Unit Tests
========================================

What:  Tests for UploadService: buffering, content type and size checks, publishing.
How:   Real starlette UploadFile objects over BytesIO; the store is an AsyncMock.
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from catalog.exceptions import ImageUploadError, ValidationError
from catalog.services.upload_service import BufferedImage, UploadService


def make_upload(content: bytes, filename: str = "photo.png", content_type: str = "image/png"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestValidation:

    def setup_method(self):
        self.service = UploadService(max_file_size=1024)

    @pytest.mark.parametrize(
        "content_type", ["image/png", "image/jpeg", "image/gif", "image/webp", "IMAGE/PNG"]
    )
    def test_allowed_content_types(self, content_type):
        assert self.service.validate_content_type(content_type) == content_type.lower()

    def test_content_type_parameters_ignored(self):
        assert self.service.validate_content_type("image/jpeg; charset=binary") == "image/jpeg"

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", "", None])
    def test_rejected_content_types(self, content_type):
        with pytest.raises(ValidationError, match="not supported") as exc_info:
            self.service.validate_content_type(content_type)
        assert exc_info.value.errors[0]["field"] == "productImage"

    def test_size_at_limit_passes(self):
        self.service.validate_size(1024)

    def test_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(1025)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0)


class TestBuffer:

    def setup_method(self):
        self.service = UploadService(max_file_size=1024)

    @pytest.mark.asyncio
    async def test_no_upload_returns_none(self):
        assert await self.service.buffer(None) is None

    @pytest.mark.asyncio
    async def test_blank_filename_counts_as_no_upload(self):
        assert await self.service.buffer(make_upload(b"", filename="")) is None

    @pytest.mark.asyncio
    async def test_buffers_content(self, sample_image_bytes):
        image = await self.service.buffer(make_upload(sample_image_bytes))

        assert image == BufferedImage(
            filename="photo.png", content_type="image/png", content=sample_image_bytes
        )
        assert image.size == len(sample_image_bytes)

    @pytest.mark.asyncio
    async def test_oversized_upload_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            await self.service.buffer(make_upload(b"x" * 2048))

    @pytest.mark.asyncio
    async def test_script_declared_as_png_rejected(self):
        upload = make_upload(b"#!/bin/sh\nrm -rf /\n", filename="evil.png")

        with pytest.raises(ValidationError, match="content type") as exc_info:
            await self.service.buffer(upload)
        assert exc_info.value.errors[0]["field"] == "productImage"

    @pytest.mark.asyncio
    async def test_detected_type_replaces_declared_type(self, sample_image_bytes):
        upload = make_upload(sample_image_bytes, filename="photo.jpg", content_type="image/jpeg")

        image = await self.service.buffer(upload)

        assert image.content_type == "image/png"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected_before_reading(self):
        upload = make_upload(b"%PDF-1.4", filename="doc.pdf", content_type="application/pdf")
        upload.read = AsyncMock()

        with pytest.raises(ValidationError):
            await self.service.buffer(upload)
        upload.read.assert_not_called()


class TestPublish:

    def setup_method(self):
        self.service = UploadService(max_file_size=1024)
        self.image = BufferedImage(filename="photo.png", content_type="image/png", content=b"png")

    @pytest.mark.asyncio
    async def test_no_image_skips_store(self):
        store = MagicMock()
        store.upload = AsyncMock()

        assert await self.service.publish(None, store) is None
        store.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_store_url(self):
        store = MagicMock()
        store.upload = AsyncMock(return_value="https://images.test/photo.png")

        url = await self.service.publish(self.image, store)

        assert url == "https://images.test/photo.png"
        store.upload.assert_awaited_once_with(b"png", "photo.png", "image/png")

    @pytest.mark.asyncio
    async def test_store_errors_pass_through(self):
        store = MagicMock()
        store.upload = AsyncMock(side_effect=ImageUploadError(message="Image upload failed: 503"))

        with pytest.raises(ImageUploadError, match="503"):
            await self.service.publish(self.image, store)

    @pytest.mark.asyncio
    async def test_unexpected_errors_wrapped(self):
        store = MagicMock()
        store.upload = AsyncMock(side_effect=RuntimeError("socket closed"))

        with pytest.raises(ImageUploadError, match="socket closed"):
            await self.service.publish(self.image, store)
