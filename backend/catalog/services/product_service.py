"""
Catalog API — Product Service
=============================

What:  Business logic for the /products endpoints.
Why:   Keeps routes thin; every rule about products (lowercase names, image
       URL, expiry date, not-found handling) lives here.
How:   Composes the validator, the upload pipeline and the repository.

Create pipeline (POST /products):
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────┐
    │  Buffer  │───▶│ Validate │───▶│ Publish to  │───▶│ Persist  │
    │  (route) │    │  fields  │    │ image store │    │  (repo)  │
    └──────────┘    └──────────┘    └─────────────┘    └──────────┘

    Each stage either returns or raises; the first exception ends the request.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import NotFoundError
from catalog.models.category import utcnow
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from catalog.services.image_store import ImageStore
from catalog.services.repository import Repository, parse_entity_id
from catalog.services.upload_service import BufferedImage, upload_service
from catalog.services.validation import (
    PRODUCT_CREATE_RULES,
    PRODUCT_UPDATE_RULES,
    validate_payload,
)

logger = logging.getLogger(__name__)

RESOURCE = "product"


class ProductService:
    """
    Responsibilities:
        - create_product(): validate → upload image → build → persist
        - list_products(): newest first, no pagination
        - get_product(): single product, NotFoundError when missing
        - update_product(): partial update, name re-normalized
        - delete_product(): hard delete, NotFoundError when nothing was removed
    """

    def __init__(self, repository: Optional[Repository[Product]] = None):
        self.repository = repository or Repository(Product)

    async def create_product(
        self,
        db: AsyncSession,
        form: Mapping[str, Any],
        image: Optional[BufferedImage],
        store: ImageStore,
    ) -> ProductResponse:
        """
        Create a product from a validated form and an optional buffered image.

        Args:
            db: Async database session (injected by FastAPI)
            form: Raw multipart fields (name, price, categoryId)
            image: Output of UploadService.buffer(), None without a file
            store: Object store the image is published to

        Raises:
            ValidationError: any field rule failed (nothing uploaded, nothing stored)
            ImageUploadError: the object store failed (nothing stored)
            DatabaseError: the insert failed
        """
        validate_payload(form, PRODUCT_CREATE_RULES)
        data = ProductCreate.model_validate(form)

        image_url = await upload_service.publish(image, store)

        now = utcnow()
        product = Product(
            id=uuid.uuid4(),
            name=data.name.lower(),
            price=data.price,
            product_image=image_url,
            expiry_date=now,
            category_id=data.category_id,
            created_at=now,
            updated_at=now,
        )
        await self.repository.create(db, product)
        logger.info("Product created: %s (image=%s)", product.id, "yes" if image_url else "no")
        return ProductResponse.model_validate(product)

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        products = await self.repository.find_all(db)
        return [ProductResponse.model_validate(product) for product in products]

    async def _get_existing(self, db: AsyncSession, raw_id: str) -> Product:
        product_id = parse_entity_id(raw_id, RESOURCE)
        product = await self.repository.find_by_id(db, product_id)
        if product is None:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)
        return product

    async def get_product(self, db: AsyncSession, raw_id: str) -> ProductResponse:
        product = await self._get_existing(db, raw_id)
        return ProductResponse.model_validate(product)

    async def update_product(
        self, db: AsyncSession, raw_id: str, payload: Mapping[str, Any]
    ) -> ProductResponse:
        """
        Apply a partial update.

        Only keys present in the payload change; a present `name` is lowercased.
        Validation runs before the lookup, so an invalid payload is a 400 even
        for an id that does not exist.
        """
        validate_payload(payload, PRODUCT_UPDATE_RULES)
        changes = ProductUpdate.model_validate(payload).model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = changes["name"].lower()

        product = await self._get_existing(db, raw_id)
        await self.repository.update(db, product, changes)
        logger.info("Product %s updated: %s", product.id, ", ".join(sorted(changes)) or "no changes")
        return ProductResponse.model_validate(product)

    async def delete_product(self, db: AsyncSession, raw_id: str) -> None:
        product_id = parse_entity_id(raw_id, RESOURCE)
        removed = await self.repository.delete_by_id(db, product_id)
        if not removed:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)
        logger.info("Product deleted: %s", product_id)


product_service = ProductService()
