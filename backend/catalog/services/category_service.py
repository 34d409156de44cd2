"""
Catalog API — Category Service
==============================

What:  Business logic for the /categories endpoints.
How:   Composes the validator and the repository. The creation email is not
       sent from here: the route schedules notify_category_created() as a
       background task so it runs after the session has committed.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.exceptions import NotFoundError
from catalog.models.category import Category, utcnow
from catalog.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithProductsResponse,
)
from catalog.services.repository import Repository, parse_entity_id
from catalog.services.validation import (
    CATEGORY_CREATE_RULES,
    CATEGORY_UPDATE_RULES,
    validate_payload,
)

logger = logging.getLogger(__name__)

RESOURCE = "category"


class CategoryService:

    def __init__(self, repository: Optional[Repository[Category]] = None):
        self.repository = repository or Repository(Category)

    async def create_category(
        self, db: AsyncSession, payload: Mapping[str, Any]
    ) -> CategoryResponse:
        validate_payload(payload, CATEGORY_CREATE_RULES)
        data = CategoryCreate.model_validate(payload)

        now = utcnow()
        category = Category(id=uuid.uuid4(), name=data.name, created_at=now, updated_at=now)
        await self.repository.create(db, category)
        logger.info("Category created: %s (%s)", category.id, category.name)
        return CategoryResponse.model_validate(category)

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        categories = await self.repository.find_all(db)
        return [CategoryResponse.model_validate(category) for category in categories]

    async def get_category(self, db: AsyncSession, raw_id: str) -> CategoryResponse:
        category_id = parse_entity_id(raw_id, RESOURCE)
        category = await self.repository.find_by_id(db, category_id)
        if category is None:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)
        return CategoryResponse.model_validate(category)

    async def update_category(
        self, db: AsyncSession, raw_id: str, payload: Mapping[str, Any]
    ) -> CategoryWithProductsResponse:
        """
        Apply a partial update, then re-read the category with its products.

        The re-read is a second statement in the same session, not an atomic
        read-modify-write: a concurrent delete in between surfaces as 404.
        """
        validate_payload(payload, CATEGORY_UPDATE_RULES)
        changes = CategoryUpdate.model_validate(payload).model_dump(exclude_unset=True)

        category_id = parse_entity_id(raw_id, RESOURCE)
        category = await self.repository.find_by_id(db, category_id)
        if category is None:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)

        await self.repository.update(db, category, changes)

        refreshed = await self.repository.find_by_id(
            db, category_id, options=[selectinload(Category.products)]
        )
        if refreshed is None:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)

        logger.info(
            "Category %s updated (%d products attached)",
            category_id,
            len(refreshed.products),
        )
        return CategoryWithProductsResponse.model_validate(refreshed)

    async def delete_category(self, db: AsyncSession, raw_id: str) -> None:
        category_id = parse_entity_id(raw_id, RESOURCE)
        removed = await self.repository.delete_by_id(db, category_id)
        if not removed:
            raise NotFoundError(resource=RESOURCE, resource_id=raw_id)
        logger.info("Category deleted: %s", category_id)


category_service = CategoryService()
