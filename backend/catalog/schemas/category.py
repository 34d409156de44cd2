"""
Catalog API — Category Schemas
==============================

What:  Typed request and response contracts for the /categories endpoints.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from catalog.schemas.common import CamelModel
from catalog.schemas.product import ProductResponse


class CategoryCreate(CamelModel):
    name: str


class CategoryUpdate(CamelModel):
    """Partial PUT /categories/{id} body; applied with `exclude_unset=True`."""
    name: Optional[str] = None


class CategoryResponse(CamelModel):
    """Category without its products (create, list, get)."""
    id: uuid.UUID = Field(description="Unique category identifier (UUID)")
    name: str
    created_at: datetime
    updated_at: datetime


class CategoryWithProductsResponse(CategoryResponse):
    """Returned by PUT /categories/{id}: the category re-read with its products."""
    products: List[ProductResponse] = Field(default_factory=list)
