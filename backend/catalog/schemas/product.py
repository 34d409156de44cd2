"""
Catalog API — Product Schemas
=============================

What:  Typed request and response contracts for the /products endpoints.
Why:   Handlers receive a ProductCreate / ProductUpdate only after the
       declarative validator has accepted the raw payload, so parsing here
       cannot fail on anything the rules already checked.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.schemas.common import CamelModel


class ProductCreate(CamelModel):
    """Fields of a POST /products multipart form (the image travels separately)."""
    name: str
    price: float
    category_id: Optional[uuid.UUID] = None


class ProductUpdate(CamelModel):
    """
    Partial PUT /products/{id} body.

    Only keys present in the request are applied, read with
    `model_dump(exclude_unset=True)`. Unknown keys are ignored.
    """
    name: Optional[str] = None
    price: Optional[float] = None
    category_id: Optional[uuid.UUID] = None


class ProductResponse(CamelModel):
    """Full representation of a product, as stored."""
    id: uuid.UUID = Field(description="Unique product identifier (UUID)")
    name: str = Field(description="Product name, lowercase")
    price: float = Field(description="Product price")
    product_image: Optional[str] = Field(
        default=None, description="Public URL of the product image (null without upload)"
    )
    expiry_date: datetime = Field(description="Set to the creation time")
    category_id: Optional[uuid.UUID] = Field(default=None, description="Owning category")
    created_at: datetime
    updated_at: datetime
