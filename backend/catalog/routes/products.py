"""
Catalog API — Product Route Handlers
====================================

What:  POST/GET/PUT/DELETE handlers for /products.
How:   Extract form, body and path data, delegate to ProductService, return JSON.
       Status codes for failures come from the global exception handlers.

Request Flow (POST /products):
    1. Auth gate (router dependency)
    2. Buffer the `productImage` part into memory (UploadService.buffer)
    3. ProductService.create_product(): validate → publish image → persist
    4. 201 Created with the stored product
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.auth import require_auth
from catalog.database import get_db_session
from catalog.schemas.common import ErrorResponse
from catalog.schemas.product import ProductResponse
from catalog.services.image_store import ImageStore, get_image_store
from catalog.services.product_service import product_service
from catalog.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_auth)],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={400: {"description": "Validation error", "model": ErrorResponse}},
    summary="Create a product",
    description=(
        "Multipart form with `name`, `price`, optional `categoryId` and an optional "
        "`productImage` file. The name is stored lowercase; the image is uploaded to "
        "the image host and its URL stored as `productImage`."
    ),
)
async def create_product(
    name: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    category_id: Optional[str] = Form(default=None, alias="categoryId"),
    product_image: Optional[UploadFile] = File(default=None, alias="productImage"),
    db: AsyncSession = Depends(get_db_session),
    store: ImageStore = Depends(get_image_store),
) -> ProductResponse:
    image = await upload_service.buffer(product_image)

    # Absent form fields stay absent so required-field rules report them
    form = {
        key: value
        for key, value in (("name", name), ("price", price), ("categoryId", category_id))
        if value is not None
    }
    return await product_service.create_product(db=db, form=form, image=image, store=store)


@router.get(
    "",
    response_model=List[ProductResponse],
    summary="List all products, newest first",
)
async def list_products(db: AsyncSession = Depends(get_db_session)) -> List[ProductResponse]:
    return await product_service.list_products(db)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a product by ID",
)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.get_product(db, product_id)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"description": "Validation error", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
    },
    summary="Partially update a product",
    description="JSON body with any of `name`, `price`, `categoryId`. Absent keys are left unchanged.",
)
async def update_product(
    product_id: str,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.update_product(db, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await product_service.delete_product(db, product_id)
    return Response(status_code=204)
