"""
Catalog API — Category Route Handlers
=====================================

What:  POST/GET/PUT/DELETE handlers for /categories.
How:   Delegate to CategoryService. POST additionally schedules the
       "new category" email as a background task once the row is committed,
       so a mail failure can never change the 201 response.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.auth import require_auth
from catalog.database import get_db_session
from catalog.schemas.category import CategoryResponse, CategoryWithProductsResponse
from catalog.schemas.common import ErrorResponse
from catalog.services.category_service import category_service
from catalog.services.notification import (
    NotificationSink,
    get_notification_sink,
    notify_category_created,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    dependencies=[Depends(require_auth)],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={400: {"description": "Validation error", "model": ErrorResponse}},
    summary="Create a category",
    description="JSON body `{name}`. An email announcing the category is sent afterwards.",
)
async def create_category(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
    sink: NotificationSink = Depends(get_notification_sink),
) -> CategoryResponse:
    category = await category_service.create_category(db, payload)

    # Commit before announcing; the session dependency's own commit is then a no-op
    await db.commit()

    background_tasks.add_task(notify_category_created, sink, category.name)
    return category


@router.get(
    "",
    response_model=List[CategoryResponse],
    summary="List all categories, newest first",
)
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> List[CategoryResponse]:
    return await category_service.list_categories(db)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
    summary="Get a category by ID",
)
async def get_category(
    category_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    return await category_service.get_category(db, category_id)


@router.put(
    "/{category_id}",
    response_model=CategoryWithProductsResponse,
    responses={
        400: {"description": "Validation error", "model": ErrorResponse},
        404: {"description": "Category not found", "model": ErrorResponse},
    },
    summary="Partially update a category",
    description="Returns the updated category together with its products.",
)
async def update_category(
    category_id: str,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryWithProductsResponse:
    return await category_service.update_category(db, category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
    summary="Delete a category",
)
async def delete_category(
    category_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await category_service.delete_category(db, category_id)
    return Response(status_code=204)
