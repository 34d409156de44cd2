"""
Catalog API — Persistence Gateway
=================================

What:  Generic create / find / update / delete operations for one ORM model.
Why:   Both resources need the same five operations; the services keep only
       their own rules (normalization, notifications, not-found handling).
How:   Each method runs against the request's AsyncSession and flushes instead
       of committing (the session dependency commits when the request ends).
       Every SQLAlchemyError is wrapped in DatabaseError.

Query plans:
    find_all:      SELECT ... ORDER BY created_at DESC   (no pagination)
    find_by_id:    SELECT ... WHERE id = :id             (primary key)
    delete_by_id:  DELETE FROM ... WHERE id = :id        (hard delete, rowcount returned)
"""

import logging
import uuid
from typing import Any, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import LoaderOption

from catalog.database import Base
from catalog.exceptions import DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Persistence gateway for one table. Models must define `id` and `created_at`."""

    def __init__(self, model: Type[ModelT]):
        self.model = model
        self.resource = model.__tablename__

    def _fail(self, operation: str, error: SQLAlchemyError, **context: Any) -> DatabaseError:
        logger.error(
            "Database error during %s on %s: %s",
            operation,
            self.resource,
            str(error),
            exc_info=True,
        )
        return DatabaseError(
            message=f"Failed to {operation} {self.resource}: {getattr(error, 'orig', None) or error}",
            context={"operation": operation, "table": self.resource, **context},
        )

    async def create(self, db: AsyncSession, entity: ModelT) -> ModelT:
        try:
            db.add(entity)
            await db.flush()
        except SQLAlchemyError as e:
            raise self._fail("create", e) from e
        return entity

    async def find_all(
        self, db: AsyncSession, options: Sequence[LoaderOption] = ()
    ) -> List[ModelT]:
        query = select(self.model).order_by(self.model.created_at.desc())
        if options:
            query = query.options(*options)
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            raise self._fail("list", e) from e
        return list(result.scalars().all())

    async def find_by_id(
        self,
        db: AsyncSession,
        entity_id: uuid.UUID,
        options: Sequence[LoaderOption] = (),
    ) -> Optional[ModelT]:
        query = select(self.model).where(self.model.id == entity_id)
        if options:
            # populate_existing: reload rows already in the identity map so the
            # requested eager loads are applied to them too
            query = query.options(*options).execution_options(populate_existing=True)
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            raise self._fail("read", e, entity_id=str(entity_id)) from e
        return result.scalar_one_or_none()

    async def update(self, db: AsyncSession, entity: ModelT, values: Mapping[str, Any]) -> ModelT:
        for key, value in values.items():
            setattr(entity, key, value)
        try:
            await db.flush()
            await db.refresh(entity)
        except SQLAlchemyError as e:
            raise self._fail("update", e, entity_id=str(entity.id)) from e
        return entity

    async def delete_by_id(self, db: AsyncSession, entity_id: uuid.UUID) -> int:
        """Returns the number of rows removed (0 or 1)."""
        try:
            result = await db.execute(delete(self.model).where(self.model.id == entity_id))
        except SQLAlchemyError as e:
            raise self._fail("delete", e, entity_id=str(entity_id)) from e
        return result.rowcount or 0


def parse_entity_id(raw_id: str, resource: str) -> uuid.UUID:
    """
    Path ids are accepted as plain strings; one that is not a UUID cannot
    name an existing row, so it is reported as not found.
    """
    try:
        return uuid.UUID(raw_id)
    except ValueError:
        raise NotFoundError(resource=resource, resource_id=raw_id) from None
