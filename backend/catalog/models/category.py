"""
Catalog API — Category SQLAlchemy Model
=======================================

What:  ORM model representing the `categories` table.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by CategoryService through the repository.

Table Design:
    - UUID primary key generated in Python at creation time
    - name: free text, stored as given (no normalization, unlike products)
    - products: one-to-many; deleting a category does NOT delete its products,
      the foreign key on products is ON DELETE SET NULL
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

if TYPE_CHECKING:
    from catalog.models.product import Product


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """A product category. Exists until hard-deleted by DELETE /categories/{id}."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # lazy="raise": async sessions cannot lazy-load, so every query that needs
    # products must ask for them explicitly with selectinload().
    products: Mapped[List["Product"]] = relationship(
        back_populates="category",
        lazy="raise",
        passive_deletes=True,
        order_by="Product.created_at.desc()",
    )

    __table_args__ = (
        Index("idx_categories_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
