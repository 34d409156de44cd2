"""
Catalog API — Product SQLAlchemy Model
======================================

What:  ORM model representing the `products` table.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by ProductService through the repository.

Table Design:
    - UUID primary key generated in Python at creation time
    - name: always stored lowercase (normalized by ProductService on every write)
    - price: plain float, no currency or precision handling
    - product_image: public URL returned by the image store, NULL without an upload
    - expiry_date: set to the creation time and never recomputed
    - category_id: optional reference to categories.id, SET NULL on category delete

    Index on created_at DESC serves the only list query (newest first).
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base
from catalog.models.category import utcnow

if TYPE_CHECKING:
    from catalog.models.category import Category


class Product(Base):
    """A catalog product, optionally attached to a Category."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    price: Mapped[float] = mapped_column(Float, nullable=False)

    product_image: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        default=None,
    )

    expiry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL", name="fk_products_category_id"),
        nullable=True,
    )

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

    category: Mapped[Optional["Category"]] = relationship(
        back_populates="products",
        lazy="raise",
    )

    __table_args__ = (
        Index("idx_products_created_at", created_at.desc()),
        Index("idx_products_category_id", category_id),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
