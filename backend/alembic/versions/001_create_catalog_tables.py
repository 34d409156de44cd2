"""Create categories and products tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `categories` and `products`.
How:   products.category_id references categories.id with ON DELETE SET NULL,
       so deleting a category detaches its products instead of removing them.
       Both tables are indexed on created_at DESC for the list endpoints.

Rollback: downgrade() drops both tables (all catalog data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Generated at creation time"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_categories_created_at",
        "categories",
        [sa.text("created_at DESC")],
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Generated at creation time"),
        sa.Column("name", sa.String(255), nullable=False, comment="Always stored lowercase"),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column(
            "product_image",
            sa.String(1024),
            nullable=True,
            comment="Public URL returned by the image host",
        ),
        sa.Column(
            "expiry_date",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            comment="Set to the creation instant",
        ),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["categories.id"],
            name="fk_products_category_id",
            ondelete="SET NULL",
        ),
    )
    op.create_index(
        "idx_products_created_at",
        "products",
        [sa.text("created_at DESC")],
    )
    op.create_index("idx_products_category_id", "products", ["category_id"])


def downgrade() -> None:
    op.drop_index("idx_products_category_id", table_name="products")
    op.drop_index("idx_products_created_at", table_name="products")
    op.drop_table("products")
    op.drop_index("idx_categories_created_at", table_name="categories")
    op.drop_table("categories")
