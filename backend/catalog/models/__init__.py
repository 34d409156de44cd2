"""ORM models. Importing this package registers every table on `Base.metadata`."""

from catalog.models.category import Category
from catalog.models.product import Product

__all__ = ["Category", "Product"]
