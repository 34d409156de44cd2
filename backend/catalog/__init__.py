"""
Catalog API — Application Package Initializer
=============================================

What: Marks the `catalog` directory as a Python package.
Why:  Enables module imports like `from catalog.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service follows the same layered shape for both resources:

    ┌─────────────────────────────────────┐
    │      Routes (products, categories)  │  ← HTTP concerns, auth gate
    ├─────────────────────────────────────┤
    │  Services (validation, upload,      │  ← One request pipeline per handler
    │  notification, resource services)   │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Repository (Persistence Gateway)  │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
