"""
Blog Posts API: Application Package Initializer
================================================

What: Marks the `blog_api` directory as a Python package.
Who:  Used by uvicorn, Alembic, pytest and the `blog-api` console script.

Architecture Note:
    The service follows the same layering throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← presence checks, store calls
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Process start/stop lives in `blog_api.server`.
"""

__version__ = "1.0.0"
