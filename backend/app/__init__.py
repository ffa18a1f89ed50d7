"""
Postboard Backend: Application Package Initializer
====================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic,
      pytest, and uvicorn.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← uniqueness, auth, caching
    ├─────────────────────────────────────┤
    │   Models (Schemas) & Pydantic I/O   │  ← table declarations, contracts
    ├─────────────────────────────────────┤
    │   ORM (Model / Record / Relations)  │  ← active-record engine
    ├─────────────────────────────────────┤
    │      QueryExecutor (Persistence)    │  ← async SQLAlchemy Core
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
