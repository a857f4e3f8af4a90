"""
Project Library Backend - Application Package
==============================================

What: The `project_library` package: a social/content-sharing API where users
      and organizations ("owners") follow each other, exchange messages, and
      publish projects and events.
Who:  Imported by uvicorn (`project_library.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (Session / Actor)    │  ← token → user → active owner
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← permission checks, validation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every write is attributed to an Owner, never directly to a User. A signed-in
    user acts either as their personal Owner or as the Owner of an org where
    they hold an acting role. See services/owner_service.py.
"""

__version__ = "1.0.0"
