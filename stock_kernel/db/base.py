"""
Module: stock_kernel.db.base
Responsibility: Declarative base for the SQLAlchemy ORM models.  Provides the
    type annotation map for consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, selectors/, domain/, or outer layers.

Invariants enforced:
    - dict columns are JSON: the snapshot document is stored wholesale and
      never split into relational tables.
    - datetime maps to DateTime(timezone=True) -- always timezone-aware.
"""

from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - dict[str, Any] maps to JSON (JSONB-compatible on PostgreSQL,
          TEXT-backed on SQLite).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        dict[str, Any]: JSON,
        datetime: DateTime(timezone=True),
    }
