"""
Module: backoffice_kernel.db.base
Responsibility: Declarative base class for the SQLAlchemy ORM models of the
    core.  Provides the type annotation map for consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  MUST NOT import from models/, domain/, or outer layers.

Invariants enforced:
    - datetime maps to DateTime(timezone=True) -- timestamps are always
      timezone-aware.
    - str maps to Text -- stored payloads are unbounded JSON documents.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the system inherits from Base.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        str: Text,
    }
