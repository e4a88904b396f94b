"""
Module: stock_kernel.models.state_document
Responsibility: ORM persistence for the plant snapshot.  The whole
    FactoryState is stored as one JSON document in a single row.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from selectors/, domain/, or outer layers.

Invariants enforced:
    - Exactly one live row, id = SNAPSHOT_ROW_ID.  Writers upsert it
      wholesale after every accepted command.

Failure modes:
    - A corrupted ``data`` column surfaces when the domain decodes it;
      nothing here validates the document's shape.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base

SNAPSHOT_ROW_ID = 1


class StateDocument(Base):
    """
    One stored snapshot document.

    Guarantees:
        - ``data`` holds the camelCase document produced by
          ``stock_kernel.domain.serialization.state_to_document``.
        - ``updated_at`` records the last write.
    """

    __tablename__ = "app_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[dict[str, Any]]
    updated_at: Mapped[datetime | None] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<StateDocument id={self.id} updated_at={self.updated_at}>"
