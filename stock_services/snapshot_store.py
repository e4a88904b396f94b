"""
stock_services.snapshot_store -- Where the snapshot document lives.

Responsibility:
    Load the whole snapshot document at startup and write it wholesale
    after each accepted command.  The document is opaque here; encoding
    and decoding belong to ``stock_kernel.domain.serialization``.

Architecture position:
    Services -- imperative shell.  ``SqlSnapshotStore`` persists through
    SQLAlchemy into the ``app_state`` table (one row, id = 1);
    ``InMemorySnapshotStore`` keeps a deep copy in memory for tests.

Failure modes:
    - SQLAlchemyError from ``save``/``load`` propagates.  The ledger
      service catches save failures and logs them; load failures stop
      startup.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from stock_kernel.db.engine import session_scope
from stock_kernel.logging_config import get_logger
from stock_kernel.models.state_document import SNAPSHOT_ROW_ID, StateDocument

logger = get_logger("services.snapshot_store")


class SnapshotStore(Protocol):
    """Loads and saves the snapshot document."""

    def load(self) -> dict[str, Any] | None: ...

    def save(self, document: dict[str, Any]) -> None: ...


class SqlSnapshotStore:
    """
    Snapshot document in the ``app_state`` table.

    Contract:
        ``save`` upserts row SNAPSHOT_ROW_ID inside one transaction;
        ``load`` returns its ``data`` or None when nothing was saved yet.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def load(self) -> dict[str, Any] | None:
        with session_scope(self._session_factory) as session:
            row = session.execute(
                select(StateDocument).where(StateDocument.id == SNAPSHOT_ROW_ID)
            ).scalar_one_or_none()
            if row is None:
                logger.info("snapshot_not_found")
                return None
            logger.info("snapshot_loaded", extra={"updated_at": row.updated_at})
            return row.data

    def save(self, document: dict[str, Any]) -> None:
        with session_scope(self._session_factory) as session:
            row = session.get(StateDocument, SNAPSHOT_ROW_ID)
            if row is None:
                session.add(StateDocument(id=SNAPSHOT_ROW_ID, data=document))
            else:
                row.data = document


class InMemorySnapshotStore:
    """Snapshot store for tests; counts saves and can be told to fail."""

    def __init__(self, document: dict[str, Any] | None = None):
        self.document = copy.deepcopy(document)
        self.save_count = 0
        self.fail_with: Exception | None = None

    def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.document)

    def save(self, document: dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.document = copy.deepcopy(document)
        self.save_count += 1
