"""
Stock Services - the imperative shell around the pure engines.

Services:
    StockLedgerService  - serialized single writer owning the snapshot
    SqlSnapshotStore    - snapshot document in the app_state table
    InMemorySnapshotStore - snapshot document kept in memory (tests)
"""

from stock_services.ledger_service import CommandResult, CommandStatus, StockLedgerService
from stock_services.snapshot_store import (
    InMemorySnapshotStore,
    SnapshotStore,
    SqlSnapshotStore,
)

__all__ = [
    "StockLedgerService",
    "CommandResult",
    "CommandStatus",
    "SnapshotStore",
    "SqlSnapshotStore",
    "InMemorySnapshotStore",
]
