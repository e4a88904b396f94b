"""
Pure domain layer.

This module contains immutable value types and pure transformations
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time enters only through an injected Clock.
"""

from stock_kernel.domain.audit import AuditAction, AuditModule, AuditRecord, AuditTrail
from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.commands import (
    AddMasterItem,
    AdjustFinishedGoodsStock,
    AdjustSiloStock,
    Command,
    CommandAction,
    LedgerCommand,
    RecordDelivery,
    RecordFuel,
    RecordIssue,
    RecordPreExpanding,
    RecordProduction,
    RecordReceiving,
    RecordSecondExpanding,
    RemoveMasterItem,
    SetFinishedGoodsOpeningStock,
    SetSiloOpeningStock,
)
from stock_kernel.domain.ledger import Ledger, LedgerKind, LedgerStore
from stock_kernel.domain.master import MasterCategory, MasterItem, MasterRegistry
from stock_kernel.domain.pools import (
    FinishedGoodsPool,
    FinishedGoodsStock,
    PoolKind,
    RawMaterialPool,
    RawMaterialStock,
    Silo,
    SiloPool,
    SiloType,
    StockField,
)
from stock_kernel.domain.quantities import round_kg, round_pcs, to_decimal
from stock_kernel.domain.records import (
    LARGE_BEADS_ITEM_ID,
    DeliveryEntry,
    DeliveryUnit,
    FuelEntry,
    IssueEntry,
    PreExpandingEntry,
    ProductionEntry,
    ReceivingEntry,
    SecondExpandingEntry,
    Shift,
)
from stock_kernel.domain.state import (
    FactoryState,
    OpeningLatch,
    PlantParameters,
    initial_state,
)

__all__ = [
    # Quantities
    "round_kg",
    "round_pcs",
    "to_decimal",
    # Pools
    "PoolKind",
    "StockField",
    "SiloType",
    "Silo",
    "SiloPool",
    "RawMaterialStock",
    "RawMaterialPool",
    "FinishedGoodsStock",
    "FinishedGoodsPool",
    # Registry
    "MasterCategory",
    "MasterItem",
    "MasterRegistry",
    # Records and ledgers
    "LARGE_BEADS_ITEM_ID",
    "Shift",
    "DeliveryUnit",
    "ReceivingEntry",
    "IssueEntry",
    "PreExpandingEntry",
    "SecondExpandingEntry",
    "ProductionEntry",
    "DeliveryEntry",
    "FuelEntry",
    "Ledger",
    "LedgerKind",
    "LedgerStore",
    # Audit
    "AuditAction",
    "AuditModule",
    "AuditRecord",
    "AuditTrail",
    # Snapshot
    "FactoryState",
    "OpeningLatch",
    "PlantParameters",
    "initial_state",
    # Commands
    "Command",
    "CommandAction",
    "LedgerCommand",
    "RecordReceiving",
    "RecordIssue",
    "RecordPreExpanding",
    "RecordSecondExpanding",
    "RecordProduction",
    "RecordDelivery",
    "RecordFuel",
    "SetSiloOpeningStock",
    "SetFinishedGoodsOpeningStock",
    "AdjustSiloStock",
    "AdjustFinishedGoodsStock",
    "AddMasterItem",
    "RemoveMasterItem",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
