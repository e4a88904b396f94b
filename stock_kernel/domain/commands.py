"""
Commands -- the typed inputs the UI hands to the transaction engine.

Responsibility:
    One frozen dataclass per event type.  Field values are raw boundary
    values (numbers, strings, Decimals or None for "left empty"); the
    engine validates, rounds and derives before anything touches a pool.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Ledger commands carry an ``action``:
    CREATE  -- new record, ``record_id`` ignored.
    UPDATE  -- replace record ``record_id`` (reverse old, apply new).
    DELETE  -- remove record ``record_id``; every other field is ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, ClassVar

from stock_kernel.domain.ledger import LedgerKind
from stock_kernel.domain.master import MasterCategory


class CommandAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, kw_only=True)
class LedgerCommand:
    """Base of every command that writes one ledger record."""

    action: CommandAction = CommandAction.CREATE
    record_id: str | None = None
    date: date | None = None
    actor: str | None = None

    ledger: ClassVar[LedgerKind]

    @classmethod
    def delete(cls, record_id: str, *, actor: str | None = None):
        return cls(action=CommandAction.DELETE, record_id=record_id, actor=actor)


@dataclass(frozen=True, kw_only=True)
class RecordReceiving(LedgerCommand):
    material_id: str | None = None
    kg: Any = None

    ledger: ClassVar[LedgerKind] = LedgerKind.RECEIVING


@dataclass(frozen=True, kw_only=True)
class RecordIssue(LedgerCommand):
    material_id: str | None = None
    kg: Any = None

    ledger: ClassVar[LedgerKind] = LedgerKind.ISSUE


@dataclass(frozen=True, kw_only=True)
class RecordPreExpanding(LedgerCommand):
    shift: Any = None
    machine: str | None = None
    material_id: str | None = None
    operator_id: str | None = None
    quantity_kg: Any = None
    output_silo_id: int | None = None

    ledger: ClassVar[LedgerKind] = LedgerKind.PRE_EXPANDING


@dataclass(frozen=True, kw_only=True)
class RecordSecondExpanding(LedgerCommand):
    shift: Any = None
    operator_id: str | None = None
    quantity_kg: Any = None
    dest_silo_id: int | None = None
    is_large_beads: bool = False

    ledger: ClassVar[LedgerKind] = LedgerKind.SECOND_EXPANDING


@dataclass(frozen=True, kw_only=True)
class RecordProduction(LedgerCommand):
    """Standard finished-goods production, or Large Beads when flagged.

    Large Beads ignores ``machine_id``, ``item_id``, ``silo_id``,
    ``damaged_qty`` and ``avg_wet_weight``; ``total_qty`` is then kg.
    """

    shift: Any = None
    operator_id: str | None = None
    is_large_beads: bool = False
    total_qty: Any = None
    machine_id: str | None = None
    item_id: str | None = None
    silo_id: int | None = None
    damaged_qty: Any = 0
    avg_wet_weight: Any = None

    ledger: ClassVar[LedgerKind] = LedgerKind.PRODUCTION


@dataclass(frozen=True, kw_only=True)
class RecordDelivery(LedgerCommand):
    item_id: str | None = None
    quantity: Any = None
    remarks: str = ""

    ledger: ClassVar[LedgerKind] = LedgerKind.DELIVERY


@dataclass(frozen=True, kw_only=True)
class RecordFuel(LedgerCommand):
    shift: Any = None
    opening: Any = None
    purchased: Any = None
    closing: Any = None

    ledger: ClassVar[LedgerKind] = LedgerKind.FUEL


# Commands that write no ledger record


@dataclass(frozen=True, kw_only=True)
class SetSiloOpeningStock:
    """Absolute kg per silo id; silos not listed are set to zero."""

    levels: Mapping[int, Any] = field(default_factory=dict)
    actor: str | None = None


@dataclass(frozen=True, kw_only=True)
class SetFinishedGoodsOpeningStock:
    """Absolute (pieces, weight kg) per item id; items not listed become zero."""

    levels: Mapping[str, tuple[Any, Any]] = field(default_factory=dict)
    actor: str | None = None


@dataclass(frozen=True, kw_only=True)
class AdjustSiloStock:
    silo_id: int | None = None
    delta: Any = None
    date: date | None = None
    reason: str = ""
    actor: str | None = None


@dataclass(frozen=True, kw_only=True)
class AdjustFinishedGoodsStock:
    item_id: str | None = None
    delta: Any = None
    date: date | None = None
    reason: str = ""
    actor: str | None = None


@dataclass(frozen=True, kw_only=True)
class AddMasterItem:
    name: str = ""
    category: MasterCategory = MasterCategory.FINISHED_GOODS
    actor: str | None = None


@dataclass(frozen=True, kw_only=True)
class RemoveMasterItem:
    item_id: str = ""
    actor: str | None = None


Command = (
    LedgerCommand
    | SetSiloOpeningStock
    | SetFinishedGoodsOpeningStock
    | AdjustSiloStock
    | AdjustFinishedGoodsStock
    | AddMasterItem
    | RemoveMasterItem
)
