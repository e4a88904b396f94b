"""
Ledger Records -- one immutable value per stock-affecting event.

Responsibility:
    The seven record types the plant keeps: receiving, issue,
    pre-expanding, second-expanding, production (standard and Large Beads),
    delivery and fuel.  A record is replaced wholesale on edit and removed
    on delete; it is never patched in place.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - Derived fields (dry_weight, total_prod_weight, damaged_weight,
      good_qty, used, total_prod_weight_on_date) are computed once by the
      engines when the record is created or updated and are the
      authoritative record of what happened.  Nothing recomputes them
      from other tables afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from stock_kernel.domain.quantities import ZERO_KG, round_kg

LARGE_BEADS_ITEM_ID = "large_beads"
LARGE_BEADS_ITEM_NAME = "Large Beads"


class Shift(str, Enum):
    DAY = "Day"
    NIGHT = "Night"


class DeliveryUnit(str, Enum):
    KG = "Kg"
    PIECES = "Pieces"


@dataclass(frozen=True, slots=True)
class ReceivingEntry:
    id: str
    date: date
    material_id: str
    kg: Decimal


@dataclass(frozen=True, slots=True)
class IssueEntry:
    id: str
    date: date
    material_id: str
    kg: Decimal


@dataclass(frozen=True, slots=True)
class PreExpandingEntry:
    id: str
    date: date
    shift: Shift
    machine: str
    material_id: str
    operator_id: str
    quantity_kg: Decimal
    output_silo_id: int


@dataclass(frozen=True, slots=True)
class SecondExpandingEntry:
    id: str
    date: date
    shift: Shift
    operator_id: str
    quantity_kg: Decimal
    dest_silo_id: int
    is_large_beads: bool = False


@dataclass(frozen=True, slots=True)
class ProductionEntry:
    """Standard finished-goods production, or the Large Beads variant.

    Large Beads moves weight from the intermediate silo to the
    production-ready silo: ``silo_id`` is then the destination silo,
    ``machine_id`` and ``item_id`` are empty and every piece or
    dry-weight figure is zero.
    """

    id: str
    date: date
    shift: Shift
    operator_id: str
    silo_id: int
    is_large_beads: bool
    total_qty: Decimal | int
    total_prod_weight: Decimal
    machine_id: str = ""
    item_id: str = ""
    good_qty: int = 0
    damaged_qty: int = 0
    avg_wet_weight: Decimal = ZERO_KG
    dry_weight: Decimal = ZERO_KG
    damaged_weight: Decimal = ZERO_KG

    @property
    def good_weight(self) -> Decimal:
        """Dry weight credited to finished-goods stock."""
        return round_kg(self.good_qty * self.dry_weight)


@dataclass(frozen=True, slots=True)
class DeliveryEntry:
    id: str
    date: date
    item_id: str
    item_name: str
    quantity: Decimal | int
    unit: DeliveryUnit
    source: str
    remarks: str = ""

    @property
    def is_large_beads(self) -> bool:
        return self.item_id == LARGE_BEADS_ITEM_ID


@dataclass(frozen=True, slots=True)
class FuelEntry:
    id: str
    date: date
    shift: Shift
    opening: Decimal
    purchased: Decimal
    closing: Decimal
    used: Decimal
    total_prod_weight_on_date: Decimal = ZERO_KG


LedgerRecord = (
    ReceivingEntry
    | IssueEntry
    | PreExpandingEntry
    | SecondExpandingEntry
    | ProductionEntry
    | DeliveryEntry
    | FuelEntry
)
