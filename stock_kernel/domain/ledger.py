"""
Ledger Store -- newest-first collections of records, one per event type.

Responsibility:
    Keyed, ordered, immutable storage of ledger records.  Insert puts a
    record at the front; an edit replaces the record wholesale under the
    same id and moves it to the front; delete removes it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Record ids are unique within a ledger (upsert replaces by id).

Failure modes:
    - RecordNotFoundError from ``get`` when the id is absent.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Generic, TypeVar

from stock_kernel.domain.records import (
    DeliveryEntry,
    FuelEntry,
    IssueEntry,
    LedgerRecord,
    PreExpandingEntry,
    ProductionEntry,
    ReceivingEntry,
    SecondExpandingEntry,
)
from stock_kernel.exceptions import RecordNotFoundError


class LedgerKind(str, Enum):
    """One ledger per event type.  Values match LedgerStore field names."""

    RECEIVING = "receiving"
    ISSUE = "issue"
    PRE_EXPANDING = "pre_expanding"
    SECOND_EXPANDING = "second_expanding"
    PRODUCTION = "production"
    DELIVERY = "delivery"
    FUEL = "fuel"


LEDGER_KIND_BY_RECORD_TYPE: dict[type, LedgerKind] = {
    ReceivingEntry: LedgerKind.RECEIVING,
    IssueEntry: LedgerKind.ISSUE,
    PreExpandingEntry: LedgerKind.PRE_EXPANDING,
    SecondExpandingEntry: LedgerKind.SECOND_EXPANDING,
    ProductionEntry: LedgerKind.PRODUCTION,
    DeliveryEntry: LedgerKind.DELIVERY,
    FuelEntry: LedgerKind.FUEL,
}

R = TypeVar("R")


@dataclass(frozen=True)
class Ledger(Generic[R]):
    kind: LedgerKind
    records: tuple[R, ...] = ()

    def __iter__(self) -> Iterator[R]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def find(self, record_id: str) -> R | None:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def get(self, record_id: str) -> R:
        record = self.find(record_id)
        if record is None:
            raise RecordNotFoundError(self.kind.value, record_id)
        return record

    def upsert(self, record: R) -> Ledger[R]:
        """Put ``record`` at the front, replacing any record with its id."""
        rest = tuple(r for r in self.records if r.id != record.id)
        return replace(self, records=(record,) + rest)

    def remove(self, record_id: str) -> Ledger[R]:
        return replace(
            self, records=tuple(r for r in self.records if r.id != record_id)
        )

    def on_date(self, day: date) -> tuple[R, ...]:
        return tuple(r for r in self.records if r.date == day)


@dataclass(frozen=True)
class LedgerStore:
    """All seven ledgers of a snapshot."""

    receiving: Ledger[ReceivingEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.RECEIVING)
    )
    issue: Ledger[IssueEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.ISSUE)
    )
    pre_expanding: Ledger[PreExpandingEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.PRE_EXPANDING)
    )
    second_expanding: Ledger[SecondExpandingEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.SECOND_EXPANDING)
    )
    production: Ledger[ProductionEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.PRODUCTION)
    )
    delivery: Ledger[DeliveryEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.DELIVERY)
    )
    fuel: Ledger[FuelEntry] = field(
        default_factory=lambda: Ledger(LedgerKind.FUEL)
    )

    def get(self, kind: LedgerKind) -> Ledger:
        return getattr(self, kind.value)

    def all(self) -> tuple[Ledger, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def with_ledger(self, ledger: Ledger) -> LedgerStore:
        return replace(self, **{ledger.kind.value: ledger})

    def upsert(self, record: LedgerRecord) -> LedgerStore:
        kind = LEDGER_KIND_BY_RECORD_TYPE[type(record)]
        return self.with_ledger(self.get(kind).upsert(record))

    def remove(self, kind: LedgerKind, record_id: str) -> LedgerStore:
        return self.with_ledger(self.get(kind).remove(record_id))
