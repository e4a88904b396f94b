"""
Audit Trail -- append-only log of accepted mutations.

Responsibility:
    One AuditRecord per accepted command, newest first, with a fixed shape
    (module, action, old value, new value, actor, date, time).  Display
    formatting is left to readers.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Append-only: the trail has no update or delete operation.
    - A rejected command appends nothing (the whole snapshot is discarded).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ADJUST = "ADJUST"


class AuditModule(str, Enum):
    """Modules an audit record is filed under."""

    RAW_MATERIAL = "Raw Material"
    PRE_EXPANDING = "Pre Expanding"
    SILO_MANAGEMENT = "Silo Management"
    PRODUCTION = "Production"
    DELIVERY = "Delivery"
    FINISHED_GOODS = "Finished Goods"
    FUEL_CONSUMPTION = "Fuel Consumption"
    MASTER_DATA = "Master Data"


@dataclass(frozen=True, slots=True)
class AuditRecord:
    id: str
    module: str
    action: AuditAction
    old_value: str
    new_value: str
    actor: str
    date: date
    time: time

    @classmethod
    def create(
        cls,
        *,
        record_id: str,
        module: AuditModule | str,
        action: AuditAction,
        old_value: str,
        new_value: str,
        actor: str,
        at: datetime,
    ) -> AuditRecord:
        return cls(
            id=record_id,
            module=module.value if isinstance(module, AuditModule) else module,
            action=action,
            old_value=old_value,
            new_value=new_value,
            actor=actor,
            date=at.date(),
            time=at.time().replace(microsecond=0, tzinfo=None),
        )


@dataclass(frozen=True)
class AuditTrail:
    records: tuple[AuditRecord, ...] = ()

    def __iter__(self) -> Iterator[AuditRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def append(self, record: AuditRecord) -> AuditTrail:
        """Newest first."""
        return replace(self, records=(record,) + self.records)

    def for_module(self, module: AuditModule | str) -> tuple[AuditRecord, ...]:
        name = module.value if isinstance(module, AuditModule) else module
        return tuple(r for r in self.records if r.module == name)

    @property
    def latest(self) -> AuditRecord | None:
        return self.records[0] if self.records else None
