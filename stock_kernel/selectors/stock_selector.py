"""
Module: stock_kernel.selectors.stock_selector
Responsibility: Read-only views of the three stock pools, the ledgers and
    the audit trail: silo levels and fill ratios, raw material with bag
    equivalents, finished goods with item names.
Architecture position: Kernel > Selectors.

Failure modes:
    - PoolEntryNotFoundError from ``silo()`` for an unknown silo id.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from stock_kernel.domain.audit import AuditModule, AuditRecord
from stock_kernel.domain.ledger import LedgerKind
from stock_kernel.domain.pools import SiloType
from stock_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class SiloLevelDTO:
    silo_id: int
    current_stock: Decimal
    capacity: Decimal
    material_name: str
    type: SiloType

    @property
    def fill_ratio(self) -> Decimal:
        return self.current_stock / self.capacity

    @property
    def free_capacity(self) -> Decimal:
        return self.capacity - self.current_stock


@dataclass(frozen=True)
class RawMaterialDTO:
    material_id: str
    material_name: str
    kg: Decimal
    issued_kg: Decimal
    bags: Decimal


@dataclass(frozen=True)
class FinishedGoodsDTO:
    item_id: str
    item_name: str
    stock_pieces: int
    total_weight: Decimal


class StockSelector(BaseSelector):
    """Current stock as seen by the dashboard and the stock pages."""

    def silos(self) -> list[SiloLevelDTO]:
        capacity = self.state.silos.capacity
        return [
            SiloLevelDTO(
                silo_id=silo.id,
                current_stock=silo.current_stock,
                capacity=capacity,
                material_name=silo.material_name,
                type=silo.type,
            )
            for silo in self.state.silos
        ]

    def silo(self, silo_id: int) -> SiloLevelDTO:
        silo = self.state.silos.get(silo_id)
        return SiloLevelDTO(
            silo_id=silo.id,
            current_stock=silo.current_stock,
            capacity=self.state.silos.capacity,
            material_name=silo.material_name,
            type=silo.type,
        )

    def total_silo_stock(self) -> Decimal:
        return sum((s.current_stock for s in self.state.silos), Decimal("0.000"))

    def raw_materials(self) -> list[RawMaterialDTO]:
        """Raw material stock; ``bags`` is kg over the bag factor, one decimal."""
        factor = self.parameters.bag_conversion_factor
        return [
            RawMaterialDTO(
                material_id=row.material_id,
                material_name=row.material_name,
                kg=row.kg,
                issued_kg=row.issued_kg,
                bags=(row.kg / factor).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
            )
            for row in self.state.raw_materials
        ]

    def finished_goods(self) -> list[FinishedGoodsDTO]:
        registry = self.state.registry
        result = []
        for row in self.state.finished_goods:
            item = registry.find(row.item_id)
            result.append(
                FinishedGoodsDTO(
                    item_id=row.item_id,
                    item_name=item.name if item is not None else row.item_id,
                    stock_pieces=row.stock_pieces,
                    total_weight=row.total_weight,
                )
            )
        return result

    def records(self, kind: LedgerKind) -> tuple:
        """Ledger records of one kind, newest first."""
        return self.state.ledgers.get(kind).records

    def audit(self, module: AuditModule | str | None = None) -> tuple[AuditRecord, ...]:
        """Audit records, newest first, optionally filtered by module."""
        if module is None:
            return self.state.audit.records
        return self.state.audit.for_module(module)
