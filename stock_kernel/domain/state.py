"""
FactoryState -- the single immutable snapshot of the plant.

Responsibility:
    Bundle the master registry, the three stock pools, the seven ledgers,
    both opening-stock latches and the audit trail into one value.  A
    command never mutates a FactoryState; the transaction engine returns a
    new one built with ``dataclasses.replace`` (structural copy-on-write:
    untouched pools and ledgers are shared between old and new values).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ATOMIC_COMMAND: readers holding an old snapshot never observe a
      partially applied command.
    - ONE_SHOT_OPENING: OpeningLatch moves UNINITIALIZED -> INITIALIZED only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from stock_kernel.domain.audit import AuditTrail
from stock_kernel.domain.ledger import LedgerStore
from stock_kernel.domain.master import (
    FINISHED_GOODS_UOM,
    MasterCategory,
    MasterItem,
    MasterRegistry,
    default_item_id,
)
from stock_kernel.domain.pools import (
    FinishedGoodsPool,
    FinishedGoodsStock,
    RawMaterialPool,
    SiloPool,
    SiloType,
    empty_silos,
)


class OpeningLatch(str, Enum):
    """One-time opening-stock state of a pool family."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"

    @property
    def is_set(self) -> bool:
        return self is OpeningLatch.INITIALIZED


@dataclass(frozen=True)
class PlantParameters:
    """Plant constants the engines compute with.

    Built from the YAML plant configuration by
    ``stock_config.bridges.build_plant_parameters``.
    """

    total_silos: int = 11
    max_silo_capacity: Decimal = Decimal("600.000")
    dry_weight_ratio: Decimal = Decimal("0.94")
    bag_conversion_factor: Decimal = Decimal("25")
    target_fuel_ratio: Decimal = Decimal("0.025")
    intermediate_silo_id: int = 10
    production_ready_silo_id: int = 5
    second_expanding_destinations: tuple[int, ...] = (5, 7)
    pre_expander_machines: tuple[str, ...] = ("Pre Expander 1", "Pre Expander 2")
    default_actor: str = "System User"

    def is_silo(self, silo_id: object) -> bool:
        return isinstance(silo_id, int) and not isinstance(silo_id, bool) and (
            1 <= silo_id <= self.total_silos
        )


@dataclass(frozen=True)
class FactoryState:
    registry: MasterRegistry = field(default_factory=MasterRegistry)
    silos: SiloPool = field(default_factory=SiloPool)
    raw_materials: RawMaterialPool = field(default_factory=RawMaterialPool)
    finished_goods: FinishedGoodsPool = field(default_factory=FinishedGoodsPool)
    ledgers: LedgerStore = field(default_factory=LedgerStore)
    silo_opening: OpeningLatch = OpeningLatch.UNINITIALIZED
    fg_opening: OpeningLatch = OpeningLatch.UNINITIALIZED
    audit: AuditTrail = field(default_factory=AuditTrail)


def initial_state(
    *,
    total_silos: int = 11,
    silo_types: dict[int, SiloType] | None = None,
    capacity: Decimal = Decimal("600"),
    default_finished_goods: tuple[str, ...] = (),
) -> FactoryState:
    """A fresh plant: empty silos and the seeded finished-goods catalogue."""
    items = tuple(
        MasterItem(
            id=default_item_id(name),
            name=name,
            category=MasterCategory.FINISHED_GOODS,
            uom=FINISHED_GOODS_UOM,
        )
        for name in default_finished_goods
    )
    return FactoryState(
        registry=MasterRegistry(items=items),
        silos=empty_silos(total_silos, silo_types, capacity),
        finished_goods=FinishedGoodsPool(
            rows=tuple(FinishedGoodsStock(item_id=item.id) for item in items)
        ),
    )
