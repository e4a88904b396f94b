"""
stock_engines.deltas -- Stock patches: forward rules, exact inverses, apply.

Responsibility:
    Translate one ledger record into the StockPatch it causes (the delta
    table below), invert a patch, and apply a patch to a snapshot.

        Receiving         RM.kg +q
        Issue             RM.kg -q, RM.issued_kg +q
        Pre-Expanding     RM.issued_kg -q, Silo[out] +q, relabel out
        Second-Expanding  Silo[10] -q, Silo[dest] +q, dest inherits 10's name
        Production (FG)   Silo[src] -w, FG.pieces +good, FG.weight +good*dry
        Production (LB)   Silo[10] -w, Silo[5] +w, 5 inherits 10's name
        Delivery (FG)     FG.pieces -q
        Delivery (LB)     Silo[5] -q
        Fuel              nothing

Architecture position:
    Engines -- pure functions over kernel value types, zero I/O.

Invariants enforced:
    - EXACT_COMPENSATION: ``reverse_patch(r, s)`` is the negation of every
      delta of ``forward_patch(r, s)``; applying both leaves every touched
      quantity exactly where it was.
    - Relabels are forward-only.  A silo's material name is its last-known
      occupant, so an inverse patch never restores it.
    - NON_NEGATIVE_STOCK / SILO_CAPACITY through the pools' own checks.

Failure modes:
    - PoolEntryNotFoundError, InsufficientStockError, CapacityExceededError
      from ``apply_patch``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from stock_kernel.domain.pools import PoolKind, StockField
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
from stock_kernel.domain.state import FactoryState, PlantParameters


@dataclass(frozen=True, slots=True)
class PoolDelta:
    """A signed change to one field of one pool entry."""

    pool: PoolKind
    key: Any
    field: StockField
    amount: Decimal | int

    def negate(self) -> PoolDelta:
        return replace(self, amount=-self.amount)


@dataclass(frozen=True, slots=True)
class SiloRelabel:
    """Set a silo's last-known occupant after the deltas are applied.

    ``from_silo`` copies the name another silo holds at apply time;
    otherwise ``material_name`` is used as given.
    """

    silo_id: int
    material_name: str = ""
    from_silo: int | None = None


@dataclass(frozen=True)
class StockPatch:
    deltas: tuple[PoolDelta, ...] = ()
    relabels: tuple[SiloRelabel, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.deltas and not self.relabels

    def inverse(self) -> StockPatch:
        """Negated deltas, no relabels."""
        return StockPatch(deltas=tuple(d.negate() for d in self.deltas))

    def touched(self) -> tuple[tuple[PoolKind, Any, StockField], ...]:
        return tuple(dict.fromkeys((d.pool, d.key, d.field) for d in self.deltas))


def _material_name(state: FactoryState, material_id: str) -> str:
    row = state.raw_materials.find(material_id)
    if row is not None:
        return row.material_name
    item = state.registry.find(material_id)
    return item.name if item is not None else ""


def forward_patch(
    record: LedgerRecord,
    state: FactoryState,
    parameters: PlantParameters | None = None,
) -> StockPatch:
    """The patch ``record`` applies to ``state``."""
    params = parameters or PlantParameters()

    if isinstance(record, ReceivingEntry):
        return StockPatch(
            deltas=(PoolDelta(PoolKind.RAW_MATERIAL, record.material_id, StockField.KG, record.kg),)
        )

    if isinstance(record, IssueEntry):
        return StockPatch(
            deltas=(
                PoolDelta(PoolKind.RAW_MATERIAL, record.material_id, StockField.KG, -record.kg),
                PoolDelta(PoolKind.RAW_MATERIAL, record.material_id, StockField.ISSUED_KG, record.kg),
            )
        )

    if isinstance(record, PreExpandingEntry):
        return StockPatch(
            deltas=(
                PoolDelta(
                    PoolKind.RAW_MATERIAL,
                    record.material_id,
                    StockField.ISSUED_KG,
                    -record.quantity_kg,
                ),
                PoolDelta(
                    PoolKind.SILO,
                    record.output_silo_id,
                    StockField.CURRENT_STOCK,
                    record.quantity_kg,
                ),
            ),
            relabels=(
                SiloRelabel(
                    record.output_silo_id,
                    material_name=_material_name(state, record.material_id),
                ),
            ),
        )

    if isinstance(record, SecondExpandingEntry):
        source = params.intermediate_silo_id
        return StockPatch(
            deltas=(
                PoolDelta(PoolKind.SILO, source, StockField.CURRENT_STOCK, -record.quantity_kg),
                PoolDelta(
                    PoolKind.SILO, record.dest_silo_id, StockField.CURRENT_STOCK, record.quantity_kg,
                ),
            ),
            relabels=(SiloRelabel(record.dest_silo_id, from_silo=source),),
        )

    if isinstance(record, ProductionEntry):
        if record.is_large_beads:
            source = params.intermediate_silo_id
            return StockPatch(
                deltas=(
                    PoolDelta(
                        PoolKind.SILO, source, StockField.CURRENT_STOCK, -record.total_prod_weight,
                    ),
                    PoolDelta(
                        PoolKind.SILO,
                        record.silo_id,
                        StockField.CURRENT_STOCK,
                        record.total_prod_weight,
                    ),
                ),
                relabels=(SiloRelabel(record.silo_id, from_silo=source),),
            )
        return StockPatch(
            deltas=(
                PoolDelta(
                    PoolKind.SILO, record.silo_id, StockField.CURRENT_STOCK, -record.total_prod_weight,
                ),
                PoolDelta(
                    PoolKind.FINISHED_GOODS, record.item_id, StockField.STOCK_PIECES, record.good_qty,
                ),
                PoolDelta(
                    PoolKind.FINISHED_GOODS,
                    record.item_id,
                    StockField.TOTAL_WEIGHT,
                    record.good_weight,
                ),
            )
        )

    if isinstance(record, DeliveryEntry):
        if record.is_large_beads:
            return StockPatch(
                deltas=(
                    PoolDelta(
                        PoolKind.SILO,
                        params.production_ready_silo_id,
                        StockField.CURRENT_STOCK,
                        -record.quantity,
                    ),
                )
            )
        # Pieces only: delivered weight is not tracked.
        return StockPatch(
            deltas=(
                PoolDelta(
                    PoolKind.FINISHED_GOODS, record.item_id, StockField.STOCK_PIECES, -record.quantity,
                ),
            )
        )

    if isinstance(record, FuelEntry):
        return StockPatch()

    raise TypeError(f"Not a ledger record: {type(record).__name__}")


def reverse_patch(
    record: LedgerRecord,
    state: FactoryState,
    parameters: PlantParameters | None = None,
) -> StockPatch:
    """The exact inverse of the record's forward patch."""
    return forward_patch(record, state, parameters).inverse()


_POOL_ATTR = {
    PoolKind.SILO: "silos",
    PoolKind.RAW_MATERIAL: "raw_materials",
    PoolKind.FINISHED_GOODS: "finished_goods",
}


def pool_of(state: FactoryState, kind: PoolKind):
    return getattr(state, _POOL_ATTR[kind])


def read_field(state: FactoryState, kind: PoolKind, key: Any, stock_field: StockField):
    return getattr(pool_of(state, kind).get(key), stock_field.value)


def apply_patch(state: FactoryState, patch: StockPatch, *, check: bool = True) -> FactoryState:
    """Apply every delta, then every relabel, returning a new snapshot.

    Deltas are applied in order; each one is checked against the value
    left by the previous ones.  With ``check=False`` the pools accept
    out-of-range values and the caller must verify the touched entries.
    """
    pools = {kind: pool_of(state, kind) for kind in PoolKind}
    for delta in patch.deltas:
        pools[delta.pool] = pools[delta.pool].apply_delta(
            delta.key, delta.field, delta.amount, check=check,
        )

    silos = pools[PoolKind.SILO]
    for relabel in patch.relabels:
        name = relabel.material_name
        if relabel.from_silo is not None:
            name = silos.get(relabel.from_silo).material_name
        silos = silos.relabel(relabel.silo_id, name)

    return replace(
        state,
        silos=silos,
        raw_materials=pools[PoolKind.RAW_MATERIAL],
        finished_goods=pools[PoolKind.FINISHED_GOODS],
    )


def verify_entries(
    state: FactoryState,
    before: FactoryState,
    entries: tuple[tuple[PoolKind, Any, StockField], ...],
) -> None:
    """Check the invariants of ``entries`` in ``state``.

    Errors report the value each entry held in ``before`` and the net
    change between the two snapshots.
    """
    for kind, key, stock_field in entries:
        old = read_field(before, kind, key, stock_field)
        new = read_field(state, kind, key, stock_field)
        pool_of(state, kind).verify(key, stock_field, old, new - old)
