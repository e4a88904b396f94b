"""
stock_engines.registry -- Master-data maintenance and referential integrity.

Responsibility:
    Add and remove master items (finished goods, raw materials, operators,
    production machines).  Adding a raw material or finished good opens
    its zeroed stock row; removing one closes it.

Architecture position:
    Engines -- pure functions, zero I/O.

Invariants enforced:
    - REFERENTIAL_INTEGRITY: an item referenced by any ledger record can
      not be removed.  ``references`` is the single definition of which
      record fields point at which master items.
    - Names are unique per category, compared case-insensitively.

Failure modes:
    - ValidationError: blank name.
    - DuplicateMasterItemError: name already used in the category.
    - MasterItemNotFoundError: removing an unknown id.
    - InUseError: removal blocked, with per-ledger reference counts.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace

from stock_kernel.domain.audit import AuditAction, AuditModule
from stock_kernel.domain.commands import AddMasterItem, RemoveMasterItem
from stock_kernel.domain.ledger import LedgerKind
from stock_kernel.domain.master import FINISHED_GOODS_UOM, MasterCategory, MasterItem
from stock_kernel.domain.pools import FinishedGoodsStock, RawMaterialStock
from stock_kernel.domain.state import FactoryState
from stock_kernel.exceptions import DuplicateMasterItemError, InUseError, ValidationError
from stock_engines.context import EngineContext, TransactionOutcome, append_audit
from stock_engines.tracer import traced_engine

# Record fields that hold master-item ids, per ledger.
REFERENCE_FIELDS: dict[LedgerKind, tuple[str, ...]] = {
    LedgerKind.RECEIVING: ("material_id",),
    LedgerKind.ISSUE: ("material_id",),
    LedgerKind.PRE_EXPANDING: ("material_id", "operator_id"),
    LedgerKind.SECOND_EXPANDING: ("operator_id",),
    LedgerKind.PRODUCTION: ("operator_id", "machine_id", "item_id"),
    LedgerKind.DELIVERY: ("item_id",),
    LedgerKind.FUEL: (),
}


def references(state: FactoryState, item_id: str) -> dict[str, int]:
    """Number of records per ledger that reference ``item_id``."""
    counts: Counter[str] = Counter()
    for kind, names in REFERENCE_FIELDS.items():
        if not names:
            continue
        for record in state.ledgers.get(kind):
            if any(getattr(record, name) == item_id for name in names):
                counts[kind.value] += 1
    return dict(counts)


def guard_removal(state: FactoryState, item_id: str) -> None:
    """Raise InUseError when any ledger record references ``item_id``."""
    refs = references(state, item_id)
    if refs:
        raise InUseError(item_id, refs)


@traced_engine("registry", "1.0", fingerprint_fields=("command",))
def add_master_item(
    *,
    state: FactoryState,
    command: AddMasterItem,
    context: EngineContext,
) -> TransactionOutcome:
    name = (command.name or "").strip()
    if not name:
        raise ValidationError(("name",))
    category = MasterCategory(command.category)
    if state.registry.has_name(name, category):
        raise DuplicateMasterItemError(name, category.value)

    item = MasterItem(
        id=context.next_id(),
        name=name,
        category=category,
        uom=FINISHED_GOODS_UOM if category is MasterCategory.FINISHED_GOODS else None,
    )
    working = replace(state, registry=state.registry.add(item))
    if category is MasterCategory.RAW_MATERIAL:
        working = replace(
            working,
            raw_materials=working.raw_materials.add(
                RawMaterialStock(material_id=item.id, material_name=name)
            ),
        )
    elif category is MasterCategory.FINISHED_GOODS:
        working = replace(
            working,
            finished_goods=working.finished_goods.add(FinishedGoodsStock(item_id=item.id)),
        )

    working, audit = append_audit(
        working,
        context,
        module=AuditModule.MASTER_DATA,
        action=AuditAction.CREATE,
        old_value="",
        new_value=f"Add {category.value}: {name}",
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit, record_id=item.id)


@traced_engine("registry", "1.0", fingerprint_fields=("command",))
def remove_master_item(
    *,
    state: FactoryState,
    command: RemoveMasterItem,
    context: EngineContext,
) -> TransactionOutcome:
    item = state.registry.require(command.item_id)
    guard_removal(state, item.id)

    working = replace(
        state,
        registry=state.registry.remove(item.id),
        raw_materials=state.raw_materials.remove(item.id),
        finished_goods=state.finished_goods.remove(item.id),
    )
    working, audit = append_audit(
        working,
        context,
        module=AuditModule.MASTER_DATA,
        action=AuditAction.DELETE,
        old_value=item.name,
        new_value="",
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit, record_id=item.id)
