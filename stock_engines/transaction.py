"""
stock_engines.transaction -- The compensating-transaction engine.

Responsibility:
    Turn one command into one new FactoryState.  Every create, update or
    delete of a ledger record runs the same three phases:

        1. Reverse   (update/delete) locate the record by id and apply the
                     exact inverse of its forward patch.
        2. Validate  (create/update) build the new record, derive its
                     fields and compute its forward patch against the
                     post-reversal snapshot.
        3. Commit    apply the forward patch, upsert (or drop) the ledger
                     record and append one audit record.

    Reversal and forward-apply are one atomic unit.  The engine only ever
    builds new values, so a failure in any phase leaves the caller's
    snapshot exactly as it was, audit trail included.

Architecture position:
    Engines -- pure functions over kernel value types, zero I/O.
    ``apply_command`` is the single entry point the service calls; opening
    stock, adjustments and registry maintenance are dispatched to their
    own engines from here.

Invariants enforced:
    - ATOMIC_COMMAND: all-or-nothing per command.
    - EXACT_COMPENSATION: an update nets to forward(new) - forward(old).
    - NON_NEGATIVE_STOCK / SILO_CAPACITY: checked on every touched entry.

Failure modes:
    - RecordNotFoundError: update/delete of an unknown record id.
    - ValidationError, MasterItemNotFoundError: from record building.
    - InsufficientStockError, CapacityExceededError: from the pools.
"""

from __future__ import annotations

from dataclasses import replace

from stock_kernel.domain.audit import AuditAction, AuditModule
from stock_kernel.domain.commands import (
    AddMasterItem,
    AdjustFinishedGoodsStock,
    AdjustSiloStock,
    Command,
    CommandAction,
    LedgerCommand,
    RemoveMasterItem,
    SetFinishedGoodsOpeningStock,
    SetSiloOpeningStock,
)
from stock_kernel.domain.ledger import LedgerKind
from stock_kernel.domain.quantities import format_kg
from stock_kernel.domain.records import (
    DeliveryEntry,
    DeliveryUnit,
    FuelEntry,
    IssueEntry,
    LedgerRecord,
    PreExpandingEntry,
    ProductionEntry,
    ReceivingEntry,
    SecondExpandingEntry,
)
from stock_kernel.domain.state import FactoryState, PlantParameters
from stock_kernel.exceptions import ValidationError
from stock_engines.adjustments import adjust_finished_goods_stock, adjust_silo_stock
from stock_engines.context import EngineContext, TransactionOutcome, append_audit
from stock_engines.deltas import apply_patch, forward_patch, reverse_patch, verify_entries
from stock_engines.opening import set_finished_goods_opening_stock, set_silo_opening_stock
from stock_engines.recording import build_record
from stock_engines.registry import add_master_item, remove_master_item
from stock_engines.tracer import traced_engine

AUDIT_MODULE_BY_LEDGER: dict[LedgerKind, AuditModule] = {
    LedgerKind.RECEIVING: AuditModule.RAW_MATERIAL,
    LedgerKind.ISSUE: AuditModule.RAW_MATERIAL,
    LedgerKind.PRE_EXPANDING: AuditModule.PRE_EXPANDING,
    LedgerKind.SECOND_EXPANDING: AuditModule.SILO_MANAGEMENT,
    LedgerKind.PRODUCTION: AuditModule.PRODUCTION,
    LedgerKind.DELIVERY: AuditModule.DELIVERY,
    LedgerKind.FUEL: AuditModule.FUEL_CONSUMPTION,
}

_AUDIT_ACTION = {
    CommandAction.CREATE: AuditAction.CREATE,
    CommandAction.UPDATE: AuditAction.UPDATE,
    CommandAction.DELETE: AuditAction.DELETE,
}


def apply_command(
    state: FactoryState,
    command: Command,
    context: EngineContext | None = None,
) -> TransactionOutcome:
    """Apply one command and return the new snapshot.

    Raises:
        StockKernelError subclasses; ``state`` is never modified.
    """
    context = context or EngineContext()
    if isinstance(command, LedgerCommand):
        return record_transaction(state=state, command=command, context=context)
    if isinstance(command, SetSiloOpeningStock):
        return set_silo_opening_stock(state=state, command=command, context=context)
    if isinstance(command, SetFinishedGoodsOpeningStock):
        return set_finished_goods_opening_stock(state=state, command=command, context=context)
    if isinstance(command, AdjustSiloStock):
        return adjust_silo_stock(state=state, command=command, context=context)
    if isinstance(command, AdjustFinishedGoodsStock):
        return adjust_finished_goods_stock(state=state, command=command, context=context)
    if isinstance(command, AddMasterItem):
        return add_master_item(state=state, command=command, context=context)
    if isinstance(command, RemoveMasterItem):
        return remove_master_item(state=state, command=command, context=context)
    raise TypeError(f"Unsupported command: {type(command).__name__}")


@traced_engine("transaction", "1.0", fingerprint_fields=("command",))
def record_transaction(
    *,
    state: FactoryState,
    command: LedgerCommand,
    context: EngineContext,
) -> TransactionOutcome:
    params = context.parameters
    kind = command.ledger
    action = CommandAction(command.action)
    working = state
    old: LedgerRecord | None = None

    # Phase 1: reverse
    if action is not CommandAction.CREATE:
        if not command.record_id:
            raise ValidationError(("record_id",))
        old = state.ledgers.get(kind).get(command.record_id)
        reversal = reverse_patch(old, state, params)
        # A delete must stand on its own.  An update is checked once the
        # new record's patch is on top (see verify_entries below).
        working = apply_patch(working, reversal, check=action is CommandAction.DELETE)
        working = replace(working, ledgers=working.ledgers.remove(kind, old.id))

    if action is CommandAction.DELETE:
        working, audit = append_audit(
            working,
            context,
            module=AUDIT_MODULE_BY_LEDGER[kind],
            action=AuditAction.DELETE,
            old_value=old.id,
            new_value=_delete_message(old),
            actor=command.actor,
        )
        return TransactionOutcome(state=working, audit=audit, action=action, record_id=old.id)

    # Phase 2: validate & compute against the post-reversal snapshot
    record_id = old.id if old is not None else context.next_id()
    record = build_record(command, working, params, record_id)
    patch = forward_patch(record, working, params)

    # Phase 3: commit
    before = working
    working = apply_patch(working, patch, check=old is None)
    if old is not None:
        # Net effect of the edit, reported against the caller's snapshot
        touched = tuple(dict.fromkeys(reversal.touched() + patch.touched()))
        verify_entries(working, state, touched)
    working = replace(working, ledgers=working.ledgers.upsert(record))
    working, audit = append_audit(
        working,
        context,
        module=AUDIT_MODULE_BY_LEDGER[kind],
        action=_AUDIT_ACTION[action],
        old_value="",
        new_value=_record_message(record, before, working, params),
        actor=command.actor,
    )
    return TransactionOutcome(
        state=working, audit=audit, action=action, record_id=record.id, record=record,
    )


# Audit messages


def _name_of(state: FactoryState, item_id: str) -> str:
    item = state.registry.find(item_id)
    return item.name if item is not None else item_id


def _record_message(
    record: LedgerRecord,
    before: FactoryState,
    after: FactoryState,
    params: PlantParameters,
) -> str:
    if isinstance(record, ReceivingEntry):
        return f"RECEIVING processed: {format_kg(record.kg)}kg of {_name_of(after, record.material_id)}"
    if isinstance(record, IssueEntry):
        return f"ISSUE processed: {format_kg(record.kg)}kg of {_name_of(after, record.material_id)}"
    if isinstance(record, PreExpandingEntry):
        return f"Pre-expanded {format_kg(record.quantity_kg)}kg into Silo {record.output_silo_id}"
    if isinstance(record, SecondExpandingEntry):
        return (
            f"Exp: {format_kg(record.quantity_kg)}kg "
            f"S{params.intermediate_silo_id} -> S{record.dest_silo_id}"
        )
    if isinstance(record, ProductionEntry):
        if not record.is_large_beads:
            return f"FG Recorded: {record.good_qty} pcs of {_name_of(after, record.item_id)}"
        src, dst = params.intermediate_silo_id, record.silo_id
        return (
            f"Large Beads Production: Deducted {format_kg(record.total_prod_weight)} Kg "
            f"from Silo {src} ({format_kg(before.silos.get(src).current_stock)} -> "
            f"{format_kg(after.silos.get(src).current_stock)}), "
            f"Added to Silo {dst} ({format_kg(before.silos.get(dst).current_stock)} -> "
            f"{format_kg(after.silos.get(dst).current_stock)})"
        )
    if isinstance(record, DeliveryEntry):
        unit = "Kg" if record.unit is DeliveryUnit.KG else "Nos"
        return f"Delivered {record.quantity} {unit} of {record.item_name}"
    if isinstance(record, FuelEntry):
        return f"Entry: {format_kg(record.used)}L used on {record.date.isoformat()}"
    raise TypeError(f"Not a ledger record: {type(record).__name__}")


def _delete_message(record: LedgerRecord) -> str:
    if isinstance(record, ReceivingEntry):
        return "Deleted RECEIVING record."
    if isinstance(record, IssueEntry):
        return "Deleted ISSUE record."
    if isinstance(record, PreExpandingEntry):
        return "Deleted record and reversed stock."
    if isinstance(record, SecondExpandingEntry):
        return "Reversed Expansion"
    if isinstance(record, ProductionEntry):
        label = "Large Beads" if record.is_large_beads else "FG"
        return f"Deleted {label} and reversed stock movement"
    if isinstance(record, DeliveryEntry):
        return f"Deleted delivery: restored {record.quantity} {record.unit.value} of {record.item_name}"
    if isinstance(record, FuelEntry):
        return "Deleted record."
    raise TypeError(f"Not a ledger record: {type(record).__name__}")
