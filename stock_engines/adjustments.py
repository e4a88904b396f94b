"""
stock_engines.adjustments -- Manual stock corrections.

Responsibility:
    Apply a signed correction to one silo (kg) or one finished-goods item
    (pieces) after a physical count.  An adjustment writes no ledger
    record, only an ADJUST audit entry carrying the previous value, so it
    can be neither edited nor deleted.

Architecture position:
    Engines -- pure functions, zero I/O.

Invariants enforced:
    - NON_NEGATIVE_STOCK / SILO_CAPACITY through the pools' checks.
    - Finished-goods corrections move pieces only; accumulated weight is
      left as recorded by production.

Failure modes:
    - ValidationError: missing target, missing or zero delta.
    - PoolEntryNotFoundError: unknown silo or item.
    - InsufficientStockError, CapacityExceededError.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from stock_kernel.domain.audit import AuditAction, AuditModule
from stock_kernel.domain.commands import AdjustFinishedGoodsStock, AdjustSiloStock
from stock_kernel.domain.pools import StockField
from stock_kernel.domain.quantities import format_kg, round_kg, to_decimal
from stock_kernel.exceptions import ValidationError
from stock_kernel.domain.state import FactoryState
from stock_engines.context import EngineContext, TransactionOutcome, append_audit
from stock_engines.tracer import traced_engine


def _day_label(day: date | None) -> str:
    return f" on {day.isoformat()}" if day is not None else ""


def _reason_label(reason: str) -> str:
    return f" ({reason.strip()})" if reason and reason.strip() else ""


@traced_engine("adjustment", "1.0", fingerprint_fields=("command",))
def adjust_silo_stock(
    *,
    state: FactoryState,
    command: AdjustSiloStock,
    context: EngineContext,
) -> TransactionOutcome:
    if command.silo_id is None:
        raise ValidationError(("silo_id",))
    if command.delta is None or command.delta == "":
        raise ValidationError(("delta",))
    delta = round_kg(command.delta, "delta")
    if delta == 0:
        raise ValidationError(("delta",), "Adjustment quantity cannot be zero")

    previous = state.silos.get(command.silo_id).current_stock
    working = replace(
        state,
        silos=state.silos.apply_delta(command.silo_id, StockField.CURRENT_STOCK, delta),
    )
    working, audit = append_audit(
        working,
        context,
        module=AuditModule.SILO_MANAGEMENT,
        action=AuditAction.ADJUST,
        old_value=format_kg(previous),
        new_value=(
            f"Manual Adjustment: {format_kg(delta)}kg on Silo {command.silo_id}"
            f"{_day_label(command.date)}{_reason_label(command.reason)}"
        ),
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit)


@traced_engine("adjustment", "1.0", fingerprint_fields=("command",))
def adjust_finished_goods_stock(
    *,
    state: FactoryState,
    command: AdjustFinishedGoodsStock,
    context: EngineContext,
) -> TransactionOutcome:
    if not command.item_id:
        raise ValidationError(("item_id",))
    if command.delta is None or command.delta == "":
        raise ValidationError(("delta",))
    raw = to_decimal(command.delta, "delta")
    if raw != raw.to_integral_value():
        raise ValidationError(("delta",), "Finished goods are adjusted in whole pieces")
    delta = int(raw)
    if delta == 0:
        raise ValidationError(("delta",), "Adjustment quantity cannot be zero")

    previous = state.finished_goods.get(command.item_id).stock_pieces
    working = replace(
        state,
        finished_goods=state.finished_goods.apply_delta(
            command.item_id, StockField.STOCK_PIECES, delta,
        ),
    )
    item = state.registry.find(command.item_id)
    name = item.name if item is not None else command.item_id
    working, audit = append_audit(
        working,
        context,
        module=AuditModule.FINISHED_GOODS,
        action=AuditAction.ADJUST,
        old_value=str(previous),
        new_value=(
            f"Manual Adjustment: {delta:+d} pcs of {name}"
            f"{_day_label(command.date)}{_reason_label(command.reason)}"
        ),
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit, record_id=command.item_id)
