"""
stock_engines.opening -- One-shot opening-stock initialization.

Responsibility:
    Set absolute starting levels for a whole pool family (every silo, or
    every finished-goods item) exactly once, before day-to-day movements
    are recorded against it.

Architecture position:
    Engines -- pure functions, zero I/O.

Invariants enforced:
    - ONE_SHOT_OPENING: accepted only while the family's latch is
      UNINITIALIZED; the latch then flips to INITIALIZED for good.
      Finished goods are also refused once any production is recorded.
    - SILO_CAPACITY: silo levels are clamped to [0, capacity].

Failure modes:
    - AlreadyInitializedError: latch set, or production already exists.
    - ValidationError: unparseable level, negative finished-goods value,
      or a key that is not a member of the pool.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

from stock_kernel.domain.audit import AuditAction, AuditModule
from stock_kernel.domain.commands import SetFinishedGoodsOpeningStock, SetSiloOpeningStock
from stock_kernel.domain.quantities import round_kg, round_pcs
from stock_kernel.domain.state import FactoryState, OpeningLatch
from stock_kernel.exceptions import AlreadyInitializedError, ValidationError
from stock_engines.context import EngineContext, TransactionOutcome, append_audit
from stock_engines.tracer import traced_engine


def _parse(levels: dict, convert) -> tuple[dict, list[str]]:
    parsed: dict = {}
    invalid: list[str] = []
    for key, value in levels.items():
        try:
            parsed[key] = convert(key, value)
        except ValidationError:
            invalid.append(str(key))
    return parsed, invalid


@traced_engine("opening_stock", "1.0", fingerprint_fields=("command",))
def set_silo_opening_stock(
    *,
    state: FactoryState,
    command: SetSiloOpeningStock,
    context: EngineContext,
) -> TransactionOutcome:
    if state.silo_opening.is_set:
        raise AlreadyInitializedError("silo")

    unknown = [str(k) for k in command.levels if k not in state.silos]
    levels, invalid = _parse(dict(command.levels), lambda key, v: round_kg(v, f"silo {key}"))
    if unknown or invalid:
        raise ValidationError(tuple(unknown + invalid))

    working = replace(
        state,
        silos=state.silos.set_levels(levels),
        silo_opening=OpeningLatch.INITIALIZED,
    )
    working, audit = append_audit(
        working,
        context,
        module=AuditModule.SILO_MANAGEMENT,
        action=AuditAction.ADJUST,
        old_value="0",
        new_value="Opening Silo Stock Set",
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit)


def _fg_level(key: Any, value: Any) -> tuple[int, Decimal]:
    try:
        pieces, weight = value
    except (TypeError, ValueError) as e:
        raise ValidationError((str(key),), f"Opening stock for {key} needs (pieces, weight)") from e
    pieces = round_pcs(pieces, f"{key} pieces")
    weight = round_kg(weight, f"{key} weight")
    if pieces < 0 or weight < 0:
        raise ValidationError((str(key),), f"Opening stock for {key} cannot be negative")
    return pieces, weight


@traced_engine("opening_stock", "1.0", fingerprint_fields=("command",))
def set_finished_goods_opening_stock(
    *,
    state: FactoryState,
    command: SetFinishedGoodsOpeningStock,
    context: EngineContext,
) -> TransactionOutcome:
    if state.fg_opening.is_set:
        raise AlreadyInitializedError("finished goods")
    if len(state.ledgers.production):
        raise AlreadyInitializedError(
            "finished goods", "production has already been recorded",
        )

    unknown = [str(k) for k in command.levels if k not in state.finished_goods]
    levels, invalid = _parse(dict(command.levels), _fg_level)
    if unknown or invalid:
        raise ValidationError(tuple(unknown + invalid))

    working = replace(
        state,
        finished_goods=state.finished_goods.set_levels(levels),
        fg_opening=OpeningLatch.INITIALIZED,
    )
    working, audit = append_audit(
        working,
        context,
        module=AuditModule.FINISHED_GOODS,
        action=AuditAction.ADJUST,
        old_value="0",
        new_value="Opening stock set",
        actor=command.actor,
    )
    return TransactionOutcome(state=working, audit=audit)
