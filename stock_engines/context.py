"""
stock_engines.context -- What every engine receives besides the snapshot.

Responsibility:
    EngineContext bundles the plant parameters, the clock and the id
    factory so engines stay pure: no engine reads the wall clock or
    generates randomness on its own.  TransactionOutcome is the single
    result type every engine returns.

Architecture position:
    Engines -- pure value types, zero I/O.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from stock_kernel.domain.audit import AuditAction, AuditModule, AuditRecord
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.commands import CommandAction
from stock_kernel.domain.records import LedgerRecord
from stock_kernel.domain.state import FactoryState, PlantParameters


def _uuid4_str() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class EngineContext:
    parameters: PlantParameters = field(default_factory=PlantParameters)
    clock: Clock = field(default_factory=SystemClock)
    id_factory: Callable[[], str] = _uuid4_str

    def actor_for(self, actor: str | None) -> str:
        return actor or self.parameters.default_actor

    def next_id(self) -> str:
        return self.id_factory()


@dataclass(frozen=True)
class TransactionOutcome:
    """A committed command: the new snapshot and what was written.

    ``record`` is the ledger record written by a CREATE/UPDATE and None
    for deletes and non-ledger commands.  ``record_id`` names the record
    (or master item) the command was about.
    """

    state: FactoryState
    audit: AuditRecord
    action: CommandAction | None = None
    record_id: str | None = None
    record: LedgerRecord | None = None


def append_audit(
    state: FactoryState,
    context: EngineContext,
    *,
    module: AuditModule,
    action: AuditAction,
    old_value: str,
    new_value: str,
    actor: str | None,
) -> tuple[FactoryState, AuditRecord]:
    """Append one audit record stamped by the context's clock."""
    record = AuditRecord.create(
        record_id=context.next_id(),
        module=module,
        action=action,
        old_value=old_value,
        new_value=new_value,
        actor=context.actor_for(actor),
        at=context.clock.now(),
    )
    return replace(state, audit=state.audit.append(record)), record
