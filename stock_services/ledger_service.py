"""
stock_services.ledger_service -- StockLedgerService, the single writer.

Responsibility:
    Own the current FactoryState.  Serialize every command, run it
    through the pure transaction engine, swap in the new snapshot on
    success and then persist it through a SnapshotStore.

Architecture position:
    Services -- imperative shell over stock_engines + stock_kernel.
    The only place that holds mutable state (the snapshot reference).

Invariants enforced:
    - ATOMIC_COMMAND: the snapshot reference is swapped only after the
      engine returned a complete new value; a rejected command leaves it
      untouched.
    - Single writer: one ``threading.Lock`` serializes ``apply_command``.
      Readers take ``snapshot`` without the lock; it is always a complete,
      immutable value.

Failure modes:
    - Domain errors never escape ``apply_command``; they come back as a
      REJECTED CommandResult carrying the typed exception.
    - A persistence failure is logged (``snapshot_persist_failed``) and
      does not undo the commit.

Usage:
    from stock_services import StockLedgerService

    service = StockLedgerService.from_config(get_active_config(), store)
    result = service.apply_command(RecordReceiving(material_id=..., kg=100, date=day))
    if result.is_success:
        ...
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from stock_config.bridges import build_plant_parameters, restore_state
from stock_config.schema import PlantConfig
from stock_engines.context import EngineContext
from stock_engines.transaction import apply_command
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.commands import Command, LedgerCommand
from stock_kernel.domain.serialization import state_to_document
from stock_kernel.domain.state import FactoryState, PlantParameters
from stock_kernel.exceptions import StockKernelError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.selectors.efficiency_selector import EfficiencySelector
from stock_kernel.selectors.stock_selector import StockSelector
from stock_services.snapshot_store import SnapshotStore

logger = get_logger("services.ledger")


class CommandStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command as seen by the caller."""

    status: CommandStatus
    record_id: str | None = None
    error: StockKernelError | None = None

    @property
    def is_success(self) -> bool:
        return self.status is CommandStatus.ACCEPTED

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None


class StockLedgerService:
    """
    Serialized entry point for every stock-affecting command.

    Contract:
        ``apply_command`` never raises a StockKernelError; it returns a
        CommandResult.  Programming errors (TypeError and the like) still
        propagate.
    """

    def __init__(
        self,
        state: FactoryState,
        store: SnapshotStore | None = None,
        *,
        parameters: PlantParameters | None = None,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._state = state
        self._store = store
        self._lock = threading.Lock()
        self._context = EngineContext(
            parameters=parameters or PlantParameters(),
            clock=clock or SystemClock(),
            **({"id_factory": id_factory} if id_factory is not None else {}),
        )

    @classmethod
    def from_config(
        cls,
        config: PlantConfig,
        store: SnapshotStore | None = None,
        **kwargs,
    ) -> StockLedgerService:
        """Load the stored snapshot (or start fresh) for ``config``."""
        document = store.load() if store is not None else None
        state = restore_state(config, document)
        logger.info(
            "ledger_service_started",
            extra={
                "config_id": config.config_id,
                "restored": document is not None,
                "audit_records": len(state.audit),
            },
        )
        return cls(state, store, parameters=build_plant_parameters(config), **kwargs)

    @property
    def snapshot(self) -> FactoryState:
        """The current snapshot; immutable, safe to hold."""
        return self._state

    @property
    def parameters(self) -> PlantParameters:
        return self._context.parameters

    def stock(self) -> StockSelector:
        return StockSelector(self._state, self.parameters)

    def efficiency(self) -> EfficiencySelector:
        return EfficiencySelector(self._state, self.parameters)

    def apply_command(self, command: Command) -> CommandResult:
        """Apply one command; persist the new snapshot if it is accepted."""
        command_name = type(command).__name__
        with self._lock, LogContext.bind(
            command_id=str(uuid.uuid4()),
            actor_id=getattr(command, "actor", None) or self.parameters.default_actor,
            record_id=getattr(command, "record_id", None),
        ):
            try:
                outcome = apply_command(self._state, command, self._context)
            except StockKernelError as exc:
                logger.warning(
                    "command_rejected",
                    extra={
                        "command": command_name,
                        "action": _action_of(command),
                        "error_code": exc.code,
                        "error_message": str(exc),
                    },
                )
                return CommandResult(status=CommandStatus.REJECTED, error=exc)

            self._state = outcome.state
            logger.info(
                "command_accepted",
                extra={
                    "command": command_name,
                    "action": _action_of(command),
                    "result_record_id": outcome.record_id,
                    "audit_module": outcome.audit.module,
                },
            )
            self._persist(outcome.state)
            return CommandResult(status=CommandStatus.ACCEPTED, record_id=outcome.record_id)

    def _persist(self, state: FactoryState) -> None:
        if self._store is None:
            return
        try:
            self._store.save(state_to_document(state))
        except Exception:
            # The commit stands; the next accepted command writes the whole
            # document again.
            logger.exception("snapshot_persist_failed")
            return
        logger.info("snapshot_persisted")


def _action_of(command: Command) -> str | None:
    if isinstance(command, LedgerCommand):
        return command.action.value if hasattr(command.action, "value") else str(command.action)
    return None
