"""
Stock Engines - Pure calculation engines for the plant stock ledger.

Every engine takes a FactoryState plus a command and an EngineContext and
returns a TransactionOutcome holding a NEW FactoryState.  Engines never
mutate their inputs, never read the wall clock and never touch a database.

Engines:
    transaction  - Three-phase compensating transaction for ledger commands
    deltas       - Forward patches, exact inverses, patch application
    derivations  - Dry weight, production weight, fuel used
    opening      - One-shot opening stock per pool family
    adjustments  - Manual silo / finished-goods corrections
    registry     - Master data and the referential-integrity guard

Usage:
    from stock_engines import apply_command, EngineContext

    outcome = apply_command(state, RecordReceiving(material_id=..., kg=100, date=day))
    state = outcome.state
"""

from stock_engines.context import EngineContext, TransactionOutcome
from stock_engines.deltas import (
    PoolDelta,
    SiloRelabel,
    StockPatch,
    apply_patch,
    forward_patch,
    reverse_patch,
)
from stock_engines.derivations import (
    ProductionFigures,
    dry_weight,
    fuel_used,
    large_beads_production,
    standard_production,
)
from stock_engines.registry import guard_removal, references
from stock_engines.tracer import traced_engine
from stock_engines.transaction import apply_command

__all__ = [
    # Entry point
    "apply_command",
    "EngineContext",
    "TransactionOutcome",
    # Patches
    "PoolDelta",
    "SiloRelabel",
    "StockPatch",
    "forward_patch",
    "reverse_patch",
    "apply_patch",
    # Derivations
    "ProductionFigures",
    "dry_weight",
    "standard_production",
    "large_beads_production",
    "fuel_used",
    # Registry
    "references",
    "guard_removal",
    # Tracing
    "traced_engine",
]
