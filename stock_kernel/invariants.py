"""
Kernel Invariants Contract.

These invariants are structural law. They hold after every accepted command
and no plant configuration may switch them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across the stock pools (non-negativity, capacity),
the transaction engine (atomicity, compensation) and the registry engine
(referential integrity).
"""

from enum import Enum, unique


@unique
class StockInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    NON_NEGATIVE_STOCK = "non_negative_stock"
    """Every kg, issued kg and piece field is >= 0. Enforced by
    the pools' apply_delta before a new pool value is produced."""

    SILO_CAPACITY = "silo_capacity"
    """0 <= silo current stock <= max silo capacity. Enforced by
    SiloPool.apply_delta and opening-stock clamping."""

    ATOMIC_COMMAND = "atomic_command"
    """A rejected command leaves the snapshot unchanged. Enforced by
    computing every command against a new FactoryState value."""

    EXACT_COMPENSATION = "exact_compensation"
    """Deleting a record restores every pool it touched. Enforced by
    deriving the reversal as the exact inverse of the forward patch."""

    REFERENTIAL_INTEGRITY = "referential_integrity"
    """Master items referenced by ledger records cannot be removed.
    Enforced by the registry engine's integrity guard."""

    ONE_SHOT_OPENING = "one_shot_opening"
    """Opening stock is set at most once per pool family. Enforced by
    the OpeningLatch state on the snapshot."""


# All invariants as a frozenset for programmatic checks.
ALL_STOCK_INVARIANTS: frozenset[StockInvariant] = frozenset(StockInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "stock_engines",
    "stock_services",
    "stock_config",
)
