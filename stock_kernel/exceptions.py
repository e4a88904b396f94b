"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejected command is shown to an operator on the shop floor and may be
resubmitted after correction. Callers must be able to tell "not enough stock
in Silo 10" from "that silo is full" without parsing messages, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (available kg, offending fields, ...)

Example:
    try:
        outcome = apply_command(state, command, context)
    except InsufficientStockError as e:
        show(f"Available: {e.available}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ValidationError
    |   +-- DuplicateMasterItemError
    |
    +-- InsufficientStockError
    +-- CapacityExceededError
    |
    +-- NotFoundError
    |   +-- RecordNotFoundError
    |   +-- MasterItemNotFoundError
    |   +-- PoolEntryNotFoundError
    |
    +-- InUseError
    +-- AlreadyInitializedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                     | When Raised
-------------------------|-----------------------------------------------------
VALIDATION_ERROR         | Missing/invalid command fields (all of them listed)
DUPLICATE_MASTER_ITEM    | Same name already registered in the category
INSUFFICIENT_STOCK       | Source pool below requested quantity
CAPACITY_EXCEEDED        | Destination silo would exceed its ceiling
RECORD_NOT_FOUND         | Editing/deleting a nonexistent ledger record
MASTER_ITEM_NOT_FOUND    | Command references an unknown master item
POOL_ENTRY_NOT_FOUND     | Pool has no row for the key
IN_USE                   | Master item deletion blocked by ledger references
ALREADY_INITIALIZED      | Opening stock latch already set

All errors are synchronous and abort the entire command with no state change.
None is fatal to the process and none is retried automatically.
"""

from decimal import Decimal


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Input validation


class ValidationError(StockKernelError):
    """Command is missing required fields or carries invalid values."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, fields: list[str] | tuple[str, ...], message: str | None = None):
        self.fields = tuple(fields)
        super().__init__(
            message or f"Please fill required fields: {', '.join(self.fields)}"
        )


class DuplicateMasterItemError(ValidationError):
    """A master item with the same name already exists in the category."""

    code: str = "DUPLICATE_MASTER_ITEM"

    def __init__(self, name: str, category: str):
        self.name = name
        self.category = category
        super().__init__(
            ("name",),
            f'An item with the name "{name}" already exists in {category}.',
        )


# Pool invariants


class InsufficientStockError(StockKernelError):
    """Source pool holds less than the requested quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, pool: str, key: str | int, available: Decimal | int, requested: Decimal | int):
        self.pool = pool
        self.key = key
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock in {pool} {key}: "
            f"requested {requested}, available {available}"
        )


class CapacityExceededError(StockKernelError):
    """Destination silo would exceed its fixed ceiling."""

    code: str = "CAPACITY_EXCEEDED"

    def __init__(self, silo_id: int, current: Decimal, requested: Decimal, capacity: Decimal):
        self.silo_id = silo_id
        self.current = current
        self.requested = requested
        self.capacity = capacity
        super().__init__(
            f"Maximum silo capacity is {capacity} kg: Silo {silo_id} holds "
            f"{current} kg, cannot add {requested} kg"
        )


# Lookups


class NotFoundError(StockKernelError):
    """Base exception for missing records, master items and pool rows."""

    code: str = "NOT_FOUND"


class RecordNotFoundError(NotFoundError):
    """Ledger record with given id does not exist."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, ledger: str, record_id: str):
        self.ledger = ledger
        self.record_id = record_id
        super().__init__(f"Record not found in {ledger}: {record_id}")


class MasterItemNotFoundError(NotFoundError):
    """Master item is unknown, or registered under another category."""

    code: str = "MASTER_ITEM_NOT_FOUND"

    def __init__(self, item_id: str, category: str | None = None):
        self.item_id = item_id
        self.category = category
        where = f" in {category}" if category else ""
        super().__init__(f"Master item not found{where}: {item_id}")


class PoolEntryNotFoundError(NotFoundError):
    """Stock pool has no row for the key."""

    code: str = "POOL_ENTRY_NOT_FOUND"

    def __init__(self, pool: str, key: str | int):
        self.pool = pool
        self.key = key
        super().__init__(f"No {pool} entry for {key}")


# Lifecycle


class InUseError(StockKernelError):
    """Master item cannot be removed: ledger records reference it."""

    code: str = "IN_USE"

    def __init__(self, item_id: str, references: dict[str, int]):
        self.item_id = item_id
        self.references = dict(references)
        ledgers = ", ".join(f"{name} ({count})" for name, count in sorted(self.references.items()))
        super().__init__(
            f"Item {item_id} cannot be deleted because it has associated "
            f"stock movements or production records: {ledgers}"
        )


class AlreadyInitializedError(StockKernelError):
    """Opening stock for the pool family can no longer be set."""

    code: str = "ALREADY_INITIALIZED"

    def __init__(self, pool_family: str, reason: str = "opening stock already set"):
        self.pool_family = pool_family
        self.reason = reason
        super().__init__(f"Cannot set {pool_family} opening stock: {reason}")
