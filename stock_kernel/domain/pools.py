"""
Stock Pools -- immutable maps of on-hand quantities.

Responsibility:
    Hold the three independent stock pools of the plant: silos (by silo id),
    raw material (by material id) and finished goods (by item id).  Every
    write returns a NEW pool value; a write that would break a pool
    invariant raises and returns nothing, so there is never a partial write.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the snapshot (state.py) and by the engines, which are the
    only callers allowed to produce new pool values.

Invariants enforced:
    - NON_NEGATIVE_STOCK: kg, issued kg, pieces and weight never drop below 0.
    - SILO_CAPACITY: 0 <= silo current stock <= capacity.

Failure modes:
    - PoolEntryNotFoundError when the key is absent.
    - InsufficientStockError (with the available amount) when a delta
      would take a field negative.
    - CapacityExceededError when a silo delta would pass the ceiling.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic, Self, TypeVar

from stock_kernel.domain.quantities import ZERO_KG, round_kg
from stock_kernel.exceptions import (
    CapacityExceededError,
    InsufficientStockError,
    PoolEntryNotFoundError,
)


class SiloType(str, Enum):
    """Production-stage role of a silo."""

    NORMAL = "Normal"
    PRODUCTION_READY = "Production Ready"
    INTERMEDIATE = "Intermediate"


class PoolKind(str, Enum):
    """The three stock pools."""

    SILO = "silo"
    RAW_MATERIAL = "raw_material"
    FINISHED_GOODS = "finished_goods"


class StockField(str, Enum):
    """Quantity fields a delta may touch.  Values are attribute names."""

    CURRENT_STOCK = "current_stock"
    KG = "kg"
    ISSUED_KG = "issued_kg"
    STOCK_PIECES = "stock_pieces"
    TOTAL_WEIGHT = "total_weight"

    @property
    def is_pieces(self) -> bool:
        return self is StockField.STOCK_PIECES


@dataclass(frozen=True, slots=True)
class Silo:
    """A fixed-capacity vessel holding one material at a time."""

    id: int
    current_stock: Decimal = ZERO_KG
    material_name: str = ""
    type: SiloType = SiloType.NORMAL


@dataclass(frozen=True, slots=True)
class RawMaterialStock:
    """On-hand and issued (reserved for expanding) kg of one raw material."""

    material_id: str
    material_name: str
    kg: Decimal = ZERO_KG
    issued_kg: Decimal = ZERO_KG


@dataclass(frozen=True, slots=True)
class FinishedGoodsStock:
    """Piece count and accumulated dry weight of one finished-goods item."""

    item_id: str
    stock_pieces: int = 0
    total_weight: Decimal = ZERO_KG


RowT = TypeVar("RowT", Silo, RawMaterialStock, FinishedGoodsStock)


@dataclass(frozen=True)
class _StockPool(Generic[RowT]):
    """Ordered, immutable collection of pool rows keyed by ``key_attr``."""

    rows: tuple[RowT, ...] = ()

    kind: ClassVar[PoolKind]
    label: ClassVar[str]
    key_attr: ClassVar[str]

    def __iter__(self) -> Iterator[RowT]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __contains__(self, key: object) -> bool:
        return self.find(key) is not None

    def keys(self) -> tuple[Any, ...]:
        return tuple(getattr(row, self.key_attr) for row in self.rows)

    def find(self, key: Any) -> RowT | None:
        for row in self.rows:
            if getattr(row, self.key_attr) == key:
                return row
        return None

    def get(self, key: Any) -> RowT:
        row = self.find(key)
        if row is None:
            raise PoolEntryNotFoundError(self.label, key)
        return row

    def apply_delta(
        self,
        key: Any,
        stock_field: StockField,
        delta: Decimal | int,
        *,
        check: bool = True,
    ) -> Self:
        """Return a new pool with ``delta`` added to one field of one row.

        With ``check=False`` the invariants are not enforced; the caller
        must call ``verify`` on the same entry before the value escapes.

        Raises:
            PoolEntryNotFoundError, InsufficientStockError, CapacityExceededError.
        """
        row = self.get(key)
        current = getattr(row, stock_field.value)
        if stock_field.is_pieces:
            new_value: Decimal | int = int(current) + int(delta)
        else:
            new_value = round_kg(current + delta)
        if check:
            self._check(key, stock_field, current, delta, new_value)
        return self.put(replace(row, **{stock_field.value: new_value}))

    def verify(
        self,
        key: Any,
        stock_field: StockField,
        before: Decimal | int,
        net_delta: Decimal | int,
    ) -> None:
        """Check one entry's current value, reporting against ``before``."""
        value = getattr(self.get(key), stock_field.value)
        self._check(key, stock_field, before, net_delta, value)

    def _check(
        self,
        key: Any,
        stock_field: StockField,
        current: Decimal | int,
        delta: Decimal | int,
        new_value: Decimal | int,
    ) -> None:
        # INVARIANT: NON_NEGATIVE_STOCK
        if new_value < 0:
            raise InsufficientStockError(self.label, key, available=current, requested=-delta)

    def put(self, row: RowT) -> Self:
        """Replace the row with the same key, keeping its position."""
        key = getattr(row, self.key_attr)
        if key not in self:
            raise PoolEntryNotFoundError(self.label, key)
        rows = tuple(row if getattr(r, self.key_attr) == key else r for r in self.rows)
        return replace(self, rows=rows)

    def add(self, row: RowT) -> Self:
        """Append a new row (registry lifecycle)."""
        return replace(self, rows=self.rows + (row,))

    def remove(self, key: Any) -> Self:
        """Drop the row for ``key``; a missing key is a no-op."""
        return replace(
            self,
            rows=tuple(r for r in self.rows if getattr(r, self.key_attr) != key),
        )


@dataclass(frozen=True)
class SiloPool(_StockPool[Silo]):
    """The fixed set of silos, with the capacity ceiling they share."""

    capacity: Decimal = Decimal("600.000")

    kind: ClassVar[PoolKind] = PoolKind.SILO
    label: ClassVar[str] = "Silo"
    key_attr: ClassVar[str] = "id"

    def _check(self, key, stock_field, current, delta, new_value) -> None:
        super()._check(key, stock_field, current, delta, new_value)
        # INVARIANT: SILO_CAPACITY
        if new_value > self.capacity:
            raise CapacityExceededError(
                silo_id=key, current=current, requested=delta, capacity=self.capacity,
            )

    def relabel(self, silo_id: int, material_name: str) -> SiloPool:
        """Record the silo's last-known occupant."""
        return self.put(replace(self.get(silo_id), material_name=material_name))

    def set_levels(self, levels: dict[int, Decimal]) -> SiloPool:
        """Absolute levels for every silo, clamped to [0, capacity].

        Silos absent from ``levels`` are set to zero.
        """
        rows = []
        for silo in self.rows:
            level = round_kg(levels.get(silo.id, ZERO_KG))
            level = min(self.capacity, max(ZERO_KG, level))
            rows.append(replace(silo, current_stock=level))
        return replace(self, rows=tuple(rows))

    def fill_ratio(self, silo_id: int) -> Decimal:
        return self.get(silo_id).current_stock / self.capacity


@dataclass(frozen=True)
class RawMaterialPool(_StockPool[RawMaterialStock]):
    """Raw-material stock, one row per raw-material master item."""

    kind: ClassVar[PoolKind] = PoolKind.RAW_MATERIAL
    label: ClassVar[str] = "Raw Material"
    key_attr: ClassVar[str] = "material_id"


@dataclass(frozen=True)
class FinishedGoodsPool(_StockPool[FinishedGoodsStock]):
    """Finished-goods stock, one row per finished-goods master item."""

    kind: ClassVar[PoolKind] = PoolKind.FINISHED_GOODS
    label: ClassVar[str] = "Finished Goods"
    key_attr: ClassVar[str] = "item_id"

    def set_levels(self, levels: dict[str, tuple[int, Decimal]]) -> FinishedGoodsPool:
        """Absolute (pieces, weight) for every item; absent items become zero."""
        rows = []
        for stock in self.rows:
            pieces, weight = levels.get(stock.item_id, (0, ZERO_KG))
            rows.append(replace(stock, stock_pieces=int(pieces), total_weight=round_kg(weight)))
        return replace(self, rows=tuple(rows))


def empty_silos(
    total_silos: int,
    silo_types: dict[int, SiloType] | None = None,
    capacity: Decimal = Decimal("600.000"),
) -> SiloPool:
    """The initial silo pool: ``total_silos`` empty silos numbered from 1."""
    types = silo_types or {}
    return SiloPool(
        rows=tuple(
            Silo(id=i, type=types.get(i, SiloType.NORMAL))
            for i in range(1, total_silos + 1)
        ),
        capacity=round_kg(capacity),
    )
