"""
Master Registry -- identities the ledger refers to.

Responsibility:
    Finished-goods items, raw materials, operators and production machines.
    Ledger records carry only their ids; names are looked up here.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    The registry engine (stock_engines.registry) is the only writer.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum

from stock_kernel.exceptions import MasterItemNotFoundError


class MasterCategory(str, Enum):
    """Registry categories.  Values are the labels operators see."""

    FINISHED_GOODS = "Finished Goods"
    RAW_MATERIAL = "Raw Material"
    OPERATOR = "Operator"
    PRODUCTION_MACHINE = "Production Machine"


FINISHED_GOODS_UOM = "Nos"


@dataclass(frozen=True, slots=True)
class MasterItem:
    id: str
    name: str
    category: MasterCategory
    uom: str | None = None


def default_item_id(name: str) -> str:
    """Id of a seeded catalogue item: lower-cased, whitespace -> ``_``."""
    return re.sub(r"\s+", "_", name.lower())


@dataclass(frozen=True)
class MasterRegistry:
    """Ordered, immutable set of master items."""

    items: tuple[MasterItem, ...] = ()

    def __iter__(self) -> Iterator[MasterItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def find(self, item_id: str) -> MasterItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def require(self, item_id: str, category: MasterCategory | None = None) -> MasterItem:
        """Return the item, checking its category when one is given.

        Raises:
            MasterItemNotFoundError: unknown id, or registered under
                another category.
        """
        item = self.find(item_id)
        if item is None or (category is not None and item.category is not category):
            raise MasterItemNotFoundError(item_id, category.value if category else None)
        return item

    def in_category(self, category: MasterCategory) -> tuple[MasterItem, ...]:
        return tuple(item for item in self.items if item.category is category)

    def has_name(self, name: str, category: MasterCategory) -> bool:
        """Case-insensitive name lookup within one category."""
        wanted = name.strip().lower()
        return any(
            item.name.lower() == wanted for item in self.in_category(category)
        )

    def add(self, item: MasterItem) -> MasterRegistry:
        return replace(self, items=self.items + (item,))

    def remove(self, item_id: str) -> MasterRegistry:
        return replace(self, items=tuple(i for i in self.items if i.id != item_id))
