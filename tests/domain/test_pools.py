"""
Tests for the immutable stock pools (stock_kernel.domain.pools).

Covers:
- apply_delta returns a new pool and leaves the old one untouched
- NON_NEGATIVE_STOCK and SILO_CAPACITY with the amounts in the error
- Unchecked deltas followed by verify
- Opening-stock levels: clamping and zero-fill
- Row lifecycle (add/remove/put)
"""

from decimal import Decimal

import pytest

from stock_kernel.domain.pools import (
    FinishedGoodsPool,
    FinishedGoodsStock,
    RawMaterialPool,
    RawMaterialStock,
    SiloType,
    StockField,
    empty_silos,
)
from stock_kernel.exceptions import (
    CapacityExceededError,
    InsufficientStockError,
    PoolEntryNotFoundError,
)


@pytest.fixture
def silos():
    return empty_silos(11, {5: SiloType.PRODUCTION_READY, 10: SiloType.INTERMEDIATE})


class TestSiloPool:

    def test_empty_silos_numbered_from_one(self, silos):
        assert silos.keys() == tuple(range(1, 12))
        assert silos.get(5).type is SiloType.PRODUCTION_READY
        assert silos.get(1).type is SiloType.NORMAL
        assert silos.capacity == Decimal("600.000")

    def test_apply_delta_is_copy_on_write(self, silos):
        updated = silos.apply_delta(3, StockField.CURRENT_STOCK, Decimal("40"))
        assert updated.get(3).current_stock == Decimal("40.000")
        assert silos.get(3).current_stock == Decimal("0.000")

    def test_capacity_exceeded(self, silos):
        full = silos.apply_delta(5, StockField.CURRENT_STOCK, Decimal("580"))
        with pytest.raises(CapacityExceededError) as exc_info:
            full.apply_delta(5, StockField.CURRENT_STOCK, Decimal("30"))
        err = exc_info.value
        assert err.silo_id == 5
        assert err.current == Decimal("580.000")
        assert err.requested == Decimal("30")
        assert err.capacity == Decimal("600.000")
        assert err.code == "CAPACITY_EXCEEDED"

    def test_fill_to_exact_capacity(self, silos):
        full = silos.apply_delta(5, StockField.CURRENT_STOCK, Decimal("600"))
        assert full.get(5).current_stock == Decimal("600.000")
        assert full.fill_ratio(5) == 1

    def test_insufficient_stock_reports_available(self, silos):
        stocked = silos.apply_delta(10, StockField.CURRENT_STOCK, Decimal("30"))
        with pytest.raises(InsufficientStockError) as exc_info:
            stocked.apply_delta(10, StockField.CURRENT_STOCK, Decimal("-40"))
        assert exc_info.value.available == Decimal("30.000")
        assert exc_info.value.requested == Decimal("40")

    def test_unknown_silo(self, silos):
        with pytest.raises(PoolEntryNotFoundError):
            silos.apply_delta(12, StockField.CURRENT_STOCK, Decimal("1"))

    def test_unchecked_delta_then_verify(self, silos):
        negative = silos.apply_delta(2, StockField.CURRENT_STOCK, Decimal("-5"), check=False)
        assert negative.get(2).current_stock == Decimal("-5.000")
        with pytest.raises(InsufficientStockError) as exc_info:
            negative.verify(2, StockField.CURRENT_STOCK, Decimal("0"), Decimal("-5"))
        assert exc_info.value.available == Decimal("0")

    def test_set_levels_clamps_and_zero_fills(self, silos):
        stocked = silos.apply_delta(4, StockField.CURRENT_STOCK, Decimal("100"))
        levels = stocked.set_levels({1: Decimal("700"), 2: Decimal("-3"), 3: Decimal("12.5")})
        assert levels.get(1).current_stock == Decimal("600.000")
        assert levels.get(2).current_stock == Decimal("0.000")
        assert levels.get(3).current_stock == Decimal("12.500")
        assert levels.get(4).current_stock == Decimal("0.000")

    def test_relabel(self, silos):
        assert silos.relabel(3, "PS Beads").get(3).material_name == "PS Beads"


class TestRawMaterialPool:

    def test_issue_moves_kg_to_issued(self):
        pool = RawMaterialPool(rows=(RawMaterialStock("rm", "PS", kg=Decimal("100")),))
        pool = pool.apply_delta("rm", StockField.KG, Decimal("-40"))
        pool = pool.apply_delta("rm", StockField.ISSUED_KG, Decimal("40"))
        row = pool.get("rm")
        assert (row.kg, row.issued_kg) == (Decimal("60.000"), Decimal("40.000"))

    def test_no_capacity_ceiling(self):
        pool = RawMaterialPool(rows=(RawMaterialStock("rm", "PS"),))
        pool = pool.apply_delta("rm", StockField.KG, Decimal("100000"))
        assert pool.get("rm").kg == Decimal("100000.000")

    def test_put_unknown_row_raises(self):
        with pytest.raises(PoolEntryNotFoundError):
            RawMaterialPool().put(RawMaterialStock("rm", "PS"))

    def test_add_and_remove(self):
        pool = RawMaterialPool().add(RawMaterialStock("rm", "PS"))
        assert "rm" in pool
        assert "rm" not in pool.remove("rm")
        assert len(pool.remove("missing")) == 1


class TestFinishedGoodsPool:

    def test_pieces_stay_integers(self):
        pool = FinishedGoodsPool(rows=(FinishedGoodsStock("box"),))
        pool = pool.apply_delta("box", StockField.STOCK_PIECES, 12)
        assert pool.get("box").stock_pieces == 12
        assert isinstance(pool.get("box").stock_pieces, int)

    def test_cannot_deliver_more_than_on_hand(self):
        pool = FinishedGoodsPool(rows=(FinishedGoodsStock("box", stock_pieces=5),))
        with pytest.raises(InsufficientStockError) as exc_info:
            pool.apply_delta("box", StockField.STOCK_PIECES, -6)
        assert exc_info.value.available == 5

    def test_set_levels(self):
        pool = FinishedGoodsPool(
            rows=(FinishedGoodsStock("a", 3, Decimal("1")), FinishedGoodsStock("b", 9))
        )
        pool = pool.set_levels({"a": (10, Decimal("4.25"))})
        assert pool.get("a").stock_pieces == 10
        assert pool.get("a").total_weight == Decimal("4.250")
        assert pool.get("b").stock_pieces == 0
