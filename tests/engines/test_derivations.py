"""
Tests for derived record fields (stock_engines.derivations).

Covers:
- Dry weight and production weight rounding
- Good / damaged split
- Large Beads figures
- Fuel used and the negative-consumption rejection
- Per-day production weight
"""

from datetime import date
from decimal import Decimal

import pytest

from stock_engines.derivations import (
    dry_weight,
    fuel_used,
    large_beads_production,
    production_weight_on,
    standard_production,
)
from stock_kernel.domain.ledger import Ledger, LedgerKind
from stock_kernel.domain.records import ProductionEntry, Shift
from stock_kernel.exceptions import ValidationError


class TestStandardProduction:

    def test_dry_weight_uses_ratio(self):
        assert dry_weight(Decimal("1.250")) == Decimal("1.175")
        assert dry_weight(Decimal("1"), Decimal("0.9")) == Decimal("0.900")

    def test_dry_weight_rounds_half_up(self):
        # 0.0125 * 0.94 = 0.01175
        assert dry_weight(Decimal("0.0125")) == Decimal("0.012")

    def test_figures(self):
        figures = standard_production(100, 4, Decimal("0.500"))
        assert figures.dry_weight == Decimal("0.470")
        assert figures.total_prod_weight == Decimal("47.000")
        assert figures.good_qty == 96
        assert figures.damaged_weight == Decimal("1.880")

    def test_good_qty_never_negative(self):
        assert standard_production(5, 9, Decimal("1")).good_qty == 0


def test_large_beads_figures():
    figures = large_beads_production(Decimal("50.0004"))
    assert figures.total_prod_weight == Decimal("50.000")
    assert figures.good_qty == 0
    assert figures.dry_weight == 0


class TestFuelUsed:

    def test_used(self):
        assert fuel_used(Decimal("100"), Decimal("20"), Decimal("90")) == Decimal("30.000")

    def test_closing_above_available_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            fuel_used(Decimal("10"), Decimal("0"), Decimal("11"))
        assert exc_info.value.fields == ("closing",)


def test_production_weight_on_day():
    def entry(record_id, day, weight):
        return ProductionEntry(
            id=record_id, date=day, shift=Shift.DAY, operator_id="op", silo_id=5,
            is_large_beads=True, total_qty=Decimal(weight), total_prod_weight=Decimal(weight),
        )

    ledger = Ledger(LedgerKind.PRODUCTION, (
        entry("a", date(2024, 3, 1), "10.5"),
        entry("b", date(2024, 3, 1), "4.25"),
        entry("c", date(2024, 3, 2), "99"),
    ))
    assert production_weight_on(ledger, date(2024, 3, 1)) == Decimal("14.750")
    assert production_weight_on(ledger, date(2024, 3, 3)) == Decimal("0.000")
