"""
Tests for stock patches (stock_engines.deltas).

Covers:
- Forward patch per record type
- Exact inverse: forward then reverse leaves every quantity unchanged
- Relabels are forward-only and read the source silo at apply time
- Deltas are checked in order
"""

from decimal import Decimal

import pytest

from stock_engines.deltas import (
    PoolDelta,
    SiloRelabel,
    StockPatch,
    apply_patch,
    forward_patch,
    reverse_patch,
)
from stock_kernel.domain.pools import PoolKind, StockField
from stock_kernel.domain.records import (
    DeliveryEntry,
    DeliveryUnit,
    FuelEntry,
    IssueEntry,
    PreExpandingEntry,
    ProductionEntry,
    SecondExpandingEntry,
    Shift,
)
from stock_kernel.exceptions import InsufficientStockError
from tests.conftest import FISH_BOX, OPERATOR_ID, RAW_ID, RAW_NAME, TODAY, silo_level


def _pre_expanding(quantity="40", silo=3):
    return PreExpandingEntry(
        id="pe", date=TODAY, shift=Shift.DAY, machine="Pre Expander 1",
        material_id=RAW_ID, operator_id=OPERATOR_ID,
        quantity_kg=Decimal(quantity), output_silo_id=silo,
    )


class TestForwardPatch:

    def test_issue(self, plant):
        patch = forward_patch(IssueEntry("i", TODAY, RAW_ID, Decimal("25")), plant)
        assert patch.deltas == (
            PoolDelta(PoolKind.RAW_MATERIAL, RAW_ID, StockField.KG, Decimal("-25")),
            PoolDelta(PoolKind.RAW_MATERIAL, RAW_ID, StockField.ISSUED_KG, Decimal("25")),
        )
        assert patch.relabels == ()

    def test_pre_expanding_relabels_with_material_name(self, plant):
        patch = forward_patch(_pre_expanding(), plant)
        assert patch.relabels == (SiloRelabel(3, material_name=RAW_NAME),)

    def test_second_expanding_moves_from_intermediate(self, plant):
        record = SecondExpandingEntry(
            id="se", date=TODAY, shift=Shift.DAY, operator_id="",
            quantity_kg=Decimal("30"), dest_silo_id=7,
        )
        patch = forward_patch(record, plant)
        assert [(d.key, d.amount) for d in patch.deltas] == [
            (10, Decimal("-30")), (7, Decimal("30")),
        ]
        assert patch.relabels == (SiloRelabel(7, from_silo=10),)

    def test_standard_production(self, plant):
        record = ProductionEntry(
            id="p", date=TODAY, shift=Shift.DAY, operator_id=OPERATOR_ID, silo_id=5,
            is_large_beads=False, total_qty=10, total_prod_weight=Decimal("4.700"),
            item_id=FISH_BOX, good_qty=9, damaged_qty=1, dry_weight=Decimal("0.470"),
        )
        patch = forward_patch(record, plant)
        assert [(d.pool, d.field, d.amount) for d in patch.deltas] == [
            (PoolKind.SILO, StockField.CURRENT_STOCK, Decimal("-4.700")),
            (PoolKind.FINISHED_GOODS, StockField.STOCK_PIECES, 9),
            (PoolKind.FINISHED_GOODS, StockField.TOTAL_WEIGHT, Decimal("4.230")),
        ]

    def test_finished_goods_delivery_touches_pieces_only(self, plant):
        record = DeliveryEntry(
            id="d", date=TODAY, item_id=FISH_BOX, item_name="Fish box", quantity=3,
            unit=DeliveryUnit.PIECES, source="Finished Goods Stock",
        )
        patch = forward_patch(record, plant)
        assert patch.touched() == ((PoolKind.FINISHED_GOODS, FISH_BOX, StockField.STOCK_PIECES),)

    def test_large_beads_delivery_draws_from_production_ready(self, plant):
        record = DeliveryEntry(
            id="d", date=TODAY, item_id="large_beads", item_name="Large Beads",
            quantity=Decimal("20"), unit=DeliveryUnit.KG, source="Silo 5",
        )
        patch = forward_patch(record, plant)
        assert patch.deltas == (
            PoolDelta(PoolKind.SILO, 5, StockField.CURRENT_STOCK, Decimal("-20")),
        )

    def test_fuel_is_empty(self, plant):
        record = FuelEntry(
            id="f", date=TODAY, shift=Shift.DAY, opening=Decimal("1"),
            purchased=Decimal("0"), closing=Decimal("0"), used=Decimal("1"),
        )
        assert forward_patch(record, plant).is_empty


class TestInverse:

    def test_reverse_is_negation_without_relabels(self, plant):
        record = _pre_expanding()
        forward = forward_patch(record, plant)
        reverse = reverse_patch(record, plant)
        assert reverse.deltas == tuple(d.negate() for d in forward.deltas)
        assert reverse.relabels == ()

    def test_forward_then_reverse_restores_quantities(self, stocked_plant):
        record = _pre_expanding("40", 3)
        after = apply_patch(stocked_plant, forward_patch(record, stocked_plant))
        restored = apply_patch(after, reverse_patch(record, after))
        assert restored.raw_materials == stocked_plant.raw_materials
        assert silo_level(restored, 3) == silo_level(stocked_plant, 3)
        # the occupant name is last-known, not restored
        assert restored.silos.get(3).material_name == RAW_NAME


class TestApplyPatch:

    def test_relabel_reads_source_silo_at_apply_time(self, stocked_plant):
        patch = StockPatch(
            deltas=(
                PoolDelta(PoolKind.SILO, 10, StockField.CURRENT_STOCK, Decimal("-10")),
                PoolDelta(PoolKind.SILO, 7, StockField.CURRENT_STOCK, Decimal("10")),
            ),
            relabels=(SiloRelabel(7, from_silo=10),),
        )
        after = apply_patch(stocked_plant, patch)
        assert after.silos.get(7).material_name == RAW_NAME
        assert silo_level(after, 10) == Decimal("90.000")

    def test_failure_leaves_input_untouched(self, stocked_plant):
        patch = StockPatch(
            deltas=(
                PoolDelta(PoolKind.SILO, 7, StockField.CURRENT_STOCK, Decimal("10")),
                PoolDelta(PoolKind.SILO, 10, StockField.CURRENT_STOCK, Decimal("-1000")),
            )
        )
        with pytest.raises(InsufficientStockError):
            apply_patch(stocked_plant, patch)
        assert silo_level(stocked_plant, 7) == Decimal("0.000")

    def test_unchecked_allows_transient_negative(self, plant):
        patch = StockPatch(
            deltas=(PoolDelta(PoolKind.SILO, 1, StockField.CURRENT_STOCK, Decimal("-5")),)
        )
        after = apply_patch(plant, patch, check=False)
        assert silo_level(after, 1) == Decimal("-5.000")
