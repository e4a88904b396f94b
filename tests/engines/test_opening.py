"""
Tests for one-shot opening stock (stock_engines.opening).
"""

from decimal import Decimal

import pytest

from stock_engines.transaction import apply_command
from stock_kernel.domain.audit import AuditAction
from stock_kernel.domain.commands import (
    RecordProduction,
    SetFinishedGoodsOpeningStock,
    SetSiloOpeningStock,
)
from stock_kernel.domain.state import OpeningLatch
from stock_kernel.exceptions import AlreadyInitializedError, ValidationError
from tests.conftest import FISH_BOX, MACHINE_ID, MINI_BOX, OPERATOR_ID, TODAY, run, silo_level


class TestSiloOpeningStock:

    def test_sets_absolute_levels(self, plant, context):
        outcome = apply_command(plant, SetSiloOpeningStock(levels={3: "120.5", 5: 700}), context)
        state = outcome.state
        assert silo_level(state, 3) == Decimal("120.500")
        assert silo_level(state, 5) == Decimal("600.000")
        assert silo_level(state, 1) == Decimal("0.000")
        assert state.silo_opening is OpeningLatch.INITIALIZED
        assert outcome.audit.module == "Silo Management"
        assert outcome.audit.action is AuditAction.ADJUST
        assert (outcome.audit.old_value, outcome.audit.new_value) == ("0", "Opening Silo Stock Set")

    def test_only_once(self, plant, context):
        state = run(plant, SetSiloOpeningStock(levels={3: "1"}), context)
        with pytest.raises(AlreadyInitializedError) as exc_info:
            apply_command(state, SetSiloOpeningStock(levels={3: "2"}), context)
        assert exc_info.value.pool_family == "silo"
        assert exc_info.value.code == "ALREADY_INITIALIZED"

    def test_rejects_unknown_and_unparseable(self, plant, context):
        with pytest.raises(ValidationError) as exc_info:
            apply_command(plant, SetSiloOpeningStock(levels={12: "1", 2: "lots"}), context)
        assert exc_info.value.fields == ("12", "2")
        assert plant.silo_opening is OpeningLatch.UNINITIALIZED


class TestFinishedGoodsOpeningStock:

    def test_sets_pieces_and_weight(self, plant, context):
        outcome = apply_command(
            plant, SetFinishedGoodsOpeningStock(levels={FISH_BOX: (50, "20.5")}), context,
        )
        fish = outcome.state.finished_goods.get(FISH_BOX)
        assert (fish.stock_pieces, fish.total_weight) == (50, Decimal("20.500"))
        assert outcome.state.finished_goods.get(MINI_BOX).stock_pieces == 0
        assert outcome.state.fg_opening is OpeningLatch.INITIALIZED
        assert outcome.audit.module == "Finished Goods"
        assert outcome.audit.new_value == "Opening stock set"

    def test_refused_after_production(self, stocked_plant, context):
        state = run(
            stocked_plant,
            RecordProduction(
                date=TODAY, shift="Day", operator_id=OPERATOR_ID, machine_id=MACHINE_ID,
                item_id=FISH_BOX, total_qty=10, avg_wet_weight="1",
            ),
            context,
        )
        with pytest.raises(AlreadyInitializedError) as exc_info:
            apply_command(state, SetFinishedGoodsOpeningStock(levels={FISH_BOX: (1, 1)}), context)
        assert exc_info.value.reason == "production has already been recorded"

    def test_only_once(self, plant, context):
        state = run(plant, SetFinishedGoodsOpeningStock(levels={}), context)
        with pytest.raises(AlreadyInitializedError):
            apply_command(state, SetFinishedGoodsOpeningStock(levels={}), context)

    @pytest.mark.parametrize("level", [(-1, 0), (1, "-0.5"), 7, ("x", 1)])
    def test_rejects_bad_levels(self, plant, context, level):
        with pytest.raises(ValidationError) as exc_info:
            apply_command(plant, SetFinishedGoodsOpeningStock(levels={FISH_BOX: level}), context)
        assert exc_info.value.fields == (FISH_BOX,)
