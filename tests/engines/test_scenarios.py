"""
End-to-end stock flows through the transaction engine.

Each scenario walks a day on the floor, command by command, and checks
every pool the commands touch.
"""

from decimal import Decimal

import pytest

from stock_engines.transaction import apply_command
from stock_kernel.domain.commands import (
    RecordDelivery,
    RecordIssue,
    RecordPreExpanding,
    RecordProduction,
    RecordReceiving,
    RecordSecondExpanding,
    SetSiloOpeningStock,
)
from stock_kernel.exceptions import CapacityExceededError, InsufficientStockError
from tests.conftest import OPERATOR_ID, PRE_EXPANDER, RAW_ID, RAW_NAME, TODAY, run, silo_level


class TestIssueThenPreExpand:

    def test_pre_expanding_and_its_deletion(self, plant, context):
        state = run(plant, RecordReceiving(material_id=RAW_ID, kg="100", date=TODAY), context)
        state = run(state, RecordIssue(material_id=RAW_ID, kg="40", date=TODAY), context)
        expanded = apply_command(
            state,
            RecordPreExpanding(
                date=TODAY, shift="Day", machine=PRE_EXPANDER, material_id=RAW_ID,
                operator_id=OPERATOR_ID, quantity_kg="25", output_silo_id=3,
            ),
            context,
        )
        row = expanded.state.raw_materials.get(RAW_ID)
        assert (row.kg, row.issued_kg) == (Decimal("60.000"), Decimal("15.000"))
        assert silo_level(expanded.state, 3) == Decimal("25.000")
        assert expanded.state.silos.get(3).material_name == RAW_NAME

        deleted = run(expanded.state, RecordPreExpanding.delete(expanded.record_id), context)
        row = deleted.raw_materials.get(RAW_ID)
        assert (row.kg, row.issued_kg) == (Decimal("60.000"), Decimal("40.000"))
        assert silo_level(deleted, 3) == Decimal("0.000")
        assert deleted.silos.get(3).material_name == RAW_NAME
        assert len(deleted.ledgers.pre_expanding) == 0


class TestLargeBeadsFlow:

    @pytest.fixture
    def produced(self, plant, context):
        state = run(plant, SetSiloOpeningStock(levels={10: "300"}), context)
        return run(
            state,
            RecordProduction(
                date=TODAY, shift="Day", operator_id=OPERATOR_ID,
                is_large_beads=True, total_qty="50",
            ),
            context,
        )

    def test_production_moves_intermediate_to_ready(self, produced):
        assert silo_level(produced, 10) == Decimal("250.000")
        assert silo_level(produced, 5) == Decimal("50.000")

    def test_delivery_then_overdraw(self, produced, context):
        state = run(produced, RecordDelivery(date=TODAY, item_id="large_beads", quantity="20"), context)
        assert silo_level(state, 5) == Decimal("30.000")

        with pytest.raises(InsufficientStockError) as exc_info:
            apply_command(state, RecordDelivery(date=TODAY, item_id="large_beads", quantity="40"), context)
        assert exc_info.value.available == Decimal("30.000")
        assert exc_info.value.requested == Decimal("40.000")
        assert silo_level(state, 5) == Decimal("30.000")
        assert len(state.ledgers.delivery) == 1


class TestSiloCapacity:

    @pytest.fixture
    def nearly_full(self, plant, context):
        return run(plant, SetSiloOpeningStock(levels={5: "580", 10: "100"}), context)

    def test_expansion_past_capacity_rejected(self, nearly_full, context):
        with pytest.raises(CapacityExceededError) as exc_info:
            apply_command(
                nearly_full,
                RecordSecondExpanding(date=TODAY, shift="Day", quantity_kg="30", dest_silo_id=5),
                context,
            )
        err = exc_info.value
        assert (err.silo_id, err.current, err.requested, err.capacity) == (
            5, Decimal("580.000"), Decimal("30.000"), Decimal("600.000"),
        )
        assert silo_level(nearly_full, 10) == Decimal("100.000")

    def test_expansion_to_exact_capacity(self, nearly_full, context):
        state = run(
            nearly_full,
            RecordSecondExpanding(date=TODAY, shift="Day", quantity_kg="20", dest_silo_id=5),
            context,
        )
        assert silo_level(state, 5) == Decimal("600.000")
        assert silo_level(state, 10) == Decimal("80.000")
