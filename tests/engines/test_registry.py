"""
Tests for master data maintenance and the referential-integrity guard
(stock_engines.registry).
"""

import pytest

from stock_engines.registry import references
from stock_engines.transaction import apply_command
from stock_kernel.domain.audit import AuditAction
from stock_kernel.domain.commands import (
    AddMasterItem,
    RecordPreExpanding,
    RecordProduction,
    RecordReceiving,
    RemoveMasterItem,
)
from stock_kernel.domain.master import MasterCategory
from stock_kernel.exceptions import (
    DuplicateMasterItemError,
    InUseError,
    MasterItemNotFoundError,
    ValidationError,
)
from tests.conftest import (
    FISH_BOX,
    MACHINE_ID,
    MINI_BOX,
    OPERATOR_ID,
    PRE_EXPANDER,
    RAW_ID,
    TODAY,
    run,
)


class TestAddMasterItem:

    def test_finished_goods_item_gets_stock_row(self, plant, context):
        outcome = apply_command(plant, AddMasterItem(name="  Mega box ", category=MasterCategory.FINISHED_GOODS), context)
        item = outcome.state.registry.find(outcome.record_id)
        assert item.name == "Mega box"
        assert item.uom == "Nos"
        assert outcome.state.finished_goods.get(item.id).stock_pieces == 0
        assert outcome.audit.module == "Master Data"
        assert outcome.audit.action is AuditAction.CREATE
        assert outcome.audit.new_value == "Add Finished Goods: Mega box"

    def test_raw_material_gets_stock_row(self, plant, context):
        outcome = apply_command(plant, AddMasterItem(name="GPPS", category=MasterCategory.RAW_MATERIAL), context)
        row = outcome.state.raw_materials.get(outcome.record_id)
        assert row.material_name == "GPPS"

    def test_operator_has_no_stock(self, plant, context):
        outcome = apply_command(plant, AddMasterItem(name="Sunil", category=MasterCategory.OPERATOR), context)
        assert outcome.record_id not in outcome.state.raw_materials
        assert outcome.record_id not in outcome.state.finished_goods
        assert outcome.state.registry.find(outcome.record_id).uom is None

    def test_duplicate_name_in_category(self, plant, context):
        with pytest.raises(DuplicateMasterItemError) as exc_info:
            apply_command(plant, AddMasterItem(name="fish BOX", category=MasterCategory.FINISHED_GOODS), context)
        assert exc_info.value.code == "DUPLICATE_MASTER_ITEM"

    def test_same_name_other_category_allowed(self, plant, context):
        outcome = apply_command(plant, AddMasterItem(name="Fish box", category=MasterCategory.OPERATOR), context)
        assert outcome.state.registry.find(outcome.record_id).category is MasterCategory.OPERATOR

    def test_blank_name(self, plant, context):
        with pytest.raises(ValidationError) as exc_info:
            apply_command(plant, AddMasterItem(name="   "), context)
        assert exc_info.value.fields == ("name",)


class TestRemoveMasterItem:

    def test_unreferenced_item_is_removed(self, plant, context):
        outcome = apply_command(plant, RemoveMasterItem(item_id=MINI_BOX), context)
        assert outcome.state.registry.find(MINI_BOX) is None
        assert MINI_BOX not in outcome.state.finished_goods
        assert outcome.audit.action is AuditAction.DELETE
        assert outcome.audit.old_value == "Mini box"

    def test_referenced_item_is_kept(self, plant, context):
        state = run(plant, RecordReceiving(material_id=RAW_ID, kg="10", date=TODAY), context)
        with pytest.raises(InUseError) as exc_info:
            apply_command(state, RemoveMasterItem(item_id=RAW_ID), context)
        assert exc_info.value.references == {"receiving": 1}
        assert state.registry.find(RAW_ID) is not None

    def test_removal_allowed_once_references_are_gone(self, plant, context):
        created = apply_command(plant, RecordReceiving(material_id=RAW_ID, kg="10", date=TODAY), context)
        state = run(created.state, RecordReceiving.delete(created.record_id), context)
        state = run(state, RemoveMasterItem(item_id=RAW_ID), context)
        assert RAW_ID not in state.raw_materials

    def test_unknown_item(self, plant, context):
        with pytest.raises(MasterItemNotFoundError):
            apply_command(plant, RemoveMasterItem(item_id="ghost"), context)


def test_references_counts_every_ledger(stocked_plant, context):
    state = run(
        stocked_plant,
        RecordProduction(
            date=TODAY, shift="Day", operator_id=OPERATOR_ID, machine_id=MACHINE_ID,
            item_id=FISH_BOX, total_qty=10, avg_wet_weight="1",
        ),
        context,
    )
    state = run(
        state,
        RecordPreExpanding(
            date=TODAY, shift="Day", machine=PRE_EXPANDER, material_id=RAW_ID,
            operator_id=OPERATOR_ID, quantity_kg="1", output_silo_id=2,
        ),
        context,
    )
    assert references(state, OPERATOR_ID) == {"pre_expanding": 2, "production": 1}
    assert references(state, RAW_ID) == {"receiving": 1, "issue": 1, "pre_expanding": 2}
    assert references(state, MACHINE_ID) == {"production": 1}
    assert references(state, MINI_BOX) == {}
