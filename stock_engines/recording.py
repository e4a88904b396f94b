"""
stock_engines.recording -- Ledger commands into validated ledger records.

Responsibility:
    Validate a CREATE/UPDATE ledger command, resolve its master-data
    references and compute the record's derived fields.  Every missing or
    invalid field is collected and reported in ONE ValidationError, the
    way the entry forms list them.

Architecture position:
    Engines -- pure functions, zero I/O.  Called by the transaction
    engine during phase 2 (validate & compute), against the post-reversal
    snapshot.

Failure modes:
    - ValidationError listing every offending field.
    - MasterItemNotFoundError when a referenced id is not registered under
      the expected category.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from stock_kernel.domain.commands import (
    LedgerCommand,
    RecordDelivery,
    RecordFuel,
    RecordIssue,
    RecordPreExpanding,
    RecordProduction,
    RecordReceiving,
    RecordSecondExpanding,
)
from stock_kernel.domain.master import MasterCategory
from stock_kernel.domain.quantities import round_kg, round_pcs
from stock_kernel.domain.records import (
    LARGE_BEADS_ITEM_ID,
    LARGE_BEADS_ITEM_NAME,
    DeliveryEntry,
    DeliveryUnit,
    FuelEntry,
    IssueEntry,
    LedgerRecord,
    PreExpandingEntry,
    ProductionEntry,
    ReceivingEntry,
    SecondExpandingEntry,
    Shift,
)
from stock_kernel.domain.state import FactoryState, PlantParameters
from stock_kernel.exceptions import ValidationError
from stock_engines.derivations import (
    fuel_used,
    large_beads_production,
    production_weight_on,
    standard_production,
)

FINISHED_GOODS_SOURCE = "Finished Goods Stock"


class _FieldCheck:
    """Collects offending field names while reading raw command values."""

    def __init__(self) -> None:
        self.invalid: list[str] = []

    def _fail(self, name: str) -> None:
        if name not in self.invalid:
            self.invalid.append(name)

    def day(self, value: Any) -> date | None:
        if not isinstance(value, date):
            self._fail("date")
            return None
        return value.date() if isinstance(value, datetime) else value

    def text(self, name: str, value: Any) -> str | None:
        if value is None or not str(value).strip():
            self._fail(name)
            return None
        return str(value).strip()

    def shift(self, value: Any) -> Shift | None:
        try:
            return Shift(value)
        except ValueError:
            self._fail("shift")
            return None

    def kg(self, name: str, value: Any, *, positive: bool = True) -> Decimal | None:
        """Rounded kg; must be > 0 (or >= 0 when ``positive`` is False)."""
        if value is None or value == "":
            self._fail(name)
            return None
        try:
            result = round_kg(value, name)
        except ValidationError:
            self._fail(name)
            return None
        if result < 0 or (positive and result == 0):
            self._fail(name)
            return None
        return result

    def pcs(self, name: str, value: Any, *, positive: bool = True) -> int | None:
        """Floored pieces; must be > 0 (or >= 0 when ``positive`` is False)."""
        if value is None or value == "":
            self._fail(name)
            return None
        try:
            result = round_pcs(value, name)
        except ValidationError:
            self._fail(name)
            return None
        if result < 0 or (positive and result == 0):
            self._fail(name)
            return None
        return result

    def silo(self, name: str, value: Any, allowed: tuple[int, ...]) -> int | None:
        if isinstance(value, bool) or not isinstance(value, int) or value not in allowed:
            self._fail(name)
            return None
        return value

    def require(self, name: str, condition: bool) -> None:
        if not condition:
            self._fail(name)

    def raise_if_invalid(self) -> None:
        if self.invalid:
            raise ValidationError(tuple(self.invalid))


def _silo_ids(params: PlantParameters) -> tuple[int, ...]:
    return tuple(range(1, params.total_silos + 1))


def build_record(
    command: LedgerCommand,
    state: FactoryState,
    params: PlantParameters,
    record_id: str,
) -> LedgerRecord:
    """Validate ``command`` and return the record it writes."""
    builder = _BUILDERS.get(type(command))
    if builder is None:
        raise TypeError(f"Not a ledger command: {type(command).__name__}")
    return builder(command, state, params, record_id)


def _raw_material_movement(command, state, params, record_id, record_type):
    check = _FieldCheck()
    day = check.day(command.date)
    material_id = check.text("material_id", command.material_id)
    kg = check.kg("kg", command.kg)
    check.raise_if_invalid()
    state.registry.require(material_id, MasterCategory.RAW_MATERIAL)
    return record_type(id=record_id, date=day, material_id=material_id, kg=kg)


def _build_receiving(command: RecordReceiving, state, params, record_id) -> ReceivingEntry:
    return _raw_material_movement(command, state, params, record_id, ReceivingEntry)


def _build_issue(command: RecordIssue, state, params, record_id) -> IssueEntry:
    return _raw_material_movement(command, state, params, record_id, IssueEntry)


def _build_pre_expanding(command: RecordPreExpanding, state, params, record_id) -> PreExpandingEntry:
    check = _FieldCheck()
    day = check.day(command.date)
    shift = check.shift(command.shift)
    machine = check.text("machine", command.machine)
    if machine is not None:
        check.require("machine", machine in params.pre_expander_machines)
    material_id = check.text("material_id", command.material_id)
    operator_id = check.text("operator_id", command.operator_id)
    quantity = check.kg("quantity_kg", command.quantity_kg)
    silo_id = check.silo("output_silo_id", command.output_silo_id, _silo_ids(params))
    check.raise_if_invalid()

    state.registry.require(material_id, MasterCategory.RAW_MATERIAL)
    state.registry.require(operator_id, MasterCategory.OPERATOR)
    return PreExpandingEntry(
        id=record_id,
        date=day,
        shift=shift,
        machine=machine,
        material_id=material_id,
        operator_id=operator_id,
        quantity_kg=quantity,
        output_silo_id=silo_id,
    )


def _build_second_expanding(
    command: RecordSecondExpanding, state, params, record_id,
) -> SecondExpandingEntry:
    check = _FieldCheck()
    day = check.day(command.date)
    shift = check.shift(command.shift)
    quantity = check.kg("quantity_kg", command.quantity_kg)
    dest = check.silo("dest_silo_id", command.dest_silo_id, params.second_expanding_destinations)
    check.raise_if_invalid()

    operator_id = (command.operator_id or "").strip()
    if operator_id:
        state.registry.require(operator_id, MasterCategory.OPERATOR)
    return SecondExpandingEntry(
        id=record_id,
        date=day,
        shift=shift,
        operator_id=operator_id,
        quantity_kg=quantity,
        dest_silo_id=dest,
        is_large_beads=bool(command.is_large_beads),
    )


def _build_production(command: RecordProduction, state, params, record_id) -> ProductionEntry:
    check = _FieldCheck()
    day = check.day(command.date)
    shift = check.shift(command.shift)
    operator_id = check.text("operator_id", command.operator_id)

    if command.is_large_beads:
        total_qty = check.kg("total_qty", command.total_qty)
        check.raise_if_invalid()
        state.registry.require(operator_id, MasterCategory.OPERATOR)
        figures = large_beads_production(total_qty)
        return ProductionEntry(
            id=record_id,
            date=day,
            shift=shift,
            operator_id=operator_id,
            silo_id=params.production_ready_silo_id,
            is_large_beads=True,
            total_qty=total_qty,
            total_prod_weight=figures.total_prod_weight,
        )

    machine_id = check.text("machine_id", command.machine_id)
    item_id = check.text("item_id", command.item_id)
    total_qty = check.pcs("total_qty", command.total_qty)
    damaged_qty = check.pcs("damaged_qty", command.damaged_qty or 0, positive=False)
    avg_wet_weight = check.kg("avg_wet_weight", command.avg_wet_weight)
    silo_id = command.silo_id if command.silo_id is not None else params.production_ready_silo_id
    silo_id = check.silo("silo_id", silo_id, _silo_ids(params))
    if total_qty is not None and damaged_qty is not None:
        check.require("damaged_qty", damaged_qty <= total_qty)
    check.raise_if_invalid()

    state.registry.require(operator_id, MasterCategory.OPERATOR)
    state.registry.require(machine_id, MasterCategory.PRODUCTION_MACHINE)
    state.registry.require(item_id, MasterCategory.FINISHED_GOODS)
    figures = standard_production(total_qty, damaged_qty, avg_wet_weight, params.dry_weight_ratio)
    return ProductionEntry(
        id=record_id,
        date=day,
        shift=shift,
        operator_id=operator_id,
        silo_id=silo_id,
        is_large_beads=False,
        total_qty=total_qty,
        total_prod_weight=figures.total_prod_weight,
        machine_id=machine_id,
        item_id=item_id,
        good_qty=figures.good_qty,
        damaged_qty=damaged_qty,
        avg_wet_weight=avg_wet_weight,
        dry_weight=figures.dry_weight,
        damaged_weight=figures.damaged_weight,
    )


def _build_delivery(command: RecordDelivery, state, params, record_id) -> DeliveryEntry:
    check = _FieldCheck()
    day = check.day(command.date)
    item_id = check.text("item_id", command.item_id)
    is_large_beads = item_id == LARGE_BEADS_ITEM_ID
    if is_large_beads:
        quantity: Decimal | int | None = check.kg("quantity", command.quantity)
    else:
        quantity = check.pcs("quantity", command.quantity)
    check.raise_if_invalid()

    if is_large_beads:
        return DeliveryEntry(
            id=record_id,
            date=day,
            item_id=item_id,
            item_name=LARGE_BEADS_ITEM_NAME,
            quantity=quantity,
            unit=DeliveryUnit.KG,
            source=f"Silo {params.production_ready_silo_id}",
            remarks=command.remarks or "",
        )
    item = state.registry.require(item_id, MasterCategory.FINISHED_GOODS)
    return DeliveryEntry(
        id=record_id,
        date=day,
        item_id=item_id,
        item_name=item.name,
        quantity=quantity,
        unit=DeliveryUnit.PIECES,
        source=FINISHED_GOODS_SOURCE,
        remarks=command.remarks or "",
    )


def _build_fuel(command: RecordFuel, state, params, record_id) -> FuelEntry:
    check = _FieldCheck()
    day = check.day(command.date)
    shift = check.shift(command.shift)
    opening = check.kg("opening", command.opening, positive=False)
    purchased = check.kg("purchased", command.purchased, positive=False)
    closing = check.kg("closing", command.closing, positive=False)
    check.raise_if_invalid()

    return FuelEntry(
        id=record_id,
        date=day,
        shift=shift,
        opening=opening,
        purchased=purchased,
        closing=closing,
        used=fuel_used(opening, purchased, closing),
        total_prod_weight_on_date=production_weight_on(state.ledgers.production, day),
    )


_BUILDERS = {
    RecordReceiving: _build_receiving,
    RecordIssue: _build_issue,
    RecordPreExpanding: _build_pre_expanding,
    RecordSecondExpanding: _build_second_expanding,
    RecordProduction: _build_production,
    RecordDelivery: _build_delivery,
    RecordFuel: _build_fuel,
}
