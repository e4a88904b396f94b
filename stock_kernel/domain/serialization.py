"""
Snapshot Serialization -- FactoryState <-> JSON-compatible document.

Responsibility:
    Encode the whole snapshot as one JSON-serializable dict with the
    camelCase keys the stored document has always used (``masterItems``,
    ``rawMaterialStock``, ``receivingLogs`` ...) and decode it back.
    Decimals travel as strings, dates as ISO strings, enums as values.

Architecture position:
    Kernel > Domain -- pure transformation, zero I/O.  The snapshot store
    (stock_services.snapshot_store) writes the document; this module never
    touches a database.

Failure modes:
    - ValidationError when a stored quantity cannot be parsed.
    - KeyError / ValueError on a structurally broken document; those are
      storage corruption, not command errors, and propagate unchanged.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any

from stock_kernel.domain.audit import AuditAction, AuditRecord, AuditTrail
from stock_kernel.domain.ledger import Ledger, LedgerKind, LedgerStore
from stock_kernel.domain.master import (
    FINISHED_GOODS_UOM,
    MasterCategory,
    MasterItem,
    MasterRegistry,
    default_item_id,
)
from stock_kernel.domain.pools import (
    FinishedGoodsPool,
    FinishedGoodsStock,
    RawMaterialPool,
    RawMaterialStock,
    Silo,
    SiloPool,
    SiloType,
)
from stock_kernel.domain.quantities import round_kg
from stock_kernel.domain.records import (
    DeliveryEntry,
    DeliveryUnit,
    FuelEntry,
    IssueEntry,
    PreExpandingEntry,
    ProductionEntry,
    ReceivingEntry,
    SecondExpandingEntry,
    Shift,
)
from stock_kernel.domain.state import FactoryState, OpeningLatch

DOCUMENT_KEYS = (
    "masterItems",
    "rawMaterialStock",
    "receivingLogs",
    "issueLogs",
    "silos",
    "siloOpeningSet",
    "preExpandingLogs",
    "secondExpandingLogs",
    "productionLogs",
    "deliveryLogs",
    "fgStock",
    "fgOpeningSet",
    "fuelLogs",
    "auditLogs",
)


def _kg(value: Decimal) -> str:
    return str(value)


def _qty(value: Decimal | int) -> str | int:
    return value if isinstance(value, int) else str(value)


def _load_qty(value: Any) -> Decimal | int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return round_kg(value)


# Encoding


def _encode_record(record: Any) -> dict[str, Any]:
    if isinstance(record, (ReceivingEntry, IssueEntry)):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "materialId": record.material_id,
            "kg": _kg(record.kg),
        }
    if isinstance(record, PreExpandingEntry):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "shift": record.shift.value,
            "machine": record.machine,
            "materialId": record.material_id,
            "operatorId": record.operator_id,
            "quantityKg": _kg(record.quantity_kg),
            "outputSiloId": record.output_silo_id,
        }
    if isinstance(record, SecondExpandingEntry):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "shift": record.shift.value,
            "operatorId": record.operator_id,
            "quantityKg": _kg(record.quantity_kg),
            "destSiloId": record.dest_silo_id,
            "isLargeBeads": record.is_large_beads,
        }
    if isinstance(record, ProductionEntry):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "shift": record.shift.value,
            "machineId": record.machine_id,
            "operatorId": record.operator_id,
            "siloId": record.silo_id,
            "itemId": record.item_id,
            "isLargeBeads": record.is_large_beads,
            "totalQty": _qty(record.total_qty),
            "goodQty": record.good_qty,
            "damagedQty": record.damaged_qty,
            "avgWetWeight": _kg(record.avg_wet_weight),
            "dryWeight": _kg(record.dry_weight),
            "totalProdWeight": _kg(record.total_prod_weight),
            "damagedWeight": _kg(record.damaged_weight),
        }
    if isinstance(record, DeliveryEntry):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "itemId": record.item_id,
            "itemName": record.item_name,
            "quantity": _qty(record.quantity),
            "unit": record.unit.value,
            "source": record.source,
            "remarks": record.remarks,
        }
    if isinstance(record, FuelEntry):
        return {
            "id": record.id,
            "date": record.date.isoformat(),
            "shift": record.shift.value,
            "opening": _kg(record.opening),
            "purchased": _kg(record.purchased),
            "closing": _kg(record.closing),
            "used": _kg(record.used),
            "totalProdWeightOnDate": _kg(record.total_prod_weight_on_date),
        }
    raise TypeError(f"Not a ledger record: {type(record).__name__}")


def state_to_document(state: FactoryState) -> dict[str, Any]:
    """Encode a snapshot as a JSON-serializable dict."""
    ledgers = state.ledgers
    return {
        "masterItems": [
            {
                "id": item.id,
                "name": item.name,
                "category": item.category.value,
                **({"uom": item.uom} if item.uom is not None else {}),
            }
            for item in state.registry
        ],
        "rawMaterialStock": [
            {
                "materialId": row.material_id,
                "materialName": row.material_name,
                "kg": _kg(row.kg),
                "issuedKg": _kg(row.issued_kg),
            }
            for row in state.raw_materials
        ],
        "receivingLogs": [_encode_record(r) for r in ledgers.receiving],
        "issueLogs": [_encode_record(r) for r in ledgers.issue],
        "silos": [
            {
                "id": silo.id,
                "currentStock": _kg(silo.current_stock),
                "materialName": silo.material_name,
                "type": silo.type.value,
            }
            for silo in state.silos
        ],
        "siloOpeningSet": state.silo_opening.is_set,
        "preExpandingLogs": [_encode_record(r) for r in ledgers.pre_expanding],
        "secondExpandingLogs": [_encode_record(r) for r in ledgers.second_expanding],
        "productionLogs": [_encode_record(r) for r in ledgers.production],
        "deliveryLogs": [_encode_record(r) for r in ledgers.delivery],
        "fgStock": [
            {
                "itemId": row.item_id,
                "stockPieces": row.stock_pieces,
                "totalWeight": _kg(row.total_weight),
            }
            for row in state.finished_goods
        ],
        "fgOpeningSet": state.fg_opening.is_set,
        "fuelLogs": [_encode_record(r) for r in ledgers.fuel],
        "auditLogs": [
            {
                "id": a.id,
                "module": a.module,
                "action": a.action.value,
                "oldValue": a.old_value,
                "newValue": a.new_value,
                "user": a.actor,
                "date": a.date.isoformat(),
                "time": a.time.isoformat(),
            }
            for a in state.audit
        ],
    }


# Decoding


def _day(value: str) -> date:
    return date.fromisoformat(value)


def _decode_receiving(doc: dict[str, Any]) -> ReceivingEntry:
    return ReceivingEntry(
        id=doc["id"], date=_day(doc["date"]), material_id=doc["materialId"], kg=round_kg(doc["kg"]),
    )


def _decode_issue(doc: dict[str, Any]) -> IssueEntry:
    return IssueEntry(
        id=doc["id"], date=_day(doc["date"]), material_id=doc["materialId"], kg=round_kg(doc["kg"]),
    )


def _decode_pre_expanding(doc: dict[str, Any]) -> PreExpandingEntry:
    return PreExpandingEntry(
        id=doc["id"],
        date=_day(doc["date"]),
        shift=Shift(doc["shift"]),
        machine=doc["machine"],
        material_id=doc["materialId"],
        operator_id=doc["operatorId"],
        quantity_kg=round_kg(doc["quantityKg"]),
        output_silo_id=int(doc["outputSiloId"]),
    )


def _decode_second_expanding(doc: dict[str, Any]) -> SecondExpandingEntry:
    return SecondExpandingEntry(
        id=doc["id"],
        date=_day(doc["date"]),
        shift=Shift(doc["shift"]),
        operator_id=doc.get("operatorId", ""),
        quantity_kg=round_kg(doc["quantityKg"]),
        dest_silo_id=int(doc["destSiloId"]),
        is_large_beads=bool(doc.get("isLargeBeads", False)),
    )


def _decode_production(doc: dict[str, Any]) -> ProductionEntry:
    is_large_beads = bool(doc["isLargeBeads"])
    total_qty = round_kg(doc["totalQty"]) if is_large_beads else int(doc["totalQty"])
    return ProductionEntry(
        id=doc["id"],
        date=_day(doc["date"]),
        shift=Shift(doc["shift"]),
        operator_id=doc["operatorId"],
        silo_id=int(doc["siloId"]),
        is_large_beads=is_large_beads,
        total_qty=total_qty,
        total_prod_weight=round_kg(doc["totalProdWeight"]),
        machine_id=doc.get("machineId", ""),
        item_id=doc.get("itemId", ""),
        good_qty=int(doc.get("goodQty", 0)),
        damaged_qty=int(doc.get("damagedQty", 0)),
        avg_wet_weight=round_kg(doc.get("avgWetWeight", 0)),
        dry_weight=round_kg(doc.get("dryWeight", 0)),
        damaged_weight=round_kg(doc.get("damagedWeight", 0)),
    )


def _decode_delivery(doc: dict[str, Any]) -> DeliveryEntry:
    unit = DeliveryUnit(doc["unit"])
    quantity = round_kg(doc["quantity"]) if unit is DeliveryUnit.KG else int(doc["quantity"])
    return DeliveryEntry(
        id=doc["id"],
        date=_day(doc["date"]),
        item_id=doc["itemId"],
        item_name=doc["itemName"],
        quantity=quantity,
        unit=unit,
        source=doc["source"],
        remarks=doc.get("remarks") or "",
    )


def _decode_fuel(doc: dict[str, Any]) -> FuelEntry:
    return FuelEntry(
        id=doc["id"],
        date=_day(doc["date"]),
        shift=Shift(doc["shift"]),
        opening=round_kg(doc["opening"]),
        purchased=round_kg(doc["purchased"]),
        closing=round_kg(doc["closing"]),
        used=round_kg(doc["used"]),
        total_prod_weight_on_date=round_kg(doc.get("totalProdWeightOnDate", 0)),
    )


_LEDGER_DECODERS = (
    (LedgerKind.RECEIVING, "receivingLogs", _decode_receiving),
    (LedgerKind.ISSUE, "issueLogs", _decode_issue),
    (LedgerKind.PRE_EXPANDING, "preExpandingLogs", _decode_pre_expanding),
    (LedgerKind.SECOND_EXPANDING, "secondExpandingLogs", _decode_second_expanding),
    (LedgerKind.PRODUCTION, "productionLogs", _decode_production),
    (LedgerKind.DELIVERY, "deliveryLogs", _decode_delivery),
    (LedgerKind.FUEL, "fuelLogs", _decode_fuel),
)


def state_from_document(
    document: dict[str, Any],
    *,
    capacity: Decimal = Decimal("600.000"),
    default_finished_goods: tuple[str, ...] = (),
    total_silos: int = 0,
    silo_types: dict[int, SiloType] | None = None,
) -> FactoryState:
    """Decode a stored document.

    Silos 1..``total_silos`` missing from the document are restored empty,
    typed from ``silo_types``; the silo set is fixed and never shrinks.

    Default finished-goods items missing from the stored registry (matched
    by case-insensitive name) are appended together with a zeroed stock
    row, so a catalogue that grew since the document was written shows up.
    """
    items = [
        MasterItem(
            id=doc["id"],
            name=doc["name"],
            category=MasterCategory(doc["category"]),
            uom=doc.get("uom"),
        )
        for doc in document.get("masterItems", [])
    ]
    fg_rows = [
        FinishedGoodsStock(
            item_id=doc["itemId"],
            stock_pieces=int(doc["stockPieces"]),
            total_weight=round_kg(doc["totalWeight"]),
        )
        for doc in document.get("fgStock", [])
    ]

    known = {
        item.name.lower() for item in items if item.category is MasterCategory.FINISHED_GOODS
    }
    for name in default_finished_goods:
        if name.lower() in known:
            continue
        item = MasterItem(
            id=default_item_id(name),
            name=name,
            category=MasterCategory.FINISHED_GOODS,
            uom=FINISHED_GOODS_UOM,
        )
        items.append(item)
        fg_rows.append(FinishedGoodsStock(item_id=item.id))
        known.add(name.lower())

    silos = [
        Silo(
            id=int(doc["id"]),
            current_stock=round_kg(doc["currentStock"]),
            material_name=doc.get("materialName", ""),
            type=SiloType(doc.get("type", SiloType.NORMAL.value)),
        )
        for doc in document.get("silos", [])
    ]
    stored_ids = {silo.id for silo in silos}
    types = silo_types or {}
    silos.extend(
        Silo(id=silo_id, type=types.get(silo_id, SiloType.NORMAL))
        for silo_id in range(1, total_silos + 1)
        if silo_id not in stored_ids
    )
    silos.sort(key=lambda silo: silo.id)

    ledgers = LedgerStore()
    for kind, key, decode in _LEDGER_DECODERS:
        records = tuple(decode(doc) for doc in document.get(key, []))
        ledgers = ledgers.with_ledger(Ledger(kind, records))

    audit = AuditTrail(
        records=tuple(
            AuditRecord(
                id=doc["id"],
                module=doc["module"],
                action=AuditAction(doc["action"]),
                old_value=doc.get("oldValue", ""),
                new_value=doc.get("newValue", ""),
                actor=doc.get("user", ""),
                date=_day(doc["date"]),
                time=time.fromisoformat(doc["time"]),
            )
            for doc in document.get("auditLogs", [])
        )
    )

    return FactoryState(
        registry=MasterRegistry(items=tuple(items)),
        silos=SiloPool(rows=tuple(silos), capacity=round_kg(capacity)),
        raw_materials=RawMaterialPool(
            rows=tuple(
                RawMaterialStock(
                    material_id=doc["materialId"],
                    material_name=doc["materialName"],
                    kg=round_kg(doc["kg"]),
                    issued_kg=round_kg(doc["issuedKg"]),
                )
                for doc in document.get("rawMaterialStock", [])
            )
        ),
        finished_goods=FinishedGoodsPool(rows=tuple(fg_rows)),
        ledgers=ledgers,
        silo_opening=OpeningLatch.INITIALIZED if document.get("siloOpeningSet") else OpeningLatch.UNINITIALIZED,
        fg_opening=OpeningLatch.INITIALIZED if document.get("fgOpeningSet") else OpeningLatch.UNINITIALIZED,
        audit=audit,
    )
