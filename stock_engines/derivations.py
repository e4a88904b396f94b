"""
stock_engines.derivations -- Derived-field formulas for ledger records.

Responsibility:
    Compute the fields a record carries beyond what the operator typed:

        dry_weight        = round_kg(avg_wet_weight * dry_weight_ratio)
        total_prod_weight = round_kg(total_qty * dry_weight)      standard
                          = round_kg(total_qty)                   Large Beads
        good_qty          = max(0, total_qty - damaged_qty)
        damaged_weight    = round_kg(damaged_qty * dry_weight)
        used (fuel)       = opening + purchased - closing
        total_prod_weight_on_date = round_kg(sum of production weights that day)

    The values are fixed into the record at create/update time and never
    recomputed afterwards.

Architecture position:
    Engines -- pure functions, zero I/O.

Failure modes:
    - ValidationError when fuel ``used`` comes out negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from stock_kernel.domain.ledger import Ledger
from stock_kernel.domain.quantities import ZERO_KG, round_kg
from stock_kernel.domain.records import ProductionEntry
from stock_kernel.exceptions import ValidationError

DEFAULT_DRY_WEIGHT_RATIO = Decimal("0.94")


@dataclass(frozen=True)
class ProductionFigures:
    """Derived quantities of one production record."""

    dry_weight: Decimal
    total_prod_weight: Decimal
    good_qty: int
    damaged_weight: Decimal


def dry_weight(avg_wet_weight: Decimal, ratio: Decimal = DEFAULT_DRY_WEIGHT_RATIO) -> Decimal:
    return round_kg(avg_wet_weight * ratio)


def standard_production(
    total_qty: int,
    damaged_qty: int,
    avg_wet_weight: Decimal,
    ratio: Decimal = DEFAULT_DRY_WEIGHT_RATIO,
) -> ProductionFigures:
    dry = dry_weight(avg_wet_weight, ratio)
    return ProductionFigures(
        dry_weight=dry,
        total_prod_weight=round_kg(total_qty * dry),
        good_qty=max(0, total_qty - damaged_qty),
        damaged_weight=round_kg(damaged_qty * dry),
    )


def large_beads_production(total_qty: Decimal) -> ProductionFigures:
    return ProductionFigures(
        dry_weight=ZERO_KG,
        total_prod_weight=round_kg(total_qty),
        good_qty=0,
        damaged_weight=ZERO_KG,
    )


def fuel_used(opening: Decimal, purchased: Decimal, closing: Decimal) -> Decimal:
    """Litres consumed over the shift.

    Raises:
        ValidationError: closing exceeds opening plus purchases.
    """
    used = round_kg(opening + purchased - closing)
    if used < 0:
        raise ValidationError(
            ("closing",),
            f"Fuel used cannot be negative: opening {opening} + purchased "
            f"{purchased} - closing {closing} = {used}",
        )
    return used


def production_weight_on(production: Ledger[ProductionEntry], day: date) -> Decimal:
    """Total production weight recorded for ``day``."""
    return round_kg(sum((r.total_prod_weight for r in production.on_date(day)), ZERO_KG))
