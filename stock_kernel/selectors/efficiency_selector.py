"""
Module: stock_kernel.selectors.efficiency_selector
Responsibility: Daily production efficiency derived from the ledgers.

    piece efficiency   good / (good + damaged)   standard production only
    weight efficiency  total_prod_weight / kg pre-expanded
    fuel ratio         litres used / total_prod_weight, compared with the
                       configured target (L/kg)

Architecture position: Kernel > Selectors.

Failure modes:
    - None.  A zero denominator yields a zero metric, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from stock_kernel.selectors.base import BaseSelector

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_PERCENT = Decimal("0.01")
_RATIO = Decimal("0.0001")


@dataclass(frozen=True)
class EfficiencyReport:
    day: date | None
    good_pieces: int
    damaged_pieces: int
    piece_efficiency: Decimal
    total_prod_weight: Decimal
    raw_material_used: Decimal
    weight_efficiency: Decimal
    fuel_used: Decimal
    fuel_ratio: Decimal
    target_fuel_ratio: Decimal

    @property
    def fuel_within_target(self) -> bool:
        return self.fuel_ratio <= self.target_fuel_ratio


def _percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator <= 0:
        return _ZERO
    return (numerator * _HUNDRED / denominator).quantize(_PERCENT, rounding=ROUND_HALF_UP)


class EfficiencySelector(BaseSelector):

    def report(self, day: date | None = None) -> EfficiencyReport:
        """Metrics for ``day``, or over the whole ledger when ``day`` is None."""
        ledgers = self.state.ledgers
        if day is None:
            production = ledgers.production.records
            pre_expanding = ledgers.pre_expanding.records
            fuel = ledgers.fuel.records
        else:
            production = ledgers.production.on_date(day)
            pre_expanding = ledgers.pre_expanding.on_date(day)
            fuel = ledgers.fuel.on_date(day)

        pieces = [r for r in production if not r.is_large_beads]
        good = sum(r.good_qty for r in pieces)
        damaged = sum(r.damaged_qty for r in pieces)

        total_weight = sum((r.total_prod_weight for r in production), _ZERO)
        raw_used = sum((r.quantity_kg for r in pre_expanding), _ZERO)
        fuel_used = sum((r.used for r in fuel), _ZERO)
        fuel_ratio = (
            (fuel_used / total_weight).quantize(_RATIO, rounding=ROUND_HALF_UP)
            if total_weight > 0
            else _ZERO
        )

        return EfficiencyReport(
            day=day,
            good_pieces=good,
            damaged_pieces=damaged,
            piece_efficiency=_percent(Decimal(good), Decimal(good + damaged)),
            total_prod_weight=total_weight,
            raw_material_used=raw_used,
            weight_efficiency=_percent(total_weight, raw_used),
            fuel_used=fuel_used,
            fuel_ratio=fuel_ratio,
            target_fuel_ratio=self.parameters.target_fuel_ratio,
        )
