"""
Configuration Schema (``stock_config.schema``).

Responsibility
--------------
Frozen dataclass describing the plant configuration: silo layout, the
fixed ratios the engines compute with, the pre-expander machines and the
seeded finished-goods catalogue.

Architecture position
---------------------
**Config layer** -- pure data definitions.  Imported by the loader and
the bridges.  No dependency on kernel, engines or services.

Invariants enforced
-------------------
* Every schema object is ``frozen=True``.
* ``validate`` returns ALL structural problems at once, never just the
  first one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

SILO_TYPE_LABELS = frozenset({"Normal", "Production Ready", "Intermediate"})


@dataclass(frozen=True)
class PlantConfig:
    """Validated plant configuration with its source checksum."""

    config_id: str
    version: int
    total_silos: int = 11
    max_silo_capacity: Decimal = Decimal("600")
    dry_weight_ratio: Decimal = Decimal("0.94")
    bag_conversion_factor: Decimal = Decimal("25")
    target_fuel_ratio: Decimal = Decimal("0.025")
    pre_expander_machines: tuple[str, ...] = ("Pre Expander 1", "Pre Expander 2")
    intermediate_silo_id: int = 10
    production_ready_silo_id: int = 5
    second_expanding_destinations: tuple[int, ...] = (5, 7)
    silo_types: dict[int, str] = field(default_factory=dict)
    default_actor: str = "System User"
    default_finished_goods: tuple[str, ...] = ()
    checksum: str = ""

    def validate(self) -> list[str]:
        """Structural problems, empty when the configuration is usable."""
        errors: list[str] = []
        silo_ids = range(1, self.total_silos + 1)
        if self.total_silos < 1:
            errors.append("silos.total must be at least 1")
        if self.max_silo_capacity <= 0:
            errors.append("silos.max_capacity_kg must be positive")
        if not 0 < self.dry_weight_ratio <= 1:
            errors.append("production.dry_weight_ratio must be in (0, 1]")
        if self.bag_conversion_factor <= 0:
            errors.append("raw_material.bag_conversion_factor_kg must be positive")
        if self.target_fuel_ratio < 0:
            errors.append("fuel.target_ratio_l_per_kg cannot be negative")
        if not self.pre_expander_machines:
            errors.append("production.pre_expander_machines cannot be empty")
        if self.intermediate_silo_id not in silo_ids:
            errors.append(f"silos.intermediate {self.intermediate_silo_id} is not a silo")
        if self.production_ready_silo_id not in silo_ids:
            errors.append(f"silos.production_ready {self.production_ready_silo_id} is not a silo")
        for dest in self.second_expanding_destinations:
            if dest not in silo_ids:
                errors.append(f"silos.second_expanding_destinations: {dest} is not a silo")
        for silo_id, label in self.silo_types.items():
            if silo_id not in silo_ids:
                errors.append(f"silos.types: {silo_id} is not a silo")
            if label not in SILO_TYPE_LABELS:
                errors.append(f"silos.types: unknown silo type {label!r}")
        lowered = [n.lower() for n in self.default_finished_goods]
        if len(set(lowered)) != len(lowered):
            errors.append("default_finished_goods contains duplicate names")
        return errors
