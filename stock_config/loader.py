"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads the plant YAML file and parses it into a ``PlantConfig``.  This
is internal tooling; the single public entry point for runtime config is
``stock_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on kernel,
engines or services.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unparseable numbers  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import PlantConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """YAML numbers and strings to Decimal; floats go through ``str``."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{name}: cannot parse {value!r} as a number") from e


def parse_plant_config(data: dict[str, Any], checksum: str = "") -> PlantConfig:
    """
    Parse a ``PlantConfig`` from the YAML dict.

    Sections other than ``config_id`` and ``version`` are optional and
    fall back to the schema defaults.
    """
    defaults = PlantConfig(config_id="", version=0)
    silos = data.get("silos", {})
    production = data.get("production", {})
    raw_material = data.get("raw_material", {})
    fuel = data.get("fuel", {})
    audit = data.get("audit", {})

    return PlantConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        total_silos=int(silos.get("total", defaults.total_silos)),
        max_silo_capacity=parse_decimal(
            silos.get("max_capacity_kg", defaults.max_silo_capacity), "silos.max_capacity_kg",
        ),
        dry_weight_ratio=parse_decimal(
            production.get("dry_weight_ratio", defaults.dry_weight_ratio),
            "production.dry_weight_ratio",
        ),
        bag_conversion_factor=parse_decimal(
            raw_material.get("bag_conversion_factor_kg", defaults.bag_conversion_factor),
            "raw_material.bag_conversion_factor_kg",
        ),
        target_fuel_ratio=parse_decimal(
            fuel.get("target_ratio_l_per_kg", defaults.target_fuel_ratio),
            "fuel.target_ratio_l_per_kg",
        ),
        pre_expander_machines=tuple(
            production.get("pre_expander_machines", defaults.pre_expander_machines)
        ),
        intermediate_silo_id=int(silos.get("intermediate", defaults.intermediate_silo_id)),
        production_ready_silo_id=int(
            silos.get("production_ready", defaults.production_ready_silo_id)
        ),
        second_expanding_destinations=tuple(
            int(s)
            for s in silos.get(
                "second_expanding_destinations", defaults.second_expanding_destinations
            )
        ),
        silo_types={int(k): str(v) for k, v in (silos.get("types") or {}).items()},
        default_actor=str(audit.get("default_actor", defaults.default_actor)),
        default_finished_goods=tuple(str(n) for n in data.get("default_finished_goods", ())),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_plant_config(path: Path) -> PlantConfig:
    data = load_yaml_file(path)
    return parse_plant_config(data, checksum=compute_checksum(data))
