"""
Config -> Kernel Bridges.

Functions that convert a PlantConfig into kernel-compatible inputs.
These live in stock_config (the producer) because the kernel must NEVER
import stock_config.

Usage:
    from stock_config.bridges import build_plant_parameters, build_initial_state

    config = get_active_config()
    parameters = build_plant_parameters(config)
    state = build_initial_state(config)
"""

from __future__ import annotations

from typing import Any

from stock_config.schema import PlantConfig
from stock_kernel.domain.pools import SiloType
from stock_kernel.domain.serialization import state_from_document
from stock_kernel.domain.state import FactoryState, PlantParameters, initial_state
from stock_kernel.domain.quantities import round_kg


def build_plant_parameters(config: PlantConfig) -> PlantParameters:
    """The constants the engines and selectors compute with."""
    return PlantParameters(
        total_silos=config.total_silos,
        max_silo_capacity=round_kg(config.max_silo_capacity),
        dry_weight_ratio=config.dry_weight_ratio,
        bag_conversion_factor=config.bag_conversion_factor,
        target_fuel_ratio=config.target_fuel_ratio,
        intermediate_silo_id=config.intermediate_silo_id,
        production_ready_silo_id=config.production_ready_silo_id,
        second_expanding_destinations=config.second_expanding_destinations,
        pre_expander_machines=config.pre_expander_machines,
        default_actor=config.default_actor,
    )


def build_silo_types(config: PlantConfig) -> dict[int, SiloType]:
    return {silo_id: SiloType(label) for silo_id, label in config.silo_types.items()}


def build_initial_state(config: PlantConfig) -> FactoryState:
    """A fresh plant: empty silos and the seeded finished-goods catalogue."""
    return initial_state(
        total_silos=config.total_silos,
        silo_types=build_silo_types(config),
        capacity=config.max_silo_capacity,
        default_finished_goods=config.default_finished_goods,
    )


def restore_state(config: PlantConfig, document: dict[str, Any] | None) -> FactoryState:
    """Decode a stored document, or start fresh when there is none."""
    if document is None:
        return build_initial_state(config)
    return state_from_document(
        document,
        capacity=config.max_silo_capacity,
        default_finished_goods=config.default_finished_goods,
        total_silos=config.total_silos,
        silo_types=build_silo_types(config),
    )
