"""
Pytest fixtures for the plant stock ledger test suite.

Provides:
- A deterministic clock and a sequential id factory, so audit records and
  record ids are predictable
- A seeded plant: 11 silos, two catalogue items, one raw material, one
  operator and one moulding machine
- Structured-log capture for the stock_kernel logger hierarchy
- An in-memory SQLite engine for the snapshot store
"""

import itertools
import json
import logging
from dataclasses import replace
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO

import pytest

from stock_engines.context import EngineContext
from stock_engines.transaction import apply_command
from stock_kernel.db.engine import create_tables, init_engine_from_url, reset_engine
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.commands import (
    RecordIssue,
    RecordPreExpanding,
    RecordReceiving,
    SetSiloOpeningStock,
)
from stock_kernel.domain.master import MasterCategory, MasterItem
from stock_kernel.domain.pools import RawMaterialStock, SiloType
from stock_kernel.domain.state import FactoryState, PlantParameters, initial_state
from stock_kernel.logging_config import LogContext, StructuredFormatter, reset_logging

# Ids of the seeded master items
RAW_ID = "ps_beads"
RAW_NAME = "PS Beads"
OPERATOR_ID = "op_kamal"
MACHINE_ID = "mc_moulding_1"
FISH_BOX = "fish_box"
MINI_BOX = "mini_box"
PRE_EXPANDER = "Pre Expander 1"

TODAY = date(2024, 3, 1)

DEFAULT_CATALOGUE = ("Fish box", "Mini box")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_logging():
    """Every test starts with an unconfigured, propagating stock_kernel logger."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.apply_command(...)
            logs = captured_logs()
            assert any(r["message"] == "command_accepted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Engine fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 1, 8, 30, 0, tzinfo=UTC))


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def parameters() -> PlantParameters:
    return PlantParameters()


@pytest.fixture
def context(parameters, clock, id_factory) -> EngineContext:
    return EngineContext(parameters=parameters, clock=clock, id_factory=id_factory)


def seed_plant() -> FactoryState:
    """Fresh plant with the master items every test works with."""
    state = initial_state(
        total_silos=11,
        silo_types={5: SiloType.PRODUCTION_READY, 10: SiloType.INTERMEDIATE},
        capacity=Decimal("600"),
        default_finished_goods=DEFAULT_CATALOGUE,
    )
    registry = (
        state.registry.add(MasterItem(RAW_ID, RAW_NAME, MasterCategory.RAW_MATERIAL))
        .add(MasterItem(OPERATOR_ID, "Kamal", MasterCategory.OPERATOR))
        .add(MasterItem(MACHINE_ID, "Moulding 1", MasterCategory.PRODUCTION_MACHINE))
    )
    return replace(
        state,
        registry=registry,
        raw_materials=state.raw_materials.add(
            RawMaterialStock(material_id=RAW_ID, material_name=RAW_NAME)
        ),
    )


@pytest.fixture
def plant() -> FactoryState:
    return seed_plant()


def run(state, command, context):
    """Apply one command and return the new snapshot."""
    return apply_command(state, command, context).state


def silo_level(state: FactoryState, silo_id: int) -> Decimal:
    return state.silos.get(silo_id).current_stock


@pytest.fixture
def stocked_plant(plant, context) -> FactoryState:
    """
    Receiving 500 kg, issue 300 kg, 100 kg pre-expanded into silo 10 and
    opening stock of 200 kg in silo 5.
    """
    state = run(plant, SetSiloOpeningStock(levels={5: "200"}), context)
    state = run(state, RecordReceiving(material_id=RAW_ID, kg="500", date=TODAY), context)
    state = run(state, RecordIssue(material_id=RAW_ID, kg="300", date=TODAY), context)
    state = run(
        state,
        RecordPreExpanding(
            date=TODAY,
            shift="Day",
            machine=PRE_EXPANDER,
            material_id=RAW_ID,
            operator_id=OPERATOR_ID,
            quantity_kg="100",
            output_silo_id=10,
        ),
        context,
    )
    return state


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine with the app_state table created."""
    engine = init_engine_from_url("sqlite://")
    create_tables(engine)
    yield engine
    reset_engine()
