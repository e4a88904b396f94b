"""
Tests for snapshot persistence (stock_services.snapshot_store) against an
in-memory SQLite database.
"""

import json

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from stock_kernel.db.engine import session_scope
from stock_kernel.domain.commands import RecordReceiving
from stock_kernel.domain.serialization import state_from_document, state_to_document
from stock_kernel.models import SNAPSHOT_ROW_ID, StateDocument
from stock_services.snapshot_store import InMemorySnapshotStore, SqlSnapshotStore
from tests.conftest import RAW_ID, TODAY, run


class TestSqlSnapshotStore:

    def test_load_before_first_save(self, sqlite_engine):
        assert SqlSnapshotStore().load() is None

    def test_save_then_load(self, sqlite_engine, stocked_plant):
        store = SqlSnapshotStore()
        document = state_to_document(stocked_plant)
        store.save(document)
        loaded = store.load()
        assert loaded == json.loads(json.dumps(document))
        assert state_from_document(loaded) == stocked_plant

    def test_second_save_overwrites_single_row(self, sqlite_engine, plant, context):
        store = SqlSnapshotStore(sessionmaker(bind=sqlite_engine, expire_on_commit=False))
        store.save(state_to_document(plant))
        later = run(plant, RecordReceiving(material_id=RAW_ID, kg="5", date=TODAY), context)
        store.save(state_to_document(later))

        with session_scope() as session:
            rows = session.execute(select(StateDocument)).scalars().all()
        assert [row.id for row in rows] == [SNAPSHOT_ROW_ID]
        assert rows[0].updated_at is not None
        assert len(store.load()["receivingLogs"]) == 1


class TestInMemorySnapshotStore:

    def test_keeps_a_copy(self, plant):
        store = InMemorySnapshotStore()
        document = state_to_document(plant)
        store.save(document)
        document["silos"].clear()
        assert len(store.load()["silos"]) == 11
        assert store.save_count == 1
