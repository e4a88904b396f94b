"""
Tests for STOCK_ENGINE_TRACE emission (stock_engines.tracer).
"""

from decimal import Decimal

import pytest

from stock_engines.tracer import compute_input_fingerprint
from stock_engines.transaction import apply_command
from stock_kernel.domain.commands import RecordIssue, RecordReceiving
from stock_kernel.exceptions import InsufficientStockError
from tests.conftest import RAW_ID, TODAY


def _traces(logs):
    return [r for r in logs if r.get("trace_type") == "STOCK_ENGINE_TRACE"]


class TestTracedEngine:

    def test_successful_command_traced(self, plant, context, captured_logs):
        apply_command(plant, RecordReceiving(material_id=RAW_ID, kg="5", date=TODAY), context)
        (trace,) = _traces(captured_logs())
        assert trace["engine_name"] == "transaction"
        assert trace["engine_version"] == "1.0"
        assert trace["outcome"] == "ok"
        assert trace["logger"] == "stock_kernel.engines.tracer"
        assert len(trace["input_fingerprint"]) == 16

    def test_rejected_command_traced_with_error_code(self, plant, context, captured_logs):
        with pytest.raises(InsufficientStockError):
            apply_command(plant, RecordIssue(material_id=RAW_ID, kg="5", date=TODAY), context)
        (trace,) = _traces(captured_logs())
        assert trace["outcome"] == "error"
        assert trace["error_code"] == "INSUFFICIENT_STOCK"


class TestFingerprint:

    def test_equal_commands_equal_fingerprints(self):
        a = RecordReceiving(material_id=RAW_ID, kg=Decimal("5"), date=TODAY)
        b = RecordReceiving(material_id=RAW_ID, kg=Decimal("5"), date=TODAY)
        assert compute_input_fingerprint(("command",), {"command": a}) == (
            compute_input_fingerprint(("command",), {"command": b})
        )

    def test_different_commands_differ(self):
        a = RecordReceiving(material_id=RAW_ID, kg="5", date=TODAY)
        b = RecordReceiving(material_id=RAW_ID, kg="6", date=TODAY)
        assert compute_input_fingerprint(("command",), {"command": a}) != (
            compute_input_fingerprint(("command",), {"command": b})
        )

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("command",), {}) == (
            compute_input_fingerprint(("command",), {"command": None})
        )
