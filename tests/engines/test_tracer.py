"""Tests for the engine tracer decorator and input fingerprints."""

from datetime import date
from decimal import Decimal

import pytest

from minijob_engines.tracer import compute_input_fingerprint, traced_engine
from minijob_kernel.domain.dtos import MinijobLimit, WarningLevel


class TestFingerprint:
    def test_deterministic(self):
        args = {"amount": Decimal("520.00"), "day": date(2024, 1, 1)}
        first = compute_input_fingerprint(("amount", "day"), args)
        assert first == compute_input_fingerprint(("amount", "day"), dict(args))
        assert len(first) == 16

    def test_only_selected_fields(self):
        a = compute_input_fingerprint(("x",), {"x": 1, "y": 2})
        b = compute_input_fingerprint(("x",), {"x": 1, "y": 3})
        assert a == b

    def test_value_change_changes_fingerprint(self):
        a = compute_input_fingerprint(("x",), {"x": Decimal("1.00")})
        b = compute_input_fingerprint(("x",), {"x": Decimal("1.01")})
        assert a != b

    def test_dict_key_order_irrelevant(self):
        a = compute_input_fingerprint(("m",), {"m": {"a": 1, "b": 2}})
        b = compute_input_fingerprint(("m",), {"m": {"b": 2, "a": 1}})
        assert a == b

    def test_dataclasses_and_enums(self):
        limit = MinijobLimit("520.00", date(2022, 10, 1))
        a = compute_input_fingerprint(("l", "w"), {"l": limit, "w": WarningLevel.SAFE})
        b = compute_input_fingerprint(
            ("l", "w"), {"l": MinijobLimit("520.00", "2022-10-01"), "w": WarningLevel.SAFE}
        )
        assert a == b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )


class TestTracedEngine:
    def test_emits_trace_with_positional_arguments(self, captured_logs):
        @traced_engine("demo", "2.1", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(Decimal("2")) == Decimal("4")
        (trace,) = [r for r in captured_logs() if r["message"] == "MINIJOB_ENGINE_TRACE"]
        assert trace["engine_name"] == "demo"
        assert trace["engine_version"] == "2.1"
        assert trace["trace_type"] == "MINIJOB_ENGINE_TRACE"
        assert trace["input_fingerprint"] == compute_input_fingerprint(
            ("value",), {"value": Decimal("2")}
        )
        assert trace["duration_ms"] >= 0

    def test_exception_propagates_without_trace(self, captured_logs):
        @traced_engine("failing", "1.0")
        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            boom()
        assert not [r for r in captured_logs() if r["message"] == "MINIJOB_ENGINE_TRACE"]

    def test_preserves_metadata(self):
        @traced_engine("demo", "1.0")
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
