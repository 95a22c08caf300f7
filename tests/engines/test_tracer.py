"""
Tests for the engine tracer.

Verifies:
- Decorated engines emit BACKOFFICE_ENGINE_TRACE with name and version
- Fingerprints are deterministic and cover positional arguments
- The decorator does not change results
"""

from decimal import Decimal

from backoffice_engines.invoicing import compute_invoice_totals
from backoffice_engines.tracer import compute_input_fingerprint, traced_engine
from backoffice_modules.jobs.models import JobStatus
from tests.factories import make_line


@traced_engine("sample", "2.1", fingerprint_fields=("a", "b"))
def _sample(a, b=0, c=None):
    return a + b


class TestComputeInputFingerprint:
    def test_deterministic(self):
        args = {"a": {"y": 1, "x": [Decimal("1.0"), None]}}
        assert compute_input_fingerprint(("a",), args) == compute_input_fingerprint(("a",), dict(args))

    def test_dict_key_order_irrelevant(self):
        first = compute_input_fingerprint(("a",), {"a": {"x": 1, "y": 2}})
        second = compute_input_fingerprint(("a",), {"a": {"y": 2, "x": 1}})
        assert first == second

    def test_sixteen_hex_chars(self):
        fp = compute_input_fingerprint(("a",), {"a": 1})
        assert len(fp) == 16
        int(fp, 16)

    def test_dataclasses_and_enums(self):
        line = make_line(amount="10")
        assert compute_input_fingerprint(("l", "s"), {"l": line, "s": JobStatus.OPEN}) == \
            compute_input_fingerprint(("l", "s"), {"l": make_line(amount="10"), "s": "open"})

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(("a",), {"a": None})


class TestTracedEngine:
    def test_result_unchanged(self):
        assert _sample(1, 2) == 3

    def test_emits_trace(self, captured_logs):
        _sample(1, b=2)
        traces = [r for r in captured_logs() if r["message"] == "BACKOFFICE_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["logger"] == "backoffice.engines.tracer"
        assert len(trace["input_fingerprint"]) == 16

    def test_positional_and_keyword_fingerprint_match(self, captured_logs):
        _sample(1, 2)
        _sample(a=1, b=2)
        fps = [r["input_fingerprint"] for r in captured_logs() if r.get("engine_name") == "sample"]
        assert fps[0] == fps[1]

    def test_unfingerprinted_argument_does_not_change_fingerprint(self, captured_logs):
        _sample(1, 2, c="x")
        _sample(1, 2, c="y")
        fps = [r["input_fingerprint"] for r in captured_logs() if r.get("engine_name") == "sample"]
        assert fps[0] == fps[1]

    def test_engine_trace(self, captured_logs):
        compute_invoice_totals((make_line(amount="5"),), 10)
        names = [r.get("engine_name") for r in captured_logs()]
        assert "invoice_totals" in names
