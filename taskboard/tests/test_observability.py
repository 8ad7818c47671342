import contextlib
import unittest
from unittest import mock

from taskboard.db import persistence
from taskboard.db.persistence import PersistenceMediator
from taskboard.observability import otel


class _FakeInstrument:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def add(self, amount, attributes) -> None:
        self.calls.append((amount, attributes))

    def record(self, amount, attributes) -> None:
        self.calls.append((amount, attributes))


class _FakeSpan:
    def __init__(self) -> None:
        self.attributes: dict = {}

    def set_attribute(self, key, value) -> None:
        self.attributes[key] = value


class _Rows:
    def __init__(self, rows: list[dict]) -> None:
        self.rows = rows

    async def select_all(self) -> list[dict]:
        return list(self.rows)


class TreeLoadMetricsTests(unittest.TestCase):
    def test_tree_load_metrics_are_labelled_by_result_only(self) -> None:
        counter = _FakeInstrument()
        histogram = _FakeInstrument()
        with mock.patch.object(otel, "_enabled", True), \
                mock.patch.object(otel, "_tree_load_counter", counter), \
                mock.patch.object(otel, "_tree_load_latency_hist", histogram):
            otel.record_tree_load("success", 12.5)

        self.assertEqual(counter.calls, [(1, {"result": "success"})])
        self.assertEqual(histogram.calls, [(12.5, {"result": "success"})])

    def test_recorders_are_silent_when_disabled(self) -> None:
        otel.record_tree_load("error", 1.0)
        otel.record_remote_write("tasks", "insert", "success", 1.0)
        otel.record_dispatch("ADD_PROJECT", changed=True)


class TreeLoadSpanTests(unittest.IsolatedAsyncioTestCase):
    async def test_row_counts_go_on_the_load_span(self) -> None:
        span = _FakeSpan()

        @contextlib.contextmanager
        def fake_span(name, attributes=None):
            yield span

        mediator = PersistenceMediator(
            _Rows([{"id": "P1", "title": "Home"}]),
            _Rows([
                {"id": "T1", "title": "Paint", "project_id": "P1"},
                {"id": "S1", "title": "Prime", "project_id": "P1", "parent_task": "T1"},
            ]),
        )
        with mock.patch.object(persistence, "start_span", fake_span):
            projects = await mediator.load()

        self.assertEqual(len(projects), 1)
        self.assertEqual(span.attributes, {"project_rows": 1, "task_rows": 2})


if __name__ == "__main__":
    unittest.main()
