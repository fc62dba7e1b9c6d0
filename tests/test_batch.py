# Tests for taptik.batch
# Concurrent batch runs with per-item failure isolation

from taptik.batch import BatchItem, run_batch


def _invert(value: int) -> float:
    return 1 / value


class TestRunBatch:
    """Tests for run_batch."""

    def test_results_in_input_order(self):
        items = run_batch(lambda x: x * 2, [3, 1, 2], max_workers=3)
        assert [item.index for item in items] == [0, 1, 2]
        assert [item.result for item in items] == [6, 2, 4]
        assert all(item.success for item in items)

    def test_failure_is_isolated(self):
        items = run_batch(_invert, [1, 0, 4])
        assert items[0].result == 1.0
        assert items[2].result == 0.25
        assert not items[1].success
        assert items[1].result is None
        assert "division by zero" in items[1].error

    def test_exception_without_message(self):
        def fail(_):
            raise KeyError

        items = run_batch(fail, ["x"])
        assert items[0].error == "KeyError"

    def test_empty(self):
        assert run_batch(_invert, []) == []

    def test_zero_workers_still_runs(self):
        assert run_batch(_invert, [2], max_workers=0)[0].result == 0.5


class TestBatchItem:
    """Tests for BatchItem."""

    def test_success(self):
        assert BatchItem(index=0, result=None).success
        assert not BatchItem(index=0, error="boom").success
