import pytest

from leaklab import CapacityExceeded, DoubleRelease, InstanceNotFound, Result
from leaklab.common.metrics import performance
from leaklab.common.metrics.performance import track_lifecycle
from leaklab.common.metrics.tracker import LifecycleMetricsTracker


class TestLifecycleMetricsTracker:

    def test_counts_by_outcome(self):
        tracker = LifecycleMetricsTracker(log_interval=3600)
        tracker.update_metrics("create")
        tracker.update_metrics("create")
        tracker.update_metrics("destroy")
        tracker.update_metrics("create", CapacityExceeded(1))
        tracker.update_metrics("destroy", DoubleRelease("a"))
        tracker.update_metrics("destroy", InstanceNotFound("b"))

        assert tracker.window_creates == 2
        assert tracker.window_destroys == 1
        assert tracker.window_refused == 1
        assert tracker.window_failures == 2

    def test_log_cadence(self):
        assert not LifecycleMetricsTracker(log_interval=3600).update_metrics("create")
        assert LifecycleMetricsTracker(log_interval=0).update_metrics("create")

    def test_reset_window(self):
        tracker = LifecycleMetricsTracker()
        tracker.update_metrics("create")
        tracker.update_metrics("create", CapacityExceeded(1))
        tracker.reset_window()
        assert tracker.window_creates == 0
        assert tracker.window_refused == 0
        assert tracker.creates_per_second == 0


class TestTrackLifecycle:

    @pytest.fixture
    def tracker(self, monkeypatch):
        tracker = LifecycleMetricsTracker(log_interval=3600)
        monkeypatch.setattr(performance, "metrics", tracker)
        return tracker

    def test_feeds_results_into_tracker(self, tracker):
        @track_lifecycle("create")
        def create(ok):
            return Result.success("id") if ok else Result.failure(CapacityExceeded(1))

        assert create(True).value == "id"
        assert not create(False)
        assert tracker.window_creates == 1
        assert tracker.window_refused == 1

    def test_destroy_failures_are_not_refusals(self, tracker):
        @track_lifecycle("destroy")
        def destroy():
            return Result.failure(DoubleRelease("a"))

        destroy()
        assert tracker.window_refused == 0
        assert tracker.window_failures == 1

    def test_window_resets_when_logged(self, tracker):
        tracker.log_interval = 0

        @track_lifecycle("create")
        def create():
            return Result.success("id")

        create()
        create()
        assert tracker.window_creates == 0

    def test_preserves_metadata(self):
        @track_lifecycle("create")
        def create():
            """Make one."""
            return Result.success()

        assert create.__name__ == "create"
        assert create.__doc__ == "Make one."
