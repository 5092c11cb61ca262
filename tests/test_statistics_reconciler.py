"""Tests for statistics snapshots and the publish decision."""

import pytest

from conftest import make_job
from core.statistics_reconciler import (
    StatisticsReconciler,
    choose_snapshot,
    filter_jobs,
    snapshot_from_jobs,
    snapshot_from_rows,
)
from model.api import FilterContext
from model.statistics import BUCKETS, StatisticsSnapshot
from util.enums import DateRange

ALL_TIME = FilterContext()
WEEK = FilterContext(dateRange=DateRange.WEEK)


def _assert_total_is_sum(snapshot: StatisticsSnapshot) -> None:
    assert snapshot.total == sum(getattr(snapshot, b) for b in BUCKETS)


class TestSnapshotFromJobs:
    def test_mixed_labels(self):
        jobs = [
            make_job("1", "Completed"),
            make_job("2", "partial_success"),
            make_job("3", "FAILED - timeout"),
        ]
        s = snapshot_from_jobs(jobs)
        assert (s.completed, s.partialSuccess, s.failed, s.total) == (1, 1, 1, 3)
        assert s.provenance == "derived"

    def test_unknown_statuses_are_reported_but_not_totalled(self):
        jobs = [make_job("1", "Completed"), make_job("2", "paused"), make_job("3", None)]
        s = snapshot_from_jobs(jobs)
        assert s.total == 1
        assert s.unclassified == 2

    def test_empty(self):
        assert snapshot_from_jobs([]).total == 0


class TestSnapshotFromRows:
    def test_array_rows(self):
        rows = [["etl", "Completed", 5], ["etl", "Running", "3"], ["etl", "weird", 4]]
        s = snapshot_from_rows(rows)
        assert s.completed == 5
        assert s.running == 3
        assert s.unclassified == 4
        assert s.total == 8

    def test_object_rows_with_alternate_field_names(self):
        rows = [
            {"status": "FAILED", "count": 2},
            {"statusName": "In Queue", "total": "7"},
            {"status": "partial success", "count": None},
            {"status": "Cancelled", "count": "n/a"},
        ]
        s = snapshot_from_rows(rows)
        assert s.failed == 2
        assert s.queue == 7
        assert s.partialSuccess == 0
        assert s.cancelled == 0
        assert s.total == 9

    def test_scalar_rows_count_once_each(self):
        s = snapshot_from_rows(["Completed", "Completed", "Cancelled"])
        assert (s.completed, s.cancelled, s.total) == (2, 1, 3)

    def test_short_array_rows_count_nothing(self):
        assert snapshot_from_rows([["only-group"], []]).total == 0

    @pytest.mark.parametrize("payload", [None, {"rows": []}, "Completed"])
    def test_non_list_payload_is_empty(self, payload):
        assert snapshot_from_rows(payload).total == 0


def test_snapshot_total_is_never_taken_from_input():
    s = StatisticsSnapshot.model_validate({"completed": 1, "failed": 2, "total": 99})
    assert s.total == 3


class TestChooseSnapshot:
    def test_stale_all_time_server_is_replaced_by_job_counts(self):
        jobs = [make_job(str(i)) for i in range(12)]
        server = StatisticsSnapshot(completed=5, provenance="server")
        result = StatisticsReconciler().reconcile(server, jobs, ALL_TIME)
        assert result.total >= 12
        assert result.provenance == "derived"

    def test_derived_is_used_even_when_short_of_held_jobs(self):
        jobs = [make_job(str(i)) for i in range(10)] + [
            make_job("x1", "paused"),
            make_job("x2", "paused"),
        ]
        server = StatisticsSnapshot(completed=5, provenance="server")
        result = StatisticsReconciler().reconcile(server, jobs, ALL_TIME)
        assert result.total == 10
        assert result.provenance == "derived"

    def test_all_time_server_covering_held_jobs_wins(self):
        jobs = [make_job("1"), make_job("2")]
        server = StatisticsSnapshot(completed=40, failed=3, provenance="server")
        result = StatisticsReconciler().reconcile(server, jobs, ALL_TIME)
        assert result.total == 43
        assert result.provenance == "server"

    def test_missing_server_aggregate_falls_back_to_jobs(self):
        result = StatisticsReconciler().reconcile(None, [make_job("1", "Running")], ALL_TIME)
        assert result.running == 1
        assert result.provenance == "derived"

    def test_bounded_window_keeps_cached_snapshot(self):
        reconciler = StatisticsReconciler()
        first = reconciler.reconcile(StatisticsSnapshot(completed=30), [], WEEK)
        assert first.total == 30
        # stats call failed this cycle; the visible page must not replace the cache
        second = reconciler.reconcile(None, [make_job("1", "Failed")], WEEK)
        assert second.completed == 30
        assert second.failed == 0
        assert second.provenance == "cached"

    def test_bounded_window_refreshes_cache_from_server(self):
        reconciler = StatisticsReconciler()
        reconciler.reconcile(StatisticsSnapshot(completed=30), [], WEEK)
        result = reconciler.reconcile(StatisticsSnapshot(completed=31, running=2), [], WEEK)
        assert result.total == 33

    def test_bounded_window_without_any_server_data_uses_jobs(self):
        result = StatisticsReconciler().reconcile(None, [make_job("1")], WEEK)
        assert result.total == 1

    def test_explicit_filters_count_matching_jobs_only(self):
        jobs = [
            make_job("1", "Completed", jobName="nightly-etl", username="alice"),
            make_job("2", "Failed", jobName="nightly-etl", username="bob"),
            make_job("3", "Completed", jobName="reports", username="alice"),
        ]
        ctx = FilterContext(dateRange=DateRange.WEEK, jobName="ETL")
        server = StatisticsSnapshot(completed=500)
        result = StatisticsReconciler().reconcile(server, jobs, ctx)
        assert (result.completed, result.failed, result.total) == (1, 1, 2)

    def test_decision_function_in_isolation(self):
        derived = StatisticsSnapshot(completed=1, provenance="derived")
        server = StatisticsSnapshot(completed=9, provenance="server")
        cached = StatisticsSnapshot(completed=4, provenance="cached")
        pick = lambda ctx, held: choose_snapshot(
            server=server, derived=derived, cached=cached, ctx=ctx, held_count=held
        )
        assert pick(ALL_TIME, 5) is server
        assert pick(ALL_TIME, 10) is derived
        assert pick(WEEK, 100) is cached
        assert pick(FilterContext(status="failed"), 0) is derived

    def test_every_published_snapshot_has_consistent_total(self):
        reconciler = StatisticsReconciler()
        jobs = [make_job(str(i), s) for i, s in enumerate(["ok", "Completed", "Running", "queued", "x"])]
        for server in (None, StatisticsSnapshot(failed=1), StatisticsSnapshot(completed=50)):
            for ctx in (ALL_TIME, WEEK, FilterContext(userName="a")):
                _assert_total_is_sum(reconciler.reconcile(server, jobs, ctx))


class TestFilterJobs:
    def test_status_filter_compares_canonical_statuses(self):
        jobs = [make_job("1", "SUCCEEDED"), make_job("2", "Completed"), make_job("3", "FAILED")]
        out = filter_jobs(jobs, FilterContext(status="success"))
        assert [j.id for j in out] == ["1", "2"]

    def test_user_and_file_filters(self):
        jobs = [
            make_job("1", userName="Alice", fileName="a.csv"),
            make_job("2", user="bob", fileName="b.csv"),
        ]
        assert [j.id for j in filter_jobs(jobs, FilterContext(userName="alice"))] == ["1"]
        assert [j.id for j in filter_jobs(jobs, FilterContext(fileName="B.CSV"))] == ["2"]
