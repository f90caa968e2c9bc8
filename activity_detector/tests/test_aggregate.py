"""Tests for the single-pass aggregator and shard merging."""

from activity_detector.aggregate import BatchAggregate, aggregate
from activity_detector.models import LogRecord
from activity_detector.policy import Policy


def _record(ip="1.1.1.1", endpoint="/api/users", ts=0, status=200,
            user_agent="Mozilla/5.0", response_time=100.0):
    return LogRecord(ip, endpoint, ts, status, user_agent, response_time)


def _policy():
    return Policy(
        max_requests_per_minute=60,
        max_failed_logins=5,
        suspicious_endpoints=["/api/login", "/api/admin"],
        time_window=60_000,
    )


class TestRequestTable:
    def test_every_record_counted_per_ip(self):
        agg = aggregate([_record(ts=3), _record(ts=1), _record(ip="2.2.2.2", ts=2)], _policy())
        assert agg.requests["1.1.1.1"].count == 2
        assert agg.requests["1.1.1.1"].timestamps == [3, 1]  # arrival order, unsorted
        assert agg.requests["2.2.2.2"].count == 1


class TestFailureTable:
    def test_401_and_403_on_suspicious_endpoint_count(self):
        agg = aggregate([
            _record(endpoint="/api/login", status=401, ts=10),
            _record(endpoint="/api/admin", status=403, ts=20),
        ], _policy())
        assert agg.failures["1.1.1.1"].count == 2
        assert agg.failures["1.1.1.1"].timestamps == [10, 20]

    def test_other_statuses_do_not_count(self):
        agg = aggregate([
            _record(endpoint="/api/login", status=200),
            _record(endpoint="/api/login", status=500),
            _record(endpoint="/api/login", status=429),
        ], _policy())
        assert agg.failures == {}

    def test_failures_on_ordinary_endpoint_do_not_count(self):
        agg = aggregate([_record(endpoint="/api/users", status=401)], _policy())
        assert agg.failures == {}


class TestEndpointTable:
    def test_only_suspicious_endpoints_tracked(self):
        agg = aggregate([
            _record(endpoint="/api/users"),
            _record(endpoint="/api/admin"),
        ], _policy())
        assert set(agg.endpoints) == {"/api/admin"}

    def test_duplicate_ips_kept_until_read(self):
        agg = aggregate([
            _record(ip="a", endpoint="/api/admin"),
            _record(ip="a", endpoint="/api/admin"),
            _record(ip="b", endpoint="/api/admin", status=403),
        ], _policy())
        summary = agg.endpoints["/api/admin"]
        assert summary.count == 3
        assert summary.ips == ["a", "a", "b"]
        assert summary.unique_ips == 2


class TestPerIpTables:
    def test_user_agents_counted_in_first_seen_order(self):
        agg = aggregate([
            _record(user_agent="curl"),
            _record(user_agent="Mozilla/5.0"),
            _record(user_agent="curl"),
        ], _policy())
        agents = agg.user_agents["1.1.1.1"]
        assert list(agents) == ["curl", "Mozilla/5.0"]
        assert agents["curl"] == 2

    def test_latencies_in_arrival_order(self):
        agg = aggregate([
            _record(response_time=300.0),
            _record(response_time=100.0),
            _record(response_time=200.0),
        ], _policy())
        assert agg.latencies["1.1.1.1"] == [300.0, 100.0, 200.0]

    def test_fresh_tables_each_call(self):
        policy = _policy()
        aggregate([_record()], policy)
        agg = aggregate([], policy)
        assert agg == BatchAggregate()


class TestMerge:
    def _batch(self):
        return [
            _record(ip="a", endpoint="/api/login", status=401, ts=1, user_agent="x"),
            _record(ip="b", endpoint="/api/admin", ts=2, user_agent="y"),
            _record(ip="a", ts=3, user_agent="z", response_time=5.0),
            _record(ip="c", endpoint="/api/admin", status=403, ts=4),
            _record(ip="a", endpoint="/api/login", status=403, ts=5, user_agent="x"),
            _record(ip="b", endpoint="/api/admin", ts=6, user_agent="w"),
        ]

    def test_merged_shards_equal_whole_batch(self):
        batch = self._batch()
        policy = _policy()
        whole = aggregate(batch, policy)
        merged = aggregate(batch[:2], policy).merge(aggregate(batch[2:4], policy))
        merged.merge(aggregate(batch[4:], policy))
        assert merged == whole

    def test_merge_preserves_first_seen_agent_order(self):
        batch = self._batch()
        policy = _policy()
        merged = aggregate(batch[:3], policy).merge(aggregate(batch[3:], policy))
        assert list(merged.user_agents["a"]) == ["x", "z"]
        assert merged.user_agents["a"]["x"] == 2

    def test_merge_into_empty(self):
        policy = _policy()
        shard = aggregate(self._batch(), policy)
        assert BatchAggregate().merge(shard) == shard
