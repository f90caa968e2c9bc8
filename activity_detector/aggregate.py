"""Single-pass pre-aggregation shared by every rule.

All tables are built fresh per call and keyed by IP (or endpoint for the
scan table).  Rules only read them.

State:
  requests[ip]    -> RequestSummary   (all requests)
  failures[ip]    -> FailureSummary   (401/403 on suspicious endpoints)
  endpoints[path] -> EndpointSummary  (suspicious endpoints only)
  user_agents[ip] -> Counter          (first-encounter key order)
  latencies[ip]   -> list[float]      (arrival order)
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from activity_detector.models import LogRecord
from activity_detector.policy import Policy

AUTH_FAILURE_STATUSES = frozenset({401, 403})


@dataclass
class RequestSummary:
    timestamps: list[int] = field(default_factory=list)
    count: int = 0


@dataclass
class FailureSummary:
    count: int = 0
    timestamps: list[int] = field(default_factory=list)


@dataclass
class EndpointSummary:
    count: int = 0
    # Duplicates kept; distinct IPs are counted at read time.
    ips: list[str] = field(default_factory=list)

    @property
    def unique_ips(self) -> int:
        return len(set(self.ips))


@dataclass
class BatchAggregate:
    requests: dict[str, RequestSummary] = field(default_factory=dict)
    failures: dict[str, FailureSummary] = field(default_factory=dict)
    endpoints: dict[str, EndpointSummary] = field(default_factory=dict)
    user_agents: dict[str, Counter] = field(default_factory=dict)
    latencies: dict[str, list[float]] = field(default_factory=dict)

    def add(self, record: LogRecord, suspicious_endpoints: frozenset[str]) -> None:
        ip = record.ip

        req = self.requests.setdefault(ip, RequestSummary())
        req.timestamps.append(record.timestamp)
        req.count += 1

        if record.endpoint in suspicious_endpoints:
            if record.status in AUTH_FAILURE_STATUSES:
                fail = self.failures.setdefault(ip, FailureSummary())
                fail.count += 1
                fail.timestamps.append(record.timestamp)

            ep = self.endpoints.setdefault(record.endpoint, EndpointSummary())
            ep.count += 1
            ep.ips.append(ip)

        self.user_agents.setdefault(ip, Counter())[record.user_agent] += 1
        self.latencies.setdefault(ip, []).append(record.response_time)

    def merge(self, other: "BatchAggregate") -> "BatchAggregate":
        """Fold another shard's tables into this one and return self.

        Counts sum and sequences concatenate, so merging the aggregates of
        consecutive slices of a batch equals aggregating the whole batch.
        """
        for ip, req in other.requests.items():
            mine = self.requests.setdefault(ip, RequestSummary())
            mine.timestamps.extend(req.timestamps)
            mine.count += req.count
        for ip, fail in other.failures.items():
            mine = self.failures.setdefault(ip, FailureSummary())
            mine.count += fail.count
            mine.timestamps.extend(fail.timestamps)
        for endpoint, ep in other.endpoints.items():
            mine = self.endpoints.setdefault(endpoint, EndpointSummary())
            mine.count += ep.count
            mine.ips.extend(ep.ips)
        for ip, agents in other.user_agents.items():
            # Counter.update sums; new agents append after existing ones.
            self.user_agents.setdefault(ip, Counter()).update(agents)
        for ip, samples in other.latencies.items():
            self.latencies.setdefault(ip, []).extend(samples)
        return self


def aggregate(records: Iterable[LogRecord], policy: Policy) -> BatchAggregate:
    """One left-to-right pass over the batch."""
    agg = BatchAggregate()
    suspicious = policy.suspicious_endpoints
    for record in records:
        agg.add(record, suspicious)
    return agg
