"""Irregular response times: latency spread far wider than its mean.

Fires when the population standard deviation of an address's response
times exceeds ``latency_stddev_ratio`` times their mean.  Heavy, uneven
payloads (injection probes, oversized uploads) tend to produce this shape.
"""

import statistics

from activity_detector.models import LatencyVarianceAnomaly
from activity_detector.rules import Rule


class LatencyAnomaly(Rule):
    id = "latency_variance"
    name = "Irregular Response Times"
    severity = "low"
    category = "anomalies"

    def groups(self, aggregate):
        return aggregate.latencies

    def trigger(self, ip, samples, policy):
        if len(samples) < 2:
            return None
        mean = statistics.fmean(samples)
        stddev = statistics.pstdev(samples, mu=mean)
        if stddev <= mean * policy.latency_stddev_ratio:
            return None
        return LatencyVarianceAnomaly(
            ip=ip,
            mean_ms=round(mean, 2),
            stddev_ms=round(stddev, 2),
        )
