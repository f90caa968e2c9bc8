# Detection rules as Python classes, one per file.
#
# Every rule reads one table of the shared BatchAggregate (see groups()) and
# decides per key whether that key produced a finding (see trigger()).  The
# engine runs the aggregator once and hands the same aggregate to every rule,
# so rules never see raw log records and never depend on each other.


class Rule:
    """Base detection rule. Subclass and implement groups() + trigger()."""

    id: str
    name: str
    severity: str  # low | medium | high | critical
    category: str  # report collection: rate_abuse | brute_force | mass_scan | anomalies

    def groups(self, aggregate) -> dict:
        """Return the per-key summaries this rule evaluates, keyed by IP or endpoint."""
        raise NotImplementedError

    def trigger(self, key, summary, policy):
        """Return a Finding for this key, or None if it stays under policy."""
        raise NotImplementedError

    def evaluate(self, aggregate, policy) -> list:
        """Run trigger() over every group; at most one finding per key."""
        findings = []
        for key, summary in self.groups(aggregate).items():
            finding = self.trigger(key, summary, policy)
            if finding is not None:
                findings.append(finding)
        return findings


from activity_detector.rules.rate_abuse import RateAbuse
from activity_detector.rules.brute_force import BruteForce
from activity_detector.rules.mass_scan import MassScan
from activity_detector.rules.user_agent_anomaly import UserAgentAnomaly
from activity_detector.rules.latency_anomaly import LatencyAnomaly

# Order matters only inside a shared collection: user-agent anomalies are
# reported ahead of latency anomalies.
ALL_RULES = [RateAbuse(), BruteForce(), MassScan(), UserAgentAnomaly(), LatencyAnomaly()]
