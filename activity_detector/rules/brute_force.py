"""Brute force: repeated 401/403 responses from one address on sensitive endpoints.

Counts every failed authentication in the batch (no time window) and fires
when the count is strictly above ``max_failed_logins``.
"""

from activity_detector.models import BruteForceFinding
from activity_detector.rules import Rule


class BruteForce(Rule):
    id = "brute_force"
    name = "Brute Force Login"
    severity = "high"
    category = "brute_force"

    def groups(self, aggregate):
        return aggregate.failures

    def trigger(self, ip, summary, policy):
        if summary.count <= policy.max_failed_logins:
            return None
        # Arrival order is not necessarily time order.
        return BruteForceFinding(
            ip=ip,
            failed_attempts=summary.count,
            limit=policy.max_failed_logins,
            attempt_timestamps=tuple(summary.timestamps),
            first_attempt_time=min(summary.timestamps),
            last_attempt_time=max(summary.timestamps),
        )
