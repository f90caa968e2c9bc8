"""Rate abuse: one address sustaining more requests per minute than policy allows.

Catches scrapers, credential-stuffing proxies and runaway client loops.
Every request opens a window ``time_window`` ms long; the first window whose
request count, scaled to a per-minute rate, exceeds the limit fires and the
address is not scanned further.
"""

from activity_detector.models import RateAbuseFinding
from activity_detector.rules import Rule
from activity_detector.sliding_window import SlidingWindow


class RateAbuse(Rule):
    id = "rate_abuse"
    name = "API Rate Abuse"
    severity = "high"
    category = "rate_abuse"

    def groups(self, aggregate):
        return aggregate.requests

    def trigger(self, ip, summary, policy):
        # A lone request is never a rate, however short the window.
        if summary.count < 2:
            return None

        window_minutes = policy.window_minutes
        window = SlidingWindow(policy.time_window, summary.timestamps)
        for _, in_window in window.counts():
            rate = in_window / window_minutes
            if rate > policy.max_requests_per_minute:
                return RateAbuseFinding(
                    ip=ip,
                    observed_rate=round(rate, 2),
                    limit=policy.max_requests_per_minute,
                    window_minutes=window_minutes,
                )
        return None
