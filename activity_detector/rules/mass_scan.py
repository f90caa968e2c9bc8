"""Mass scan: one sensitive endpoint touched by many distinct addresses.

A distributed sweep shows up as breadth rather than volume, so the rule
counts distinct IPs, not accesses.  Only endpoints listed in the policy are
aggregated, so nothing else is ever evaluated.
"""

from activity_detector.models import MassScanFinding
from activity_detector.rules import Rule


class MassScan(Rule):
    id = "mass_scan"
    name = "Sensitive Endpoint Mass Scan"
    severity = "medium"
    category = "mass_scan"

    def groups(self, aggregate):
        return aggregate.endpoints

    def trigger(self, endpoint, summary, policy):
        unique_ips = summary.unique_ips
        if unique_ips <= policy.mass_scan_min_ips:
            return None
        return MassScanFinding(
            endpoint=endpoint,
            total_accesses=summary.count,
            unique_ips=unique_ips,
        )
