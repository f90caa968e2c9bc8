"""User-agent rotation: one address presenting many different clients.

Real clients keep a stable user agent.  Tooling that rotates agents to dodge
fingerprinting shows up as more than ``max_user_agents`` distinct strings.
"""

from activity_detector.models import MultiAgentAnomaly
from activity_detector.rules import Rule


class UserAgentAnomaly(Rule):
    id = "multi_agent"
    name = "Multiple User Agents"
    severity = "medium"
    category = "anomalies"

    def groups(self, aggregate):
        return aggregate.user_agents

    def trigger(self, ip, agents, policy):
        if len(agents) <= policy.max_user_agents:
            return None
        # max() keeps the first maximal key, i.e. the first agent seen.
        most_common = max(agents, key=agents.__getitem__)
        return MultiAgentAnomaly(
            ip=ip,
            agent_count=len(agents),
            most_common_agent=most_common,
            total_requests_from_ip=sum(agents.values()),
        )
