"""Detection engine: aggregates a log batch once and runs every rule over it.

Pure business logic, no I/O.  The CLI (or any other host) supplies the batch
and the policy and renders the resulting report.

    detect(logs, policy) -> DetectionReport

Validation happens up front: a bad policy raises ConfigurationError and a
malformed record rejects the whole batch with InputError before any
aggregation runs.
"""

import logging
from collections.abc import Iterable, Mapping

from activity_detector.aggregate import aggregate
from activity_detector.errors import ConfigurationError, InputError
from activity_detector.models import DetectionReport, LogRecord
from activity_detector.policy import Policy, coerce_policy
from activity_detector.rules import ALL_RULES, Rule

logger = logging.getLogger(__name__)

CATEGORIES = ("rate_abuse", "brute_force", "mass_scan", "anomalies")


class DetectionEngine:

    def __init__(self, rules: list[Rule] | None = None):
        self.rules = rules or ALL_RULES
        for rule in self.rules:
            if rule.category not in CATEGORIES:
                raise ConfigurationError(
                    f"Rule '{rule.id}' has unknown category '{rule.category}'"
                )

    def run(self, logs: Iterable[LogRecord | Mapping],
            policy: Policy | Mapping) -> DetectionReport:
        """Evaluate one finite batch and return the report.

        Steps:
          1. Validate  -- policy first, then every record
          2. Aggregate -- single pass into per-key tables
          3. Detect    -- each rule reads its table independently
          4. Assemble  -- route findings by rule category
        """
        policy = coerce_policy(policy)
        records = _coerce_records(logs)

        agg = aggregate(records, policy)
        logger.debug("aggregated %d records from %d addresses",
                     len(records), len(agg.requests))

        collected: dict[str, list] = {c: [] for c in CATEGORIES}
        for rule in self.rules:
            findings = rule.evaluate(agg, policy)
            if findings:
                logger.debug("rule %s produced %d finding(s)", rule.id, len(findings))
            collected[rule.category].extend(findings)

        return DetectionReport(
            rate_abuse=tuple(collected["rate_abuse"]),
            brute_force=tuple(collected["brute_force"]),
            mass_scan=tuple(collected["mass_scan"]),
            anomalies=tuple(collected["anomalies"]),
        )


def _coerce_records(logs) -> list[LogRecord]:
    records = []
    for index, item in enumerate(logs):
        if isinstance(item, LogRecord):
            records.append(item)
            continue
        try:
            records.append(LogRecord.from_dict(item))
        except InputError as e:
            raise InputError(f"record {index}: {e}") from e
    return records


def detect(logs: Iterable[LogRecord | Mapping],
           policy: Policy | Mapping) -> DetectionReport:
    """Run the default rule set over one batch."""
    return DetectionEngine().run(logs, policy)
