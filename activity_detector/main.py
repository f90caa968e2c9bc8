"""Batch detection CLI: reads one log batch, runs the engine, writes the report.

The batch comes from a JSONL file (or stdin) or is drained from a Kafka
topic.  Findings are printed one per line; the full report is written as
JSON to --output (stdout when omitted).

Usage:
    python -m activity_detector.main --logs access.jsonl
    python -m activity_detector.main --logs - --policy strict.yml --output report.json
    python -m activity_detector.main --bootstrap-servers kafka-1:29092 --input-topic api-access-logs
"""

import argparse
import json
import logging
import sys
import time

from activity_detector import metrics
from activity_detector.engine import DetectionEngine
from activity_detector.errors import DetectorError
from activity_detector.policy import DEFAULT_POLICY_PATH, load_policy
from activity_detector.sources import read_jsonl, read_kafka

logger = logging.getLogger("activity_detector")


def _subject(finding) -> str:
    return getattr(finding, "ip", None) or getattr(finding, "endpoint", "?")


def _print_findings(report, stream) -> None:
    for finding in report.findings():
        print(f"FINDING  kind={finding.kind:<18s} subject={_subject(finding)}",
              file=stream)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Suspicious-activity detector")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--logs", help="JSONL access log, '-' for stdin")
    source.add_argument("--bootstrap-servers",
                        help="Kafka bootstrap servers to drain --input-topic from")
    parser.add_argument("--input-topic", default="api-access-logs")
    parser.add_argument("--group-id", default="activity-detector")
    parser.add_argument("--idle-timeout", type=float, default=10.0,
                        help="Seconds without Kafka messages before the batch closes")
    parser.add_argument("--policy", default=str(DEFAULT_POLICY_PATH),
                        help="YAML policy file (default: bundled policy)")
    parser.add_argument("--output", help="Write the JSON report here instead of stdout")
    parser.add_argument("--metrics-file",
                        help="Write Prometheus metrics to this textfile after the run")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    try:
        policy = load_policy(args.policy)
        if args.logs:
            logs = read_jsonl(args.logs)
        else:
            logs = read_kafka(args.bootstrap_servers, args.input_topic,
                              group_id=args.group_id, idle_timeout=args.idle_timeout)

        engine = DetectionEngine()
        started = time.perf_counter()
        report = engine.run(logs, policy)
        elapsed = time.perf_counter() - started
    except DetectorError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logger.info("analyzed %d records with %d rules in %.3fs",
                len(logs), len(engine.rules), elapsed)
    _print_findings(report, sys.stderr)

    rendered = json.dumps(report.to_dict(), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(rendered + "\n")
    else:
        print(rendered)

    if args.metrics_file:
        metrics.record_run(report, len(logs), elapsed)
        metrics.write_metrics(args.metrics_file)

    print(f"Done. {len(logs)} records analyzed, "
          f"{report.total_suspicious_events} suspicious events.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
