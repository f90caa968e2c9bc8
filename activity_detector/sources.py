"""Log sources: turn a file or a Kafka topic into one finite batch.

Both readers return plain dicts; LogRecord validation happens in the engine
so a bad record is reported with its batch index.
"""

import json
import logging
import sys
import time
from pathlib import Path

from confluent_kafka import Consumer, KafkaError

from activity_detector.errors import InputError

logger = logging.getLogger(__name__)


def read_jsonl(path: str | Path) -> list[dict]:
    """Read one JSON object per line.  ``-`` reads stdin; blank lines are skipped."""
    if str(path) == "-":
        return _decode_lines(sys.stdin, "<stdin>")

    path = Path(path)
    if not path.is_file():
        raise InputError(f"Log file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return _decode_lines(f, path.name)


def _decode_lines(lines, source: str) -> list[dict]:
    try:
        return _parse_lines(lines, source)
    except UnicodeDecodeError as e:
        raise InputError(f"{source}: not valid UTF-8") from e


def _parse_lines(lines, source: str) -> list[dict]:
    records = []
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise InputError(f"{source}:{lineno}: invalid JSON ({e.msg})") from e
    return records


def read_kafka(bootstrap_servers: str, topic: str,
               group_id: str = "activity-detector",
               idle_timeout: float = 10.0) -> list[dict]:
    """Drain *topic* from the earliest offset and return everything read.

    Stops once every assigned partition has reported end-of-partition, or
    when nothing arrives for *idle_timeout* seconds.  Offsets are not
    committed, so the same topic can be re-analyzed.
    """
    consumer = Consumer({
        "bootstrap.servers": bootstrap_servers,
        "group.id": group_id,
        "auto.offset.reset": "earliest",
        "enable.auto.commit": False,
        "enable.partition.eof": True,
    })
    consumer.subscribe([topic])

    records = []
    finished: set[int] = set()
    last_message = time.monotonic()
    try:
        while True:
            msg = consumer.poll(1.0)
            if msg is None:
                if time.monotonic() - last_message > idle_timeout:
                    logger.info("no messages for %.0fs, closing batch", idle_timeout)
                    break
                continue
            last_message = time.monotonic()

            if msg.error():
                if msg.error().code() == KafkaError._PARTITION_EOF:
                    finished.add(msg.partition())
                    assigned = consumer.assignment()
                    if assigned and finished >= {tp.partition for tp in assigned}:
                        break
                    continue
                logger.warning("consumer error: %s", msg.error())
                continue

            finished.discard(msg.partition())
            try:
                records.append(json.loads(msg.value().decode("utf-8")))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise InputError(
                    f"{topic}[{msg.partition()}]@{msg.offset()}: undecodable message"
                ) from e
    finally:
        consumer.close()

    logger.info("read %d records from topic '%s'", len(records), topic)
    return records
