"""Synthetic API access-log generator.

Builds a batch of access-log records from a pool of client profiles, some
normal and some abusive, so the detector can be exercised end to end.  The
batch is written as JSONL or produced to a Kafka topic.  Generation is
seeded, so the same arguments always give the same batch.

Usage:
    python producer.py --output access.jsonl
    python producer.py --normal 20 --rate-abusers 2 --brute-forcers 1 --scanners 15
    python producer.py --bootstrap-servers kafka-1:29092 --topic api-access-logs
"""

import argparse
import json
import random
import signal
import time
from dataclasses import dataclass, field

from confluent_kafka import Producer
from confluent_kafka.admin import AdminClient, NewTopic

ENDPOINTS = ["/api/users", "/api/orders", "/api/products", "/api/search", "/api/health"]
SENSITIVE_ENDPOINTS = ["/api/login", "/api/admin"]
BROWSER_AGENT = "Mozilla/5.0 (X11; Linux x86_64)"
ROTATED_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0)",
    "curl/8.4.0",
    "python-requests/2.31.0",
    "PostmanRuntime/7.36.0",
    "insomnia/2023.5.8",
    "Wget/1.21.4",
    "Java/17.0.9",
    "Go-http-client/2.0",
]

running = True


def _shutdown(sig, frame):
    global running
    print("\nShutting down generator...")
    running = False


# ---------------------------------------------------------------------------
# Client profiles
# ---------------------------------------------------------------------------

@dataclass
class Client:
    ip: str
    role: str  # normal | rate_abuser | brute_forcer | scanner | agent_rotator | erratic
    requests_per_min: float
    user_agents: list[str] = field(default_factory=lambda: [BROWSER_AGENT])
    endpoints: list[str] = field(default_factory=lambda: list(ENDPOINTS))
    failure_rate: float = 0.0  # fraction of sensitive hits answered 401/403
    latency_ms: tuple[float, float] = (40, 250)
    spike_rate: float = 0.0  # fraction of requests that take 20-60x longer


def create_clients(rng, n_normal=8, n_rate_abusers=1, n_brute_forcers=1,
                   n_scanners=12, n_rotators=1, n_erratic=1) -> list[Client]:
    """Build the client pool. Each role gets its own address block."""
    clients = []

    # --- Normal users: browsing, the occasional mistyped password ---
    for i in range(n_normal):
        clients.append(Client(
            ip=f"10.0.1.{i + 1}", role="normal",
            requests_per_min=rng.uniform(2, 20),
            endpoints=ENDPOINTS + ["/api/login"],
            failure_rate=0.1,
        ))

    # --- Rate abusers: far above any sane per-minute budget ---
    for i in range(n_rate_abusers):
        clients.append(Client(
            ip=f"10.0.2.{i + 1}", role="rate_abuser",
            requests_per_min=rng.uniform(150, 300),
            user_agents=["python-requests/2.31.0"],
        ))

    # --- Brute forcers: hammering the login endpoint, mostly failing ---
    for i in range(n_brute_forcers):
        clients.append(Client(
            ip=f"10.0.3.{i + 1}", role="brute_forcer",
            requests_per_min=rng.uniform(20, 40),
            endpoints=["/api/login"],
            failure_rate=0.95,
        ))

    # --- Scanners: a swarm of addresses each probing admin a few times ---
    for i in range(n_scanners):
        clients.append(Client(
            ip=f"10.0.4.{i + 1}", role="scanner",
            requests_per_min=rng.uniform(1, 3),
            endpoints=["/api/admin"],
            failure_rate=1.0,
        ))

    # --- Agent rotators: one address cycling through client fingerprints ---
    for i in range(n_rotators):
        clients.append(Client(
            ip=f"10.0.5.{i + 1}", role="agent_rotator",
            requests_per_min=rng.uniform(10, 20),
            user_agents=list(ROTATED_AGENTS),
        ))

    # --- Erratic: mostly fast, with heavy outliers ---
    for i in range(n_erratic):
        clients.append(Client(
            ip=f"10.0.6.{i + 1}", role="erratic",
            requests_per_min=rng.uniform(5, 10),
            latency_ms=(20, 40), spike_rate=0.1,
        ))

    return clients


# ---------------------------------------------------------------------------
# Record generation
# ---------------------------------------------------------------------------

def make_record(rng, client: Client, timestamp: int) -> dict:
    """Generate one access-log record for a client at *timestamp* (ms)."""
    endpoint = rng.choice(client.endpoints)
    status = 200
    if endpoint in SENSITIVE_ENDPOINTS and rng.random() < client.failure_rate:
        status = 401 if endpoint == "/api/login" else 403

    latency = rng.uniform(*client.latency_ms)
    if rng.random() < client.spike_rate:
        latency *= rng.uniform(20, 60)

    return {
        "ip": client.ip,
        "endpoint": endpoint,
        "timestamp": timestamp,
        "status": status,
        "user_agent": rng.choice(client.user_agents),
        "response_time": round(latency, 1),
    }


def generate_batch(clients: list[Client], rng, start_ms: int,
                   duration_s: float = 120) -> list[dict]:
    """Spread each client's requests evenly (with jitter) over the duration.

    The result is ordered by timestamp, like a merged access log.
    """
    records = []
    duration_ms = int(duration_s * 1000)
    for client in clients:
        n = max(1, round(client.requests_per_min * duration_s / 60))
        step = duration_ms / n
        for i in range(n):
            ts = start_ms + int(i * step + rng.random() * step)
            records.append(make_record(rng, client, ts))
    records.sort(key=lambda r: r["timestamp"])
    return records


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _ensure_topics(bootstrap_servers, topics):
    """Create Kafka topics if they don't already exist."""
    admin = AdminClient({"bootstrap.servers": bootstrap_servers})
    new_topics = [NewTopic(t, num_partitions=3, replication_factor=3) for t in topics]
    fs = admin.create_topics(new_topics)
    for topic, f in fs.items():
        try:
            f.result()
            print(f"Created topic '{topic}'")
        except Exception as e:
            if "TOPIC_ALREADY_EXISTS" in str(e):
                print(f"Topic '{topic}' already exists")
            else:
                raise


def write_jsonl(records, path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record) + "\n")


def produce(records, bootstrap_servers, topic) -> int:
    """Produce the batch keyed by IP, so one address stays on one partition."""
    _ensure_topics(bootstrap_servers, [topic])
    producer = Producer({
        "bootstrap.servers": bootstrap_servers,
        "acks": "all",
        "client.id": "access-log-generator",
    })

    count = 0
    for record in records:
        if not running:
            break
        producer.produce(
            topic=topic,
            key=record["ip"].encode(),
            value=json.dumps(record),
        )
        producer.poll(0)
        count += 1
        if count % 500 == 0:
            print(f"  ... {count} records produced")

    producer.flush()
    return count


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="API access-log generator")
    parser.add_argument("--output", help="Write JSONL here instead of producing to Kafka")
    parser.add_argument("--bootstrap-servers", default="localhost:9092")
    parser.add_argument("--topic", default="api-access-logs")
    parser.add_argument("--normal", type=int, default=8)
    parser.add_argument("--rate-abusers", type=int, default=1)
    parser.add_argument("--brute-forcers", type=int, default=1)
    parser.add_argument("--scanners", type=int, default=12)
    parser.add_argument("--rotators", type=int, default=1)
    parser.add_argument("--erratic", type=int, default=1)
    parser.add_argument("--duration", type=float, default=120,
                        help="Seconds of traffic to simulate")
    parser.add_argument("--seed", type=int, default=7)
    args = parser.parse_args(argv)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    rng = random.Random(args.seed)
    clients = create_clients(
        rng, args.normal, args.rate_abusers, args.brute_forcers,
        args.scanners, args.rotators, args.erratic,
    )
    records = generate_batch(clients, rng, int(time.time() * 1000), args.duration)

    print(f"Clients: {len(clients)} total, {len(records)} records")
    for c in clients:
        print(f"  {c.ip:<12s} {c.role:<14s} ~{c.requests_per_min:>6.0f} rpm")

    if args.output:
        write_jsonl(records, args.output)
        print(f"Done. {len(records)} records written to {args.output}.")
    else:
        count = produce(records, args.bootstrap_servers, args.topic)
        print(f"Done. {count} records produced.")


if __name__ == "__main__":
    main()
