"""Typed records flowing in and out of the detector.

LogRecord is the input unit.  Findings are a closed set of frozen
dataclasses tagged by ``kind`` so renderers can dispatch exhaustively:

    Finding = RateAbuseFinding | BruteForceFinding | MassScanFinding
            | AnomalyFinding (MultiAgentAnomaly | LatencyVarianceAnomaly)
"""

import math
from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from activity_detector.errors import InputError

_RECORD_FIELDS = ("ip", "endpoint", "timestamp", "status", "user_agent", "response_time")


@dataclass(frozen=True, slots=True)
class LogRecord:
    ip: str
    endpoint: str
    timestamp: int  # ms since epoch
    status: int
    user_agent: str
    response_time: float  # ms

    @classmethod
    def from_dict(cls, data: Mapping) -> "LogRecord":
        """Build a record from a decoded log line.

        Extra keys are ignored.  Missing keys, wrong types and negative or
        non-finite response times raise InputError -- there is no defaulting.
        """
        if not isinstance(data, Mapping):
            raise InputError(f"expected a mapping, got {type(data).__name__}")
        for field in _RECORD_FIELDS:
            if field not in data:
                raise InputError(f"missing required field '{field}'")

        for field in ("ip", "endpoint", "user_agent"):
            if not isinstance(data[field], str):
                raise InputError(f"field '{field}' must be a string")
        for field in ("timestamp", "status"):
            if not _is_int(data[field]):
                raise InputError(f"field '{field}' must be an integer")
        response_time = data["response_time"]
        if not _is_number(response_time):
            raise InputError("field 'response_time' must be a number")
        if not math.isfinite(response_time):
            raise InputError("field 'response_time' must be finite")
        if response_time < 0:
            raise InputError("field 'response_time' must not be negative")

        return cls(
            ip=data["ip"],
            endpoint=data["endpoint"],
            timestamp=data["timestamp"],
            status=data["status"],
            user_agent=data["user_agent"],
            response_time=float(response_time),
        )


def _is_int(value) -> bool:
    # bool is an int subclass; a JSON true is not a status code.
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return _is_int(value) or isinstance(value, float)


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------

class Finding:
    """Base for every detector output record."""

    kind: str

    def to_dict(self) -> dict:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class RateAbuseFinding(Finding):
    ip: str
    observed_rate: float  # requests per minute, 2 dp
    limit: float
    window_minutes: float
    reason: str = "rate exceeded"

    kind = "rate_abuse"


@dataclass(frozen=True)
class BruteForceFinding(Finding):
    ip: str
    failed_attempts: int
    limit: int
    attempt_timestamps: tuple[int, ...]
    first_attempt_time: int
    last_attempt_time: int
    attack_type: str = "brute force login"

    kind = "brute_force"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["attempt_timestamps"] = list(self.attempt_timestamps)
        d["first_attempt_at"] = _iso(self.first_attempt_time)
        d["last_attempt_at"] = _iso(self.last_attempt_time)
        return d


@dataclass(frozen=True)
class MassScanFinding(Finding):
    endpoint: str
    total_accesses: int
    unique_ips: int
    description: str = "mass access from multiple IPs"

    kind = "mass_scan"


class AnomalyFinding(Finding):
    """Behavioral anomaly; see the two concrete sub-kinds below."""

    ip: str
    anomaly_type: str


@dataclass(frozen=True)
class MultiAgentAnomaly(AnomalyFinding):
    ip: str
    agent_count: int
    most_common_agent: str
    total_requests_from_ip: int
    anomaly_type: str = "multiple user agents"
    description: str = "too many distinct user agents from one address"

    kind = "multi_agent"


@dataclass(frozen=True)
class LatencyVarianceAnomaly(AnomalyFinding):
    ip: str
    mean_ms: float
    stddev_ms: float
    anomaly_type: str = "irregular response times"
    description: str = "inconsistent response times from one address"

    kind = "latency_variance"


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DetectionReport:
    rate_abuse: tuple[RateAbuseFinding, ...] = ()
    brute_force: tuple[BruteForceFinding, ...] = ()
    mass_scan: tuple[MassScanFinding, ...] = ()
    anomalies: tuple[AnomalyFinding, ...] = ()

    @property
    def total_suspicious_events(self) -> int:
        # One per finding, not per log line or distinct address.
        return (len(self.rate_abuse) + len(self.brute_force)
                + len(self.mass_scan) + len(self.anomalies))

    def findings(self) -> Iterator[Finding]:
        yield from self.rate_abuse
        yield from self.brute_force
        yield from self.mass_scan
        yield from self.anomalies

    def to_dict(self) -> dict:
        return {
            "rate_abuse": [f.to_dict() for f in self.rate_abuse],
            "brute_force": [f.to_dict() for f in self.brute_force],
            "mass_scan": [f.to_dict() for f in self.mass_scan],
            "anomalies": [f.to_dict() for f in self.anomalies],
            "total_suspicious_events": self.total_suspicious_events,
        }
