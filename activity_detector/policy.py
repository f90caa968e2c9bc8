"""Detection policy: the thresholds every rule reads.

Policies are usually kept as YAML next to the deployment and loaded with
load_policy().  Four fields are required and have no defaults; the three
tuning fields default to the historical fixed thresholds.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from activity_detector.errors import ConfigurationError

DEFAULT_POLICY_PATH = Path(__file__).resolve().parent / "policies" / "default.yml"

_REQUIRED_FIELDS = (
    "max_requests_per_minute",
    "max_failed_logins",
    "suspicious_endpoints",
    "time_window",
)


@dataclass(frozen=True)
class Policy:
    max_requests_per_minute: float
    max_failed_logins: int
    suspicious_endpoints: frozenset[str]
    time_window: int  # ms
    mass_scan_min_ips: int = 10
    max_user_agents: int = 5
    latency_stddev_ratio: float = 1.5

    def __post_init__(self):
        endpoints = self.suspicious_endpoints
        if isinstance(endpoints, str) or not isinstance(endpoints, Iterable):
            raise ConfigurationError(
                "'suspicious_endpoints' must be a list of endpoint strings"
            )
        endpoints = list(endpoints)
        if not all(isinstance(e, str) for e in endpoints):
            raise ConfigurationError("'suspicious_endpoints' entries must be strings")
        endpoints = frozenset(endpoints)
        object.__setattr__(self, "suspicious_endpoints", endpoints)

        _check_number("max_requests_per_minute", self.max_requests_per_minute)
        _check_int("max_failed_logins", self.max_failed_logins)
        _check_int("time_window", self.time_window, minimum=1)
        _check_int("mass_scan_min_ips", self.mass_scan_min_ips)
        _check_int("max_user_agents", self.max_user_agents)
        _check_number("latency_stddev_ratio", self.latency_stddev_ratio)

    @property
    def window_minutes(self) -> float:
        return self.time_window / 60_000


def _check_int(name, value, minimum=0):
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError(f"'{name}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"'{name}' must be >= {minimum}, got {value}")


def _check_number(name, value):
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigurationError(f"'{name}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"'{name}' must be finite, got {value}")
    if value < 0:
        raise ConfigurationError(f"'{name}' must not be negative, got {value}")


def policy_from_dict(data: Mapping, source: str = "policy") -> Policy:
    """Validate a decoded mapping and build a Policy.

    Unknown keys are rejected so a typo in a threshold name cannot silently
    fall back to a default.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{source}: expected a mapping of policy fields")

    for field in _REQUIRED_FIELDS:
        if field not in data:
            raise ConfigurationError(f"{source}: missing required field '{field}'")

    known = {f.name for f in fields(Policy)}
    unknown = sorted(str(k) for k in set(data) - known)
    if unknown:
        raise ConfigurationError(f"{source}: unknown field(s) {', '.join(unknown)}")

    try:
        return Policy(**data)
    except ConfigurationError as e:
        raise ConfigurationError(f"{source}: {e}") from e


def load_policy(path: str | Path = DEFAULT_POLICY_PATH) -> Policy:
    """Load and validate a YAML policy file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Policy file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path.name}: invalid YAML ({e})") from e

    return policy_from_dict(data or {}, source=path.name)


def coerce_policy(policy: Policy | Mapping) -> Policy:
    if isinstance(policy, Policy):
        return policy
    return policy_from_dict(policy)
