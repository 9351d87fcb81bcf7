"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class Backoff(StrEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often and how patiently one class of failure is retried.

    ``max_attempts`` counts every attempt of a request, the first one included.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff: Backoff = Backoff.LINEAR

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""

        if self.backoff is Backoff.EXPONENTIAL:
            return self.base_delay * (2**attempt)
        return self.base_delay * (attempt + 1)

    def allows_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts - 1


def _rate_limit_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=5.0, backoff=Backoff.EXPONENTIAL)


def _network_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=1.0, backoff=Backoff.LINEAR)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    rate_limited: RetryPolicy = field(default_factory=_rate_limit_policy)
    network: RetryPolicy = field(default_factory=_network_policy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
