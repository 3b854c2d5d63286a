"""
Result types for the diagnostics probes.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProbeOutcome(str, Enum):
    """Classification of a single TCP probe."""
    OPEN = "open"
    CLOSED = "closed"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class TCPCheckResult:
    """Result of a TCP reachability probe."""
    host: str
    port: int
    outcome: ProbeOutcome
    latency_ms: int | None = None  # only when open
    reason: str | None = None

    @property
    def open(self) -> bool:
        return self.outcome is ProbeOutcome.OPEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "outcome": self.outcome.value,
            "open": self.open,
            "latency_ms": self.latency_ms,
            "reason": self.reason,
        }


@dataclass
class EchoAttempt:
    """One echo request and its reply, if any."""
    sequence: int
    sent_at: float | None = None
    received_at: float | None = None
    latency_ms: int | None = None
    error: str | None = None

    @property
    def received(self) -> bool:
        return self.received_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "received": self.received,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@dataclass(frozen=True)
class PingStatistics:
    """Loss and latency statistics derived from a completed run of attempts."""
    sent: int
    received: int
    loss_percent: float
    min_ms: int | None = None
    max_ms: int | None = None
    avg_ms: int | None = None

    @classmethod
    def from_attempts(cls, attempts: list[EchoAttempt]) -> "PingStatistics":
        """Compute statistics over a full run. Latency figures use received attempts only."""
        sent = len(attempts)
        latencies = [a.latency_ms for a in attempts if a.received and a.latency_ms is not None]
        received = sum(1 for a in attempts if a.received)

        loss = (sent - received) / sent * 100 if sent else 0.0

        if not latencies:
            return cls(sent=sent, received=received, loss_percent=loss)

        return cls(
            sent=sent,
            received=received,
            loss_percent=loss,
            min_ms=min(latencies),
            max_ms=max(latencies),
            avg_ms=sum(latencies) // len(latencies),
        )


def format_loss(loss_percent: float) -> str:
    """Loss percentage truncated (not rounded) to one decimal, for display."""
    return f"{math.floor(loss_percent * 10) / 10:.1f}%"


@dataclass
class PingResult:
    """Result of an ICMP echo run against one host."""
    host: str
    attempts: list[EchoAttempt] = field(default_factory=list)
    stats: PingStatistics | None = None

    def __post_init__(self):
        if self.stats is None:
            self.stats = PingStatistics.from_attempts(self.attempts)

    @property
    def reachable(self) -> bool:
        # Integer count decides, never the rounded percentage
        return self.stats.received > 0

    @property
    def sent(self) -> int:
        return self.stats.sent

    @property
    def received(self) -> int:
        return self.stats.received

    @property
    def loss_percent(self) -> float:
        return self.stats.loss_percent

    @property
    def min_ms(self) -> int | None:
        return self.stats.min_ms

    @property
    def max_ms(self) -> int | None:
        return self.stats.max_ms

    @property
    def avg_ms(self) -> int | None:
        return self.stats.avg_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "reachable": self.reachable,
            "sent": self.sent,
            "received": self.received,
            "loss_percent": self.loss_percent,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "avg_ms": self.avg_ms,
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass(frozen=True)
class ServiceEntry:
    """A well-known service and its TCP port."""
    name: str
    port: int


@dataclass(frozen=True)
class ServiceResult:
    """Open or closed/filtered classification for one catalog entry."""
    name: str
    port: int
    open: bool
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "port": self.port,
            "open": self.open,
            "reason": self.reason,
        }


@dataclass
class DiagnosticsReport:
    """Combined ping and service-scan report for one host."""
    host: str
    ping_result: PingResult | None = None
    ping_error: str | None = None
    scan_result: list[ServiceResult] = field(default_factory=list)

    @property
    def overall_reachable(self) -> bool:
        """Host reachability is decided by ICMP alone; open ports do not count."""
        return self.ping_result is not None and self.ping_result.reachable

    @property
    def open_services(self) -> list[ServiceResult]:
        return [s for s in self.scan_result if s.open]

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "ping_result": self.ping_result.to_dict() if self.ping_result else None,
            "ping_error": self.ping_error,
            "scan_result": [s.to_dict() for s in self.scan_result],
            "overall_reachable": self.overall_reachable,
        }
