"""
Metrics Collection System

Lightweight metrics for ECIES operations.
Tracks encrypt/decrypt calls, latency, payload sizes and failures by kind.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional

from ..config import ECIES_CONSTANTS


@dataclass
class OperationSample:
    """Single operation sample"""
    timestamp: datetime
    operation: str
    suite: str
    success: bool
    payload_bytes: int
    latency_ms: float
    error_kind: Optional[str] = None


@dataclass
class OperationStats:
    """Aggregated statistics"""
    total_operations: int = 0
    successful_operations: int = 0
    failed_operations: int = 0
    avg_latency_ms: float = 0.0
    min_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    p95_latency_ms: float = 0.0
    error_rate: float = 0.0
    total_payload_bytes: int = 0

    # Per operation name
    operations: Dict[str, int] = field(default_factory=dict)

    # Per error kind
    error_kinds: Dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """
    Collects and aggregates metrics for ECIES operations.

    Thread-safe: one collector may be shared by concurrent encrypt/decrypt calls.
    """

    def __init__(self, max_samples: int = ECIES_CONSTANTS.METRICS_MAX_SAMPLES):
        """
        Initialize metrics collector

        Args:
            max_samples: Maximum number of samples to keep in memory
        """
        self.max_samples = max_samples
        self._samples: List[OperationSample] = []
        self._lock = Lock()
        self._start_time = datetime.now(timezone.utc)

        # Real-time counters
        self._counters = {
            'total_operations': 0,
            'encrypt_operations': 0,
            'decrypt_operations': 0,
            'failed_operations': 0,
            'authentication_failures': 0,
        }

        self._latencies: List[float] = []

    def record_operation(
        self,
        operation: str,
        suite: str,
        success: bool,
        payload_bytes: int,
        latency_ms: float,
        error_kind: Optional[str] = None,
    ):
        """
        Record a single encrypt or decrypt call

        Args:
            operation: "encrypt" or "decrypt"
            suite: Cipher suite label (e.g. "secp256r1/aes-128-cbc/sha256/sha256")
            success: Whether the call returned a result
            payload_bytes: Plaintext length (encrypt) or cryptogram length (decrypt)
            latency_ms: Call latency in milliseconds
            error_kind: ErrorKind value if the call failed
        """
        with self._lock:
            sample = OperationSample(
                timestamp=datetime.now(timezone.utc),
                operation=operation,
                suite=suite,
                success=success,
                payload_bytes=payload_bytes,
                latency_ms=latency_ms,
                error_kind=error_kind,
            )

            # FIFO
            self._samples.append(sample)
            if len(self._samples) > self.max_samples:
                self._samples.pop(0)

            self._counters['total_operations'] += 1
            if operation == 'encrypt':
                self._counters['encrypt_operations'] += 1
            elif operation == 'decrypt':
                self._counters['decrypt_operations'] += 1
            if not success:
                self._counters['failed_operations'] += 1
                if error_kind == 'authentication_failure':
                    self._counters['authentication_failures'] += 1

            self._latencies.append(latency_ms)
            if len(self._latencies) > ECIES_CONSTANTS.METRICS_MAX_LATENCIES:
                self._latencies.pop(0)

    def get_stats(self, operation: Optional[str] = None) -> OperationStats:
        """
        Get aggregated statistics

        Args:
            operation: Only include samples for this operation (None = all)

        Returns:
            OperationStats with aggregated data
        """
        with self._lock:
            samples = self._samples
            if operation:
                samples = [s for s in samples if s.operation == operation]

            if not samples:
                return OperationStats()

            total = len(samples)
            successful = len([s for s in samples if s.success])
            failed = total - successful

            latencies = [s.latency_ms for s in samples]

            operations = defaultdict(int)
            error_kinds = defaultdict(int)
            for sample in samples:
                operations[sample.operation] += 1
                if sample.error_kind:
                    error_kinds[sample.error_kind] += 1

            return OperationStats(
                total_operations=total,
                successful_operations=successful,
                failed_operations=failed,
                avg_latency_ms=sum(latencies) / total,
                min_latency_ms=min(latencies),
                max_latency_ms=max(latencies),
                p95_latency_ms=self._percentile(latencies if operation else self._latencies, 95),
                error_rate=failed / total * 100,
                total_payload_bytes=sum(s.payload_bytes for s in samples),
                operations=dict(operations),
                error_kinds=dict(error_kinds),
            )

    @staticmethod
    def _percentile(latencies: List[float], percent: int) -> float:
        # Nearest rank
        if not latencies:
            return 0.0
        ordered = sorted(latencies)
        rank = max(0, math.ceil(percent / 100 * len(ordered)) - 1)
        return ordered[rank]

    def get_counters(self) -> Dict[str, int]:
        """Get real-time counters"""
        with self._lock:
            return self._counters.copy()

    def get_uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    def get_recent_errors(self, limit: int = 10) -> List[OperationSample]:
        """Get most recent failures, most recent first"""
        with self._lock:
            errors = [s for s in self._samples if not s.success]
            return list(reversed(errors[-limit:]))

    def reset(self):
        """Reset all metrics (useful for testing)"""
        with self._lock:
            self._samples.clear()
            self._latencies.clear()
            self._counters = {k: 0 for k in self._counters}
            self._start_time = datetime.now(timezone.utc)

    def export_prometheus_format(self) -> str:
        """
        Export metrics in Prometheus text format

        Returns:
            Prometheus-compatible metrics string
        """
        stats = self.get_stats()
        counters = self.get_counters()

        lines = []

        lines.append('# HELP ecies_operations_total Total number of ECIES operations')
        lines.append('# TYPE ecies_operations_total counter')
        lines.append(f'ecies_operations_total {counters["total_operations"]}')

        lines.append('# HELP ecies_encrypt_total Total number of encrypt calls')
        lines.append('# TYPE ecies_encrypt_total counter')
        lines.append(f'ecies_encrypt_total {counters["encrypt_operations"]}')

        lines.append('# HELP ecies_decrypt_total Total number of decrypt calls')
        lines.append('# TYPE ecies_decrypt_total counter')
        lines.append(f'ecies_decrypt_total {counters["decrypt_operations"]}')

        lines.append('# HELP ecies_failures_total Total number of failed calls')
        lines.append('# TYPE ecies_failures_total counter')
        lines.append(f'ecies_failures_total {counters["failed_operations"]}')

        lines.append('# HELP ecies_authentication_failures_total MAC verification failures')
        lines.append('# TYPE ecies_authentication_failures_total counter')
        lines.append(f'ecies_authentication_failures_total {counters["authentication_failures"]}')

        lines.append('# HELP ecies_error_rate Current error rate percentage')
        lines.append('# TYPE ecies_error_rate gauge')
        lines.append(f'ecies_error_rate {stats.error_rate}')

        lines.append('# HELP ecies_latency_avg_ms Average call latency in milliseconds')
        lines.append('# TYPE ecies_latency_avg_ms gauge')
        lines.append(f'ecies_latency_avg_ms {stats.avg_latency_ms}')

        lines.append('# HELP ecies_latency_p95_ms 95th percentile latency of recent calls')
        lines.append('# TYPE ecies_latency_p95_ms gauge')
        lines.append(f'ecies_latency_p95_ms {stats.p95_latency_ms}')

        lines.append('# HELP ecies_uptime_seconds Seconds since the collector was created or reset')
        lines.append('# TYPE ecies_uptime_seconds gauge')
        lines.append(f'ecies_uptime_seconds {self.get_uptime_seconds()}')

        return '\n'.join(lines) + '\n'


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create global metrics collector"""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def reset_metrics_collector():
    """Reset global metrics collector (for testing)"""
    global _metrics_collector
    if _metrics_collector:
        _metrics_collector.reset()
