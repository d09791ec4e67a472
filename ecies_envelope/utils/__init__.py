"""
Utils Package

Secret buffers, logging, metrics and key file I/O.
"""

from .secure_buffer import SecretBuffer, secure_zero
from .logger import EciesLogger
from .metrics import MetricsCollector, get_metrics_collector, reset_metrics_collector
from .key_io import KeyFileHandler

__all__ = [
    # Secret buffers
    "SecretBuffer",
    "secure_zero",
    # Logging
    "EciesLogger",
    # Metrics
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
    # Key I/O
    "KeyFileHandler",
]
