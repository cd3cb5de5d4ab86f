"""
Data model shared by the sequential and parallel scan paths.

    Event          one high-divergence window, ``[start, end)``
    ScanRange      contiguous block of window start positions for one worker
    ScanParameters validated run configuration
    ScanResult     ordered events plus timing and completion status
"""

# ═══════════════════════════════════════════════════════════════════════════════
# IMPORTS
# ═══════════════════════════════════════════════════════════════════════════════
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from RecombScanner.config.analysis import (
    EVENT_MESSAGE,
    EXECUTOR_KINDS,
    SCAN_CONFIG,
    SCORING_METHODS,
)
from RecombScanner.core.errors import ConfigurationError, ScanCancelledError


# ═══════════════════════════════════════════════════════════════════════════════
# EVENTS AND RANGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, order=True)
class Event:
    """A window whose mismatch rate exceeded the threshold."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def describe(self) -> str:
        return EVENT_MESSAGE.format(start=self.start, end=self.end)


@dataclass(frozen=True)
class ScanRange:
    """
    Half-open interval ``[start, end)`` of window start positions.

    Attributes:
        index: Submission order of the chunk (0-based)
        start: First window start scored by the chunk
        end:   Exclusive bound on window starts
    """
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return max(0, self.end - self.start)

    def __str__(self) -> str:
        return f"#{self.index} [{self.start:,}-{self.end:,})"


# ═══════════════════════════════════════════════════════════════════════════════
# PARAMETERS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ScanParameters:
    """
    Validated configuration for one analysis run.

    Defaults come from ``SCAN_CONFIG``; every field is checked on
    construction and ``ConfigurationError`` is raised for bad values.
    """
    window_size: int = SCAN_CONFIG['window_size']
    threshold: float = SCAN_CONFIG['threshold']
    worker_count: int = SCAN_CONFIG['worker_count']
    chunk_size: Optional[int] = SCAN_CONFIG['chunk_size']
    wait_timeout: float = SCAN_CONFIG['wait_timeout_seconds']
    scoring_method: str = SCAN_CONFIG['scoring_method']
    executor_kind: str = SCAN_CONFIG['executor']
    poll_interval: float = SCAN_CONFIG['progress_poll_seconds']

    def __post_init__(self):
        if isinstance(self.window_size, bool) or not isinstance(self.window_size, int) or self.window_size < 1:
            raise ConfigurationError(f"window_size must be a positive integer, got {self.window_size!r}")
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise ConfigurationError(f"threshold must be a number, got {self.threshold!r}")
        if math.isnan(self.threshold) or not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must lie in [0, 1], got {self.threshold!r}")
        if isinstance(self.worker_count, bool) or not isinstance(self.worker_count, int) or self.worker_count < 1:
            raise ConfigurationError(f"worker_count must be a positive integer, got {self.worker_count!r}")
        if self.chunk_size is not None and (
            isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1
        ):
            raise ConfigurationError(f"chunk_size must be a positive integer or None, got {self.chunk_size!r}")
        if not isinstance(self.wait_timeout, (int, float)) or self.wait_timeout <= 0:
            raise ConfigurationError(f"wait_timeout must be positive, got {self.wait_timeout!r}")
        if not isinstance(self.poll_interval, (int, float)) or self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be positive, got {self.poll_interval!r}")
        if self.scoring_method not in SCORING_METHODS:
            raise ConfigurationError(
                f"scoring_method must be one of {SCORING_METHODS}, got {self.scoring_method!r}"
            )
        if self.executor_kind not in EXECUTOR_KINDS:
            raise ConfigurationError(
                f"executor_kind must be one of {EXECUTOR_KINDS}, got {self.executor_kind!r}"
            )

    @classmethod
    def from_config(cls, **overrides: Any) -> 'ScanParameters':
        """Build parameters from ``SCAN_CONFIG``, ignoring overrides that are ``None``."""
        return cls().with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> 'ScanParameters':
        """Copy with the non-``None`` overrides applied (and re-validated)."""
        chosen = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(chosen) - set(self.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown scan parameter(s): {', '.join(sorted(unknown))}")
        return replace(self, **chosen)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ScanResult:
    """
    Outcome of one scan, sequential or parallel.

    Behaves like the ordered event list (iteration, ``len()``, indexing)
    and additionally carries the timing and completion status.

    Attributes:
        events: Events ordered by ascending start
        elapsed_seconds: Wall-clock duration of the scan
        cancelled: True when the wait timed out or was interrupted
        failed_chunks: Ranges whose worker raised; they contributed no events
        total_chunks: Number of ranges submitted (1 for the sequential path)
        performance: Summary from the run's PerformanceMonitor, if any
    """
    events: List[Event] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    cancelled: bool = False
    failed_chunks: List[ScanRange] = field(default_factory=list)
    total_chunks: int = 0
    performance: Dict[str, Any] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.cancelled and not self.failed_chunks

    @property
    def elapsed_millis(self) -> int:
        return int(round(self.elapsed_seconds * 1000))

    def raise_if_cancelled(self) -> 'ScanResult':
        """Raise ``ScanCancelledError`` (carrying this result) if the run was cut short."""
        if self.cancelled:
            raise ScanCancelledError(self, reason="wait for workers did not finish")
        return self

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __getitem__(self, item):
        return self.events[item]
