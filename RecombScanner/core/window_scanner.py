"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ Window Scanner - Sliding-Window Mismatch Scoring                             │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

DESCRIPTION:
    Scores every window start in a range ``[lo, hi)`` of two aligned
    sequences and reports the windows whose mismatch rate is strictly above
    the threshold.

    Window at start ``i`` covers positions ``[i, i + window_size)``::

        mismatches = #{ j in window : seq1[j] != seq2[j] }
        rate       = mismatches / window_size
        event      = rate > threshold

    Three scoring methods produce identical counts:

        naive       recount each window              O(n * w)
        rolling     drop leaving / add entering      O(n + w)
        vectorized  numpy prefix sum of mismatches   O(n + w), no Python loop

    The valid start range of a full scan is ``[0, min(len1, len2) - w)``,
    upper bound exclusive on every path.
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, List, Optional

import numpy as np

from RecombScanner.core.errors import ConfigurationError
from RecombScanner.core.models import Event, ScanParameters, ScanResult
from RecombScanner.core.sequence_context import SequenceContext, as_sequence_context

logger = logging.getLogger(__name__)


def valid_start_count(seq1: SequenceContext, seq2: SequenceContext, window_size: int) -> int:
    """Number of window starts a full scan visits (may be zero or negative)."""
    return min(seq1.length, seq2.length) - window_size


def _check_range(
    seq1: SequenceContext,
    seq2: SequenceContext,
    lo: int,
    hi: int,
    window_size: int,
) -> None:
    if lo < 0:
        raise ConfigurationError(f"Scan range start must be non-negative, got {lo}")
    # last in-bounds window starts at min_len - window_size
    limit = min(seq1.length, seq2.length) - window_size + 1
    if hi > limit:
        raise ConfigurationError(
            f"Scan range [{lo}, {hi}) with window_size={window_size} reads past the "
            f"shorter sequence (length {min(seq1.length, seq2.length)})"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# MISMATCH COUNTING
# ═══════════════════════════════════════════════════════════════════════════════

def _naive_counts(a: str, b: str, lo: int, hi: int, window_size: int) -> np.ndarray:
    counts = np.empty(hi - lo, dtype=np.int64)
    for k, i in enumerate(range(lo, hi)):
        mismatches = 0
        for j in range(i, i + window_size):
            if a[j] != b[j]:
                mismatches += 1
        counts[k] = mismatches
    return counts


def _rolling_counts(a: str, b: str, lo: int, hi: int, window_size: int) -> np.ndarray:
    counts = np.empty(hi - lo, dtype=np.int64)
    mismatches = sum(1 for j in range(lo, lo + window_size) if a[j] != b[j])
    counts[0] = mismatches
    for k in range(1, hi - lo):
        leaving = lo + k - 1
        entering = leaving + window_size
        if a[leaving] != b[leaving]:
            mismatches -= 1
        if a[entering] != b[entering]:
            mismatches += 1
        counts[k] = mismatches
    return counts


def _vectorized_counts(
    seq1: SequenceContext,
    seq2: SequenceContext,
    lo: int,
    hi: int,
    window_size: int,
) -> np.ndarray:
    span_end = hi - 1 + window_size
    differs = seq1.codes[lo:span_end] != seq2.codes[lo:span_end]
    prefix = np.empty(differs.size + 1, dtype=np.int64)
    prefix[0] = 0
    np.cumsum(differs, out=prefix[1:])
    # prefix[k + w] - prefix[k] = mismatches in window starting at lo + k
    return prefix[window_size:] - prefix[:-window_size]


def mismatch_counts(
    seq1: Any,
    seq2: Any,
    lo: int,
    hi: int,
    window_size: int,
    method: str = "vectorized",
) -> np.ndarray:
    """
    Mismatch count of every window starting in ``[lo, hi)``.

    Args:
        seq1, seq2:  Sequences (anything ``as_sequence_context`` accepts)
        lo, hi:      Half-open range of window starts
        window_size: Positions per window
        method:      ``"naive"``, ``"rolling"`` or ``"vectorized"``

    Returns:
        ``int64`` array of length ``max(0, hi - lo)``

    Raises:
        ConfigurationError: Bad window size, unknown method, or a range that
            would read past the shorter sequence.
    """
    if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size < 1:
        raise ConfigurationError(f"window_size must be a positive integer, got {window_size!r}")
    if hi <= lo:
        return np.empty(0, dtype=np.int64)

    ctx1 = as_sequence_context(seq1)
    ctx2 = as_sequence_context(seq2)
    _check_range(ctx1, ctx2, lo, hi, window_size)

    if method == "naive":
        return _naive_counts(ctx1.sequence, ctx2.sequence, lo, hi, window_size)
    if method == "rolling":
        return _rolling_counts(ctx1.sequence, ctx2.sequence, lo, hi, window_size)
    if method == "vectorized":
        return _vectorized_counts(ctx1, ctx2, lo, hi, window_size)
    raise ConfigurationError(f"Unknown scoring method {method!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# RANGE SCAN
# ═══════════════════════════════════════════════════════════════════════════════

def scan_range(
    seq1: Any,
    seq2: Any,
    lo: int,
    hi: int,
    window_size: int,
    threshold: float,
    method: str = "vectorized",
) -> List[Event]:
    """
    Events for every window start in ``[lo, hi)``, ascending by start.

    A window is an event when ``mismatches / window_size > threshold``.
    Returns ``[]`` when ``hi <= lo``.  Has no side effects; safe to call
    concurrently on the same sequences.
    """
    counts = mismatch_counts(seq1, seq2, lo, hi, window_size, method)
    if counts.size == 0:
        return []

    rates = counts / window_size
    starts = np.flatnonzero(rates > threshold) + lo
    return [Event(int(start), int(start) + window_size) for start in starts]


# ═══════════════════════════════════════════════════════════════════════════════
# SEQUENTIAL ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════════

def scan(
    seq1: Optional[Any],
    seq2: Optional[Any],
    window_size: Optional[int] = None,
    threshold: Optional[float] = None,
    method: Optional[str] = None,
    params: Optional[ScanParameters] = None,
) -> ScanResult:
    """
    Scan the full valid range of two aligned sequences in the calling thread.

    Args:
        seq1, seq2:  The two sequences; ``None`` stands for a missing one
        window_size: Override ``SCAN_CONFIG['window_size']``
        threshold:   Override ``SCAN_CONFIG['threshold']``
        method:      Override ``SCAN_CONFIG['scoring_method']``
        params:      Pre-built parameters (explicit arguments still win)

    Returns:
        ``ScanResult`` whose events are ordered by ascending start.  Empty when
        a sequence is missing or shorter than the window.

    Raises:
        ConfigurationError: On invalid parameters.
    """
    base = params or ScanParameters()
    params = base.with_overrides(
        window_size=window_size, threshold=threshold, scoring_method=method
    )
    t0 = perf_counter()

    if seq1 is None or seq2 is None:
        logger.warning("scan: fewer than two sequences supplied, nothing to compare")
        return ScanResult(elapsed_seconds=perf_counter() - t0)

    ctx1 = as_sequence_context(seq1, "seq1")
    ctx2 = as_sequence_context(seq2, "seq2")
    total = valid_start_count(ctx1, ctx2, params.window_size)

    if total <= 0:
        logger.info(
            f"scan: sequences ({ctx1.length:,} / {ctx2.length:,}) not longer than "
            f"window_size={params.window_size}; no windows to score"
        )
        return ScanResult(elapsed_seconds=perf_counter() - t0)

    events = scan_range(
        ctx1, ctx2, 0, total, params.window_size, params.threshold, params.scoring_method
    )
    elapsed = perf_counter() - t0
    logger.info(
        f"scan: {total:,} windows scored, {len(events):,} events "
        f"({params.scoring_method}, {elapsed:.3f}s)"
    )
    return ScanResult(events=events, elapsed_seconds=elapsed, total_chunks=1)
