"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ PerformanceMonitor - Per-Run Scan Telemetry                                  │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

DESCRIPTION:
    Thread-safe performance monitor that tracks per-chunk and per-stage
    timings across one scan.  One monitor belongs to one run; nothing is
    kept in module-level state.

    Tracks:
        - Per-chunk runtime, windows scored and events found
        - Failed chunks
        - Named stage durations (dispatch, wait, merge)
        - Peak RSS memory via psutil

    Usage::

        from RecombScanner.core.performance_monitor import PerformanceMonitor

        monitor = PerformanceMonitor()
        monitor.start()
        monitor.record_chunk(chunk_id=0, elapsed=0.4, event_count=12, window_count=25_000)
        monitor.record_stage("wait", elapsed=1.3)

        summary = monitor.get_summary()
        print(summary["throughput_wps"])
"""

from __future__ import annotations

import logging
import os
import threading
from time import perf_counter
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Thread-safe run monitor for window scans.

    All ``record_*`` methods are safe to call from multiple threads
    (e.g. from ``Future`` done-callbacks running in pool threads).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._start_time: Optional[float] = None
        self._stage_records: Dict[str, float] = {}
        self._chunk_records: List[Dict[str, Any]] = []
        self._failure_records: List[Dict[str, Any]] = []
        self._peak_memory_mb: float = 0.0

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the global timer.  Must be called before ``record_*`` methods."""
        self._start_time = perf_counter()
        self.snapshot_memory()

    def elapsed(self) -> float:
        """Seconds since ``start()``, or 0.0 if never started."""
        return perf_counter() - self._start_time if self._start_time else 0.0

    # ------------------------------------------------------------------
    # RECORDING
    # ------------------------------------------------------------------

    def record_stage(self, stage_name: str, elapsed: float) -> None:
        """
        Record the wall-clock duration of a named stage.

        Args:
            stage_name: Stage name (e.g. ``"dispatch"``, ``"wait"``, ``"merge"``).
            elapsed:    Duration in seconds.
        """
        with self._lock:
            self._stage_records[stage_name] = elapsed

    def record_chunk(
        self,
        chunk_id: int,
        elapsed: float,
        event_count: int,
        window_count: int,
    ) -> None:
        """
        Record one scored chunk.

        Args:
            chunk_id:     Zero-based chunk index.
            elapsed:      Wall-clock time spent scoring the chunk (seconds).
            event_count:  Events found in the chunk.
            window_count: Window start positions scored.
        """
        with self._lock:
            self._chunk_records.append(
                {
                    "chunk_id": chunk_id,
                    "elapsed": elapsed,
                    "event_count": event_count,
                    "window_count": window_count,
                }
            )

    def record_failure(self, chunk_id: int, error: BaseException) -> None:
        with self._lock:
            self._failure_records.append(
                {"chunk_id": chunk_id, "error": f"{type(error).__name__}: {error}"}
            )

    # ------------------------------------------------------------------
    # MEMORY
    # ------------------------------------------------------------------

    def snapshot_memory(self) -> float:
        """
        Capture current RSS memory and update peak.

        Returns:
            Current RSS memory in MB, or 0.0 if it cannot be read.
        """
        try:
            import psutil  # noqa: PLC0415

            proc = psutil.Process(os.getpid())
            mb = proc.memory_info().rss / 1_048_576  # bytes → MB
            with self._lock:
                if mb > self._peak_memory_mb:
                    self._peak_memory_mb = mb
            return mb
        except Exception as exc:  # permissions or platform without RSS
            logger.debug(f"PerformanceMonitor: memory snapshot failed: {exc}")
            return 0.0

    # ------------------------------------------------------------------
    # SUMMARY
    # ------------------------------------------------------------------

    def get_summary(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns:
            Dict with keys::

                {
                    "total_elapsed":    float,   # seconds since start()
                    "total_windows":    int,
                    "total_events":     int,
                    "throughput_wps":   float,   # windows / second
                    "peak_memory_mb":   float,
                    "chunk_count":      int,
                    "avg_chunk_time":   float,
                    "slowest_chunk":    int | None,
                    "chunk_records":    list,
                    "failed_chunks":    list,
                    "stage_times":      dict,
                }
        """
        with self._lock:
            elapsed_since_start = (
                perf_counter() - self._start_time if self._start_time else 0.0
            )
            total_windows = sum(c["window_count"] for c in self._chunk_records)
            total_events = sum(c["event_count"] for c in self._chunk_records)

            chunk_times = [c["elapsed"] for c in self._chunk_records]
            avg_chunk_time = (
                sum(chunk_times) / len(chunk_times) if chunk_times else 0.0
            )
            slowest = (
                max(self._chunk_records, key=lambda c: c["elapsed"])["chunk_id"]
                if self._chunk_records
                else None
            )

            return {
                "total_elapsed": elapsed_since_start,
                "total_windows": total_windows,
                "total_events": total_events,
                "throughput_wps": (
                    total_windows / elapsed_since_start if elapsed_since_start > 0 else 0.0
                ),
                "peak_memory_mb": self._peak_memory_mb,
                "chunk_count": len(self._chunk_records),
                "avg_chunk_time": avg_chunk_time,
                "slowest_chunk": slowest,
                "chunk_records": sorted(self._chunk_records, key=lambda c: c["chunk_id"]),
                "failed_chunks": list(self._failure_records),
                "stage_times": dict(self._stage_records),
            }

    def format_summary(self) -> str:
        """
        Return a human-readable performance summary table.
        """
        s = self.get_summary()

        lines: List[str] = [
            "══════════════════════════════════════════════════",
            "  Scan Performance Summary",
            "══════════════════════════════════════════════════",
            f"  Total runtime      : {s['total_elapsed']:.3f} s",
            f"  Windows scored     : {s['total_windows']:,}",
            f"  Events found       : {s['total_events']:,}",
            f"  Throughput         : {s['throughput_wps']:,.0f} windows/s",
            f"  Peak memory        : {s['peak_memory_mb']:.1f} MB",
            f"  Chunks processed   : {s['chunk_count']}",
            f"  Avg chunk time     : {s['avg_chunk_time']:.3f} s",
        ]

        if s.get("stage_times"):
            lines.append("")
            lines.append("  Stage Times:")
            for stage, t in sorted(s["stage_times"].items()):
                lines.append(f"    {stage:<20} {t:.3f} s")

        if s.get("failed_chunks"):
            lines.append("")
            lines.append(f"  Failed chunks ({len(s['failed_chunks'])}):")
            for failure in s["failed_chunks"]:
                lines.append(f"    #{failure['chunk_id']:<5} {failure['error']}")

        lines.append("══════════════════════════════════════════════════")
        return "\n".join(lines)
