"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ ParallelPartitioner - Chunk-Parallel Window Scanning                         │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

DESCRIPTION:
    Splits the valid window-start range of two aligned sequences into
    contiguous, non-overlapping chunks, scores each chunk on a fixed-size
    worker pool and concatenates the per-chunk events in submission order.

    Execution model::

        Caller thread
            ↓
        plan_ranges()  [0, total) → [0, c) [c, 2c) ... [k*c, total)
            ↓
        ThreadPoolExecutor / ProcessPoolExecutor (max_workers = worker_count)
            ↓
        _chunk_worker()  [per chunk]  → scan_range(lo, hi)
            ↓
        Caller: bounded wait (poll for cancel / timeout)
            ↓
        Merge in SUBMISSION order → ScanResult

    Chunks never overlap and are merged by index, so the final event list
    equals the sequential scan regardless of which worker finishes first.

FAILURE POLICY
    - A chunk that raises is logged and contributes no events; siblings run on.
    - Timeout, ``cancel()`` / ``cancel_event`` or Ctrl-C while waiting: pending
      chunks are cancelled, finished chunks are kept, ``cancelled=True``.
    - Pool cannot be created or breaks: affected chunks re-run sequentially
      in the calling thread.
"""

from __future__ import annotations

import inspect
import logging
import math
import threading
from concurrent.futures import (
    FIRST_COMPLETED,
    BrokenExecutor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional, Tuple

from RecombScanner.core.errors import ChunkExecutionError
from RecombScanner.core.models import Event, ScanParameters, ScanRange, ScanResult
from RecombScanner.core.performance_monitor import PerformanceMonitor
from RecombScanner.core.sequence_context import SequenceContext, as_sequence_context
from RecombScanner.core.window_scanner import scan_range, valid_start_count

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# RANGE DIVISION
# ──────────────────────────────────────────────────────────────────────────────

def plan_ranges(total: int, worker_count: int, chunk_size: Optional[int] = None) -> List[ScanRange]:
    """
    Divide ``[0, total)`` into contiguous half-open chunks.

    Args:
        total:        Number of valid window starts.
        worker_count: Pool size; sets ``chunk_size = ceil(total / worker_count)``
                      when no explicit chunk size is given.
        chunk_size:   Fixed number of starts per chunk (optional).

    Returns:
        Ranges ordered by start, ``[]`` when ``total <= 0``.
    """
    if total <= 0:
        return []
    size = chunk_size if chunk_size is not None else math.ceil(total / worker_count)
    return [
        ScanRange(index=k, start=start, end=min(start + size, total))
        for k, start in enumerate(range(0, total, size))
    ]


# ──────────────────────────────────────────────────────────────────────────────
# MODULE-LEVEL WORKER (must be picklable for ProcessPoolExecutor)
# ──────────────────────────────────────────────────────────────────────────────

def _chunk_worker(
    args: Tuple[SequenceContext, SequenceContext, ScanRange, int, float, str],
) -> Dict[str, Any]:
    """
    Score one chunk.

    Module-level so ``ProcessPoolExecutor`` can pickle it; the sequences
    travel as plain strings (see ``SequenceContext.__reduce__``).

    Returns:
        Dict with keys::

            {
                "chunk_index":  int,
                "events":       List[Event],
                "elapsed":      float,
                "window_count": int,
            }
    """
    seq1, seq2, chunk, window_size, threshold, method = args

    t0 = perf_counter()
    events = scan_range(seq1, seq2, chunk.start, chunk.end, window_size, threshold, method)

    return {
        "chunk_index": chunk.index,
        "events": events,
        "elapsed": perf_counter() - t0,
        "window_count": chunk.size,
    }


# ──────────────────────────────────────────────────────────────────────────────
# PARTITIONER
# ──────────────────────────────────────────────────────────────────────────────

class ParallelPartitioner:
    """
    Chunk-parallel window scanner.

    One instance owns its worker pool for the duration of each ``run()``;
    the pool is created and shut down inside the call.

    Progress callback payload::

        {
            "stage":        "scan",
            "chunk_id":     int,
            "elapsed":      float,    # chunk wall-clock
            "windows":      int,
            "events":       int,
            "throughput":   float,    # windows/sec for this chunk
            "memory_mb":    float,
            "progress_pct": float,    # 0–100
        }

    If the callable's first parameter is annotated ``float``, only
    ``progress_pct`` is forwarded.

    Usage::

        partitioner = ParallelPartitioner(ScanParameters(worker_count=8))
        result = partitioner.run(seq1, seq2)
        print(len(result.events), result.elapsed_millis)
    """

    def __init__(
        self,
        params: Optional[ScanParameters] = None,
        progress_callback: Optional[Callable] = None,
    ) -> None:
        self.params = params or ScanParameters()
        self.progress_callback = progress_callback
        self._progress_as_float = _wants_float_progress(progress_callback)
        self._cancel_event = threading.Event()
        self._monitor = PerformanceMonitor()

        logger.info(
            f"ParallelPartitioner ready (workers={self.params.worker_count}, "
            f"executor={self.params.executor_kind}, window={self.params.window_size}, "
            f"threshold={self.params.threshold})"
        )

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """
        Ask ``run()`` to stop waiting and return partial results.

        Applies to the run in progress, or to the next ``run()`` if none is
        active; the request is cleared when that run returns.
        """
        self._cancel_event.set()

    def get_performance_summary(self) -> Dict[str, Any]:
        """Return the performance summary dict from the last ``run()`` call."""
        return self._monitor.get_summary()

    def run(
        self,
        seq1: Optional[Any],
        seq2: Optional[Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> ScanResult:
        """
        Scan ``[0, min(len1, len2) - window_size)`` across the worker pool.

        Args:
            seq1, seq2:   The two sequences; ``None`` stands for a missing one.
            cancel_event: Optional external event; setting it has the same
                          effect as ``cancel()``.

        Returns:
            ``ScanResult`` with events ordered by start.  ``cancelled`` is set
            when the wait was cut short; ``failed_chunks`` lists chunks whose
            worker raised.
        """
        try:
            return self._run(seq1, seq2, cancel_event)
        finally:
            # cancel requests last for one run
            self._cancel_event.clear()

    def _run(
        self,
        seq1: Optional[Any],
        seq2: Optional[Any],
        cancel_event: Optional[threading.Event],
    ) -> ScanResult:
        self._monitor = PerformanceMonitor()
        self._monitor.start()

        def cancel_requested() -> bool:
            return self._cancel_event.is_set() or (
                cancel_event is not None and cancel_event.is_set()
            )

        if seq1 is None or seq2 is None:
            logger.warning("ParallelPartitioner: fewer than two sequences supplied, nothing to compare")
            return ScanResult(elapsed_seconds=self._monitor.elapsed())

        ctx1 = as_sequence_context(seq1, "seq1")
        ctx2 = as_sequence_context(seq2, "seq2")
        total = valid_start_count(ctx1, ctx2, self.params.window_size)
        ranges = plan_ranges(total, self.params.worker_count, self.params.chunk_size)

        if not ranges:
            logger.info(
                f"ParallelPartitioner: sequences ({ctx1.length:,} / {ctx2.length:,}) not longer "
                f"than window_size={self.params.window_size}; no windows to score"
            )
            return ScanResult(elapsed_seconds=self._monitor.elapsed())

        logger.info(
            f"ParallelPartitioner: {total:,} windows in {len(ranges)} chunks "
            f"→ {self.params.worker_count} workers"
        )

        outcomes: Dict[int, List[Event]] = {}
        failures: Dict[int, BaseException] = {}
        cancelled = False

        try:
            executor = self._make_executor(len(ranges))
        except (OSError, NotImplementedError, ValueError) as exc:
            logger.warning(
                f"ParallelPartitioner: could not start {self.params.executor_kind} pool ({exc}); "
                "falling back to sequential"
            )
            cancelled = self._run_sequential(ctx1, ctx2, ranges, outcomes, failures, cancel_requested)
            return self._build_result(ranges, outcomes, failures, cancelled)

        futures: List[Future] = []
        try:
            t_dispatch = perf_counter()
            for chunk in ranges:
                futures.append(executor.submit(
                    _chunk_worker,
                    (ctx1, ctx2, chunk, self.params.window_size,
                     self.params.threshold, self.params.scoring_method),
                ))
            # No new work after this point; queued chunks still run
            executor.shutdown(wait=False)
            self._monitor.record_stage("dispatch", perf_counter() - t_dispatch)

            t_wait = perf_counter()
            reason = self._await_chunks(futures, ranges, outcomes, failures, cancel_requested)
            self._monitor.record_stage("wait", perf_counter() - t_wait)
            if reason is not None:
                cancelled = True
                logger.warning(f"ParallelPartitioner: stopped waiting ({reason})")
        except KeyboardInterrupt:
            cancelled = True
            logger.warning("ParallelPartitioner: interrupted while waiting for workers")
        finally:
            if cancelled:
                for future in futures:
                    future.cancel()
            executor.shutdown(wait=not cancelled)

        # Collect anything that finished between the last poll and shutdown
        for chunk, future in zip(ranges, futures):
            if future.done() and not future.cancelled():
                self._collect(chunk, future, outcomes, failures, len(ranges))

        broken = [chunk for chunk in ranges if isinstance(failures.get(chunk.index), BrokenExecutor)]
        if broken and not cancelled:
            logger.warning(
                f"ParallelPartitioner: worker pool broke; re-running {len(broken)} chunk(s) sequentially"
            )
            for chunk in broken:
                del failures[chunk.index]
            cancelled = self._run_sequential(ctx1, ctx2, broken, outcomes, failures, cancel_requested)

        return self._build_result(ranges, outcomes, failures, cancelled)

    # ------------------------------------------------------------------
    # POOL + WAITING
    # ------------------------------------------------------------------

    def _make_executor(self, chunk_count: int):
        workers = min(self.params.worker_count, chunk_count)
        if self.params.executor_kind == "process":
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="recomb-scan")

    def _await_chunks(
        self,
        futures: List[Future],
        ranges: List[ScanRange],
        outcomes: Dict[int, List[Event]],
        failures: Dict[int, BaseException],
        cancel_requested: Callable[[], bool],
    ) -> Optional[str]:
        """
        Wait for every future, bounded by ``params.wait_timeout``.

        Returns:
            ``None`` when all chunks finished, otherwise the reason the wait
            stopped early.
        """
        deadline = perf_counter() + self.params.wait_timeout
        chunk_of = {future: chunk for chunk, future in zip(ranges, futures)}
        pending = set(futures)

        while pending:
            if cancel_requested():
                return "cancel requested"
            remaining = deadline - perf_counter()
            if remaining <= 0:
                return f"timed out after {self.params.wait_timeout}s"

            done, pending = wait(
                pending,
                timeout=min(self.params.poll_interval, remaining),
                return_when=FIRST_COMPLETED,
            )
            for future in done:
                self._collect(chunk_of[future], future, outcomes, failures, len(ranges))
        return None

    def _collect(
        self,
        chunk: ScanRange,
        future: Future,
        outcomes: Dict[int, List[Event]],
        failures: Dict[int, BaseException],
        total_chunks: int,
    ) -> None:
        if chunk.index in outcomes or chunk.index in failures:
            return

        exc = future.exception()
        if exc is not None:
            self._record_failure(chunk, exc, failures)
            return

        payload = future.result()
        outcomes[chunk.index] = payload["events"]
        self._record_success(chunk, payload, len(outcomes) + len(failures), total_chunks)

    # ------------------------------------------------------------------
    # SEQUENTIAL FALLBACK
    # ------------------------------------------------------------------

    def _run_sequential(
        self,
        ctx1: SequenceContext,
        ctx2: SequenceContext,
        ranges: List[ScanRange],
        outcomes: Dict[int, List[Event]],
        failures: Dict[int, BaseException],
        cancel_requested: Callable[[], bool],
    ) -> bool:
        """
        Score chunks one by one in the calling thread, same failure policy.

        Returns:
            True if a cancel request stopped the loop early.
        """
        total_chunks = len(ranges)
        for chunk in ranges:
            if cancel_requested():
                logger.warning("ParallelPartitioner: cancel requested during sequential fallback")
                return True
            try:
                payload = _chunk_worker(
                    (ctx1, ctx2, chunk, self.params.window_size,
                     self.params.threshold, self.params.scoring_method)
                )
            except Exception as exc:
                self._record_failure(chunk, exc, failures)
                continue
            outcomes[chunk.index] = payload["events"]
            self._record_success(chunk, payload, len(outcomes) + len(failures), total_chunks)
        return False

    # ------------------------------------------------------------------
    # BOOKKEEPING
    # ------------------------------------------------------------------

    def _record_success(
        self,
        chunk: ScanRange,
        payload: Dict[str, Any],
        finished: int,
        total_chunks: int,
    ) -> None:
        self._monitor.record_chunk(
            chunk_id=chunk.index,
            elapsed=payload["elapsed"],
            event_count=len(payload["events"]),
            window_count=payload["window_count"],
        )
        logger.debug(
            f"ParallelPartitioner: chunk {chunk} done "
            f"({len(payload['events'])} events, {payload['elapsed']:.3f}s)"
        )
        if self.progress_callback is not None:
            self._emit_progress(
                cb=self.progress_callback,
                as_float=self._progress_as_float,
                chunk_id=chunk.index,
                elapsed=payload["elapsed"],
                windows=payload["window_count"],
                events=len(payload["events"]),
                progress_pct=finished / total_chunks * 100.0,
                memory_mb=self._monitor.snapshot_memory(),
            )

    def _record_failure(
        self,
        chunk: ScanRange,
        exc: BaseException,
        failures: Dict[int, BaseException],
    ) -> None:
        failures[chunk.index] = exc
        self._monitor.record_failure(chunk.index, exc)
        error = ChunkExecutionError(chunk, exc)
        logger.error(f"ParallelPartitioner: {error}; chunk contributes no events", exc_info=exc)

    def _build_result(
        self,
        ranges: List[ScanRange],
        outcomes: Dict[int, List[Event]],
        failures: Dict[int, BaseException],
        cancelled: bool,
    ) -> ScanResult:
        t_merge = perf_counter()
        events: List[Event] = []
        for chunk in ranges:
            events.extend(outcomes.get(chunk.index, ()))
        self._monitor.record_stage("merge", perf_counter() - t_merge)

        failed = [chunk for chunk in ranges if chunk.index in failures]
        missing = len(ranges) - len(outcomes) - len(failed)
        elapsed = self._monitor.elapsed()

        if cancelled:
            logger.warning(
                f"ParallelPartitioner: partial result – {len(outcomes)}/{len(ranges)} chunks "
                f"finished, {missing} not run, {len(events):,} events kept"
            )
            status = "cancelled"
        elif failed:
            status = f"finished with {len(failed)} failed chunk(s)"
        else:
            status = "complete"
        logger.info(
            f"ParallelPartitioner: {status} – {len(events):,} events in {elapsed:.3f}s\n"
            + self._monitor.format_summary()
        )
        return ScanResult(
            events=events,
            elapsed_seconds=elapsed,
            cancelled=cancelled,
            failed_chunks=failed,
            total_chunks=len(ranges),
            performance=self._monitor.get_summary(),
        )

    # ------------------------------------------------------------------
    # PROGRESS HELPER
    # ------------------------------------------------------------------

    @staticmethod
    def _emit_progress(
        cb: Callable,
        as_float: bool,
        chunk_id: int,
        elapsed: float,
        windows: int,
        events: int,
        progress_pct: float,
        memory_mb: float,
    ) -> None:
        """
        Fire ``cb`` once with either a telemetry dict or a plain float,
        as decided by ``_wants_float_progress``.  Callback errors are
        logged and never retried.
        """
        if as_float:
            payload: Any = progress_pct
        else:
            payload = {
                "stage": "scan",
                "chunk_id": chunk_id,
                "elapsed": elapsed,
                "windows": windows,
                "events": events,
                "throughput": windows / elapsed if elapsed > 0 else 0.0,
                "memory_mb": memory_mb,
                "progress_pct": progress_pct,
            }
        try:
            cb(payload)
        except Exception as exc:
            logger.debug(f"ParallelPartitioner: progress_callback error: {exc}")


def _wants_float_progress(cb: Optional[Callable]) -> bool:
    """
    True when the callback's first parameter is annotated ``float`` (or
    ``int``); such callbacks get ``progress_pct`` only.  Decided once per
    partitioner from the signature, never by trial calls.
    """
    if cb is None:
        return False
    try:
        parameters = list(inspect.signature(cb).parameters.values())
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return False
    if not parameters:
        return False
    return parameters[0].annotation in (float, int, "float", "int")


# ──────────────────────────────────────────────────────────────────────────────
# FUNCTIONAL ENTRY POINT
# ──────────────────────────────────────────────────────────────────────────────

def scan_parallel(
    seq1: Optional[Any],
    seq2: Optional[Any],
    window_size: Optional[int] = None,
    threshold: Optional[float] = None,
    worker_count: Optional[int] = None,
    *,
    chunk_size: Optional[int] = None,
    timeout: Optional[float] = None,
    method: Optional[str] = None,
    executor: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable] = None,
    params: Optional[ScanParameters] = None,
) -> ScanResult:
    """
    Parallel counterpart of ``scan()``; same events for the same inputs.

    Explicit keyword arguments override ``params`` which override
    ``SCAN_CONFIG``.

    Raises:
        ConfigurationError: On invalid parameters.
    """
    base = params or ScanParameters()
    params = base.with_overrides(
        window_size=window_size,
        threshold=threshold,
        worker_count=worker_count,
        chunk_size=chunk_size,
        wait_timeout=timeout,
        scoring_method=method,
        executor_kind=executor,
    )
    partitioner = ParallelPartitioner(params, progress_callback=progress_callback)
    return partitioner.run(seq1, seq2, cancel_event=cancel_event)
