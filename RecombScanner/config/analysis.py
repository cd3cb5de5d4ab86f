"""
Analysis configuration for RecombScanner.

This module contains the scan parameters:
- Sliding window size and mismatch-rate threshold
- Worker pool size and chunking
- Wait timeout for the parallel path
- Scoring method and executor kind

THRESHOLD SEMANTICS
-------------------
A window is reported only when mismatches / window_size is STRICTLY greater
than the threshold. With window_size = 100 and threshold = 0.1 a window needs
at least 11 mismatching positions.

PARALLEL BEHAVIOR
-----------------
- chunk_size = None: ceil(valid_starts / worker_count), one chunk per worker
- chunk_size = N:    fixed N starts per chunk, chunks queue behind the pool
- executor 'thread' shares the sequences in memory; 'process' pickles them once
  per chunk
"""

import os

# ==================== SCAN PARAMETERS ====================
SCAN_CONFIG = {
    # Sliding window
    'window_size': 100,              # Positions per window
    'threshold': 0.1,                # Mismatch rate that must be exceeded (strict >)

    # Worker pool
    'worker_count': 4,               # Pool size; bounds concurrency, not chunk count
    'chunk_size': None,              # None = ceil(total / worker_count)
    'executor': 'thread',            # 'thread' or 'process'

    # Waiting on workers
    'wait_timeout_seconds': 86_400,  # One day, effectively unbounded
    'progress_poll_seconds': 0.05,   # How often the waiting thread checks for cancellation

    # Scoring
    'scoring_method': 'vectorized',  # 'naive', 'rolling' or 'vectorized'
}

# ==================== VALID CHOICES ====================
SCORING_METHODS = ('naive', 'rolling', 'vectorized')
EXECUTOR_KINDS = ('thread', 'process')

# Host parallelism, used by the CLI when --workers auto is given
HOST_WORKER_COUNT = os.cpu_count() or SCAN_CONFIG['worker_count']

# ==================== REPORTING ====================
EVENT_MESSAGE = "Potential recombination detected between positions {start} and {end}"
TIMING_MESSAGE = "Time taken: {millis} milliseconds"
EXPORT_COLUMNS = ['Sequence_1', 'Sequence_2', 'Start', 'End', 'Length']
