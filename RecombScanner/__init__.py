"""
RecombScanner package.

Sliding-window divergence scan of two aligned sequences:
- Window scanner (core/window_scanner.py): sequential scoring, scan()
- Parallel partitioner (core/parallel_partitioner.py): chunked worker pool, scan_parallel()
- Sequence context (core/sequence_context.py): immutable sequence with numpy codes
- Performance monitor (core/performance_monitor.py): per-run timing telemetry
- Configuration (config/)
- FASTA loading (sequence_io.py)
- Reporting and CSV export (export.py)
- Command line (cli.py)
"""

from RecombScanner.core import (
    ChunkExecutionError,
    ConfigurationError,
    Event,
    InsufficientInputError,
    ParallelPartitioner,
    RecombScannerError,
    ScanCancelledError,
    ScanParameters,
    ScanRange,
    ScanResult,
    SequenceContext,
    scan,
    scan_parallel,
)
from RecombScanner.scanner import analyze_fasta, analyze_sequences

__version__ = "2024.2"

__all__ = [
    'ChunkExecutionError',
    'ConfigurationError',
    'Event',
    'InsufficientInputError',
    'ParallelPartitioner',
    'RecombScannerError',
    'ScanCancelledError',
    'ScanParameters',
    'ScanRange',
    'ScanResult',
    'SequenceContext',
    'scan',
    'scan_parallel',
    'analyze_fasta',
    'analyze_sequences',
]
