"""Core modules for RecombScanner"""

from .errors import (
    RecombScannerError,
    ConfigurationError,
    InsufficientInputError,
    ChunkExecutionError,
    ScanCancelledError,
)
from .models import Event, ScanRange, ScanParameters, ScanResult
from .sequence_context import SequenceContext, as_sequence_context
from .performance_monitor import PerformanceMonitor
from .window_scanner import mismatch_counts, scan, scan_range, valid_start_count
from .parallel_partitioner import ParallelPartitioner, plan_ranges, scan_parallel

__all__ = [
    'RecombScannerError',
    'ConfigurationError',
    'InsufficientInputError',
    'ChunkExecutionError',
    'ScanCancelledError',
    'Event',
    'ScanRange',
    'ScanParameters',
    'ScanResult',
    'SequenceContext',
    'as_sequence_context',
    'PerformanceMonitor',
    'mismatch_counts',
    'scan',
    'scan_range',
    'valid_start_count',
    'ParallelPartitioner',
    'plan_ranges',
    'scan_parallel',
]
