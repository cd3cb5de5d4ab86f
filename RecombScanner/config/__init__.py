"""
Configuration modules for RecombScanner.

This package contains the configuration constants:
- analysis: window size, threshold, worker pool and scoring settings
"""

from .analysis import (
    SCAN_CONFIG,
    SCORING_METHODS,
    EXECUTOR_KINDS,
    HOST_WORKER_COUNT,
    EVENT_MESSAGE,
    TIMING_MESSAGE,
    EXPORT_COLUMNS,
)

__all__ = [
    'SCAN_CONFIG',
    'SCORING_METHODS',
    'EXECUTOR_KINDS',
    'HOST_WORKER_COUNT',
    'EVENT_MESSAGE',
    'TIMING_MESSAGE',
    'EXPORT_COLUMNS',
]
