"""
Command line for RecombScanner.

Loads the first two records of a FASTA file, scans them for windows whose
mismatch rate exceeds the threshold and prints the timing line.

Usage:
    python -m RecombScanner aligned.fasta \
        [--window-size 100] [--threshold 0.1] [--workers 4|auto] \
        [--sequential] [--executor thread|process] [--method vectorized] \
        [--timeout 86400] [--show-events] [--csv events.csv] [--verbose]

Exit codes:
    0  scan complete
    1  bad configuration or input
    2  scan cancelled or some chunks failed (partial result printed)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from RecombScanner.config.analysis import (
    EXECUTOR_KINDS,
    HOST_WORKER_COUNT,
    SCAN_CONFIG,
    SCORING_METHODS,
)
from RecombScanner.core.errors import ConfigurationError, InsufficientInputError
from RecombScanner.core.models import ScanParameters
from RecombScanner.core.parallel_partitioner import scan_parallel
from RecombScanner.core.window_scanner import scan
from RecombScanner.export import export_to_csv, format_report
from RecombScanner.sequence_io import load_sequence_pair

logger = logging.getLogger(__name__)


def _worker_count(value: str) -> int:
    if value == "auto":
        return HOST_WORKER_COUNT
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer or 'auto', got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="recomb-scanner",
        description="Sliding-window divergence scan of two aligned sequences.",
    )
    ap.add_argument("fasta", type=Path, help="FASTA file; the first two records are compared")
    ap.add_argument("--window-size", type=int, default=SCAN_CONFIG['window_size'],
                    help="positions per window (default: %(default)s)")
    ap.add_argument("--threshold", type=float, default=SCAN_CONFIG['threshold'],
                    help="mismatch rate that must be exceeded (default: %(default)s)")
    ap.add_argument("--workers", type=_worker_count, default=SCAN_CONFIG['worker_count'],
                    help="worker pool size or 'auto' (default: %(default)s)")
    ap.add_argument("--chunk-size", type=int, default=None,
                    help="window starts per chunk (default: split evenly across workers)")
    ap.add_argument("--sequential", action="store_true", help="scan in the calling thread only")
    ap.add_argument("--executor", choices=EXECUTOR_KINDS, default=SCAN_CONFIG['executor'])
    ap.add_argument("--method", choices=SCORING_METHODS, default=SCAN_CONFIG['scoring_method'])
    ap.add_argument("--timeout", type=float, default=SCAN_CONFIG['wait_timeout_seconds'],
                    help="seconds to wait for workers (default: %(default)s)")
    ap.add_argument("--show-events", action="store_true", help="print one line per event")
    ap.add_argument("--csv", type=Path, default=None, help="write events to this CSV file")
    ap.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        params = ScanParameters(
            window_size=args.window_size,
            threshold=args.threshold,
            worker_count=args.workers,
            chunk_size=args.chunk_size,
            wait_timeout=args.timeout,
            scoring_method=args.method,
            executor_kind=args.executor,
        )
        seq1, seq2 = load_sequence_pair(args.fasta)
    except (ConfigurationError, InsufficientInputError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.sequential:
        result = scan(seq1, seq2, params=params)
    else:
        result = scan_parallel(seq1, seq2, params=params)

    print(format_report(result, show_events=args.show_events))

    if args.csv is not None:
        export_to_csv(result, str(args.csv), seq1.name, seq2.name)

    return 0 if result.complete else 2


if __name__ == "__main__":
    sys.exit(main())
