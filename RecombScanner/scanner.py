"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ RecombScanner - Pairwise Divergence Scan API                                 │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

High-level entry points that take whatever the loader produced (a mapping or
list of sequences) and run the sequential or parallel scan on the first two.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from RecombScanner.core.models import ScanParameters, ScanResult
from RecombScanner.core.parallel_partitioner import scan_parallel
from RecombScanner.core.window_scanner import scan
from RecombScanner.sequence_io import read_fasta_file

logger = logging.getLogger(__name__)


def analyze_sequences(
    sequences: Optional[Union[Mapping[str, Any], Sequence[Any]]],
    parallel: bool = True,
    params: Optional[ScanParameters] = None,
    **overrides: Any,
) -> ScanResult:
    """
    Scan the first two of ``sequences`` for high-divergence windows.

    Args:
        sequences: ``{name: sequence}`` mapping or list of sequences; ``None``
                   or fewer than two entries gives an empty result
        parallel:  Use the worker pool (default) or the sequential scan
        params:    Base parameters; ``overrides`` (e.g. ``window_size=50``) win

    Returns:
        ``ScanResult`` ordered by window start
    """
    if not sequences or len(sequences) < 2:
        found = len(sequences) if sequences else 0
        logger.warning(f"analyze_sequences: {found} sequence(s) supplied, need two")
        return ScanResult()

    if isinstance(sequences, Mapping):
        (name1, seq1), (name2, seq2) = list(sequences.items())[:2]
    else:
        seq1, seq2 = sequences[0], sequences[1]
        name1, name2 = "seq1", "seq2"

    params = (params or ScanParameters()).with_overrides(**overrides)
    logger.info(f"Comparing {name1!r} with {name2!r} ({'parallel' if parallel else 'sequential'})")

    if parallel:
        return scan_parallel(seq1, seq2, params=params)
    return scan(seq1, seq2, params=params)


def analyze_fasta(
    filename: Union[str, Path],
    parallel: bool = True,
    params: Optional[ScanParameters] = None,
    **overrides: Any,
) -> ScanResult:
    """Load a FASTA file and scan its first two records."""
    return analyze_sequences(read_fasta_file(filename), parallel=parallel, params=params, **overrides)
