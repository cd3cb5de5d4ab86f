"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ Sequence I/O - FASTA Loading into SequenceContext                            │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

DESCRIPTION:
    Reads aligned sequences from FASTA with Biopython ``SeqIO`` and wraps each
    record in an immutable ``SequenceContext``.  Record order is preserved so
    "the first two sequences" is well defined.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Tuple, Union

from Bio import SeqIO

from RecombScanner.core.errors import InsufficientInputError
from RecombScanner.core.sequence_context import SequenceContext

logger = logging.getLogger(__name__)


def _records_to_contexts(records: Iterable) -> Dict[str, SequenceContext]:
    sequences: Dict[str, SequenceContext] = {}
    for record in records:
        name = record.id or f"sequence_{len(sequences) + 1}"
        if name in sequences:
            unique = f"{name}_{len(sequences) + 1}"
            logger.warning(f"Duplicate FASTA id {name!r}; storing as {unique!r}")
            name = unique
        sequences[name] = SequenceContext(str(record.seq), name)
    return sequences


def parse_fasta(fasta_content: str) -> Dict[str, SequenceContext]:
    """
    Parse FASTA text into ``{record_id: SequenceContext}`` (file order).

    Example:
        >>> seqs = parse_fasta(">a\\nACGT\\n>b\\nACGA\\n")
        >>> list(seqs)
        ['a', 'b']
    """
    return _records_to_contexts(SeqIO.parse(io.StringIO(fasta_content), "fasta"))


def read_fasta_file(filename: Union[str, Path]) -> Dict[str, SequenceContext]:
    """
    Read a FASTA file into ``{record_id: SequenceContext}`` (file order).

    Raises:
        FileNotFoundError: If ``filename`` does not exist.
    """
    path = Path(filename)
    with path.open("r") as handle:
        sequences = _records_to_contexts(SeqIO.parse(handle, "fasta"))
    logger.info(f"Loaded {len(sequences)} sequence(s) from {path}")
    return sequences


def load_sequence_pair(filename: Union[str, Path]) -> Tuple[SequenceContext, SequenceContext]:
    """
    Return the first two sequences of a FASTA file.

    Raises:
        InsufficientInputError: If the file holds fewer than two records.
    """
    sequences = read_fasta_file(filename)
    if len(sequences) < 2:
        raise InsufficientInputError(len(sequences))
    if len(sequences) > 2:
        logger.info(f"{len(sequences)} sequences in {filename}; comparing the first two only")
    first, second = list(sequences.values())[:2]
    if first.length != second.length:
        logger.warning(
            f"Sequence lengths differ ({first.name}={first.length:,}, "
            f"{second.name}={second.length:,}); scanning up to the shorter one"
        )
    return first, second
