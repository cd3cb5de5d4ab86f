"""
┌──────────────────────────────────────────────────────────────────────────────┐
│ SequenceContext - Immutable Aligned Sequence for Window Scoring              │
├──────────────────────────────────────────────────────────────────────────────┤
│ License: MIT | Version: 2024.2                                               │
└──────────────────────────────────────────────────────────────────────────────┘

DESCRIPTION:
    Encapsulates one aligned sequence with all one-time preprocessing already
    applied, so every worker scoring a chunk reads the same prepared data.

    Benefits:
        - Uppercase conversion performed exactly once per sequence
        - Sequence length cached (avoids repeated ``len()`` calls)
        - Read-only numpy code array built once for vectorised mismatch counts
        - No mutation after construction, so workers share it without locks

USAGE::

    from RecombScanner.core.sequence_context import SequenceContext

    ctx = SequenceContext("acgtACGT", name="isolate_1")
    print(ctx.sequence)      # "ACGTACGT"
    print(ctx.length)        # 8
    print(ctx.symbol_at(2))  # "G"
"""

from __future__ import annotations

from typing import Any, Optional
import numpy as np
from Bio.Seq import MutableSeq, Seq

from RecombScanner.core.errors import ConfigurationError


class SequenceContext:
    """
    Preprocessed, immutable sequence shared by all scan workers of one run.

    Parameters
    ----------
    sequence : str
        Raw sequence string (any case).
    name : str
        Identifier for the sequence, usually the FASTA record id.

    Attributes
    ----------
    sequence : str
        Uppercase, stripped sequence.
    name : str
        Sequence identifier passed through from the caller.
    length : int
        Length of ``sequence`` (cached).
    codes : np.ndarray
        Read-only ``uint32`` array with one code point per symbol, used by the
        vectorised scorer to compare two sequences position by position.
    """

    __slots__ = ("_sequence", "_name", "_length", "_codes")

    def __init__(self, sequence: str, name: str = "sequence") -> None:
        seq = sequence.upper().strip()
        object.__setattr__(self, "_sequence", seq)
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_length", len(seq))

        if seq:
            codes = np.frombuffer(seq.encode("utf-32-le"), dtype="<u4")
        else:
            codes = np.empty(0, dtype="<u4")
        codes.flags.writeable = False
        object.__setattr__(self, "_codes", codes)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"SequenceContext is immutable (cannot set {key!r})")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"SequenceContext is immutable (cannot delete {key!r})")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def sequence(self) -> str:
        return self._sequence

    @property
    def name(self) -> str:
        return self._name

    @property
    def length(self) -> int:
        return self._length

    @property
    def codes(self) -> np.ndarray:
        return self._codes

    def symbol_at(self, position: int) -> str:
        """
        Return the symbol at a 0-based position in O(1).

        Raises:
            IndexError: If ``position`` is outside ``[0, length)``.
        """
        if position < 0 or position >= self._length:
            raise IndexError(
                f"Position {position} outside sequence {self._name!r} "
                f"of length {self._length}"
            )
        return self._sequence[position]

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __getitem__(self, position: int) -> str:
        return self._sequence[position]

    def __len__(self) -> int:
        return self._length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SequenceContext):
            return NotImplemented
        return self._sequence == other._sequence

    def __hash__(self) -> int:
        return hash(self._sequence)

    def __reduce__(self):
        # Rebuilt from the plain string when sent to a worker process
        return (SequenceContext, (self._sequence, self._name))

    def __repr__(self) -> str:
        return f"SequenceContext(name={self._name!r}, length={self._length:,})"


def _decode_symbols(symbols: Any) -> str:
    return "".join(s.decode("ascii") if isinstance(s, bytes) else str(s) for s in symbols)


def as_sequence_context(value: Any, name: Optional[str] = None) -> SequenceContext:
    """
    Coerce anything that behaves like a sequence into a ``SequenceContext``.

    Accepted inputs:
        * ``SequenceContext`` - returned unchanged
        * ``str``
        * ``bytes`` / ``bytearray`` holding ASCII symbols
        * 1-D numpy arrays of single-character strings or bytes
        * Biopython ``SeqRecord`` (uses ``record.seq`` and ``record.id``)
        * Biopython ``Seq`` / ``MutableSeq``
        * objects exposing ``length()`` and ``symbol_at(position)``
        * lists / tuples of single-character symbols

    Raises:
        ConfigurationError: For any other type, non-ASCII bytes or arrays
            that are not 1-D character arrays.
    """
    label = name or "sequence"
    if isinstance(value, SequenceContext):
        return value
    if isinstance(value, str):
        return SequenceContext(value, label)
    if isinstance(value, (bytes, bytearray)):
        try:
            return SequenceContext(bytes(value).decode("ascii"), label)
        except UnicodeDecodeError as exc:
            raise ConfigurationError(f"Sequence {label!r} is not ASCII: {exc}") from exc
    if isinstance(value, np.ndarray):
        if value.ndim != 1 or value.dtype.kind not in "US":
            raise ConfigurationError(
                f"Sequence {label!r} must be a 1-D character array, "
                f"got shape {value.shape} dtype {value.dtype}"
            )
        try:
            return SequenceContext(_decode_symbols(value.tolist()), label)
        except UnicodeDecodeError as exc:
            raise ConfigurationError(f"Sequence {label!r} is not ASCII: {exc}") from exc
    if isinstance(value, (Seq, MutableSeq)):
        return SequenceContext(str(value), label)
    if hasattr(value, "seq") and hasattr(value, "id"):
        return SequenceContext(str(value.seq), name or str(value.id))
    if callable(getattr(value, "symbol_at", None)) and callable(getattr(value, "length", None)):
        symbols = "".join(str(value.symbol_at(i)) for i in range(value.length()))
        return SequenceContext(symbols, label)
    if isinstance(value, (list, tuple)):
        return SequenceContext(_decode_symbols(value), label)
    raise ConfigurationError(
        f"Cannot use {type(value).__name__} as sequence {label!r}; "
        "expected str, bytes, a character array, a Biopython Seq/SeqRecord "
        "or an object with length() and symbol_at()"
    )
