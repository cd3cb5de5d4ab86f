"""Error taxonomy for divergence scanning."""

from __future__ import annotations

from typing import Any, Optional


class RecombScannerError(Exception):
    """Base class for all scanner errors."""
    pass


class ConfigurationError(RecombScannerError, ValueError):
    """Raised when scan parameters or a scan range are invalid."""
    pass


class InsufficientInputError(RecombScannerError):
    """Raised by loaders when fewer than two sequences are available."""

    def __init__(self, found: int):
        self.found = found
        super().__init__(f"Need at least two sequences to compare, found {found}")


class ChunkExecutionError(RecombScannerError):
    """A single chunk failed while being scored."""

    def __init__(self, scan_range: Any, cause: BaseException):
        self.scan_range = scan_range
        self.cause = cause
        super().__init__(f"Chunk {scan_range} failed: {type(cause).__name__}: {cause}")


class ScanCancelledError(RecombScannerError):
    """The wait for workers timed out or was interrupted.

    ``partial_result`` holds the events from the chunks that did complete.
    """

    def __init__(self, partial_result: Optional[Any] = None, reason: str = "cancelled"):
        self.partial_result = partial_result
        self.reason = reason
        done = len(partial_result.events) if partial_result is not None else 0
        super().__init__(f"Scan did not complete ({reason}); {done} events recovered")
