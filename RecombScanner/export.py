"""
Reporting and export helpers for scan results.

Events stay plain ``Event`` records inside the core; they become text or
tables only here.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from RecombScanner.config.analysis import EXPORT_COLUMNS, TIMING_MESSAGE
from RecombScanner.core.models import Event, ScanResult

logger = logging.getLogger(__name__)


def format_event(event: Event) -> str:
    """'Potential recombination detected between positions 10 and 110'"""
    return event.describe()


def format_timing(result: ScanResult) -> str:
    return TIMING_MESSAGE.format(millis=result.elapsed_millis)


def format_report(result: ScanResult, show_events: bool = False) -> str:
    """
    Human-readable summary of a scan.

    Args:
        result: Result from ``scan`` / ``scan_parallel``
        show_events: Include one line per event

    Returns:
        Multi-line report ending with the timing line
    """
    lines: List[str] = []
    if show_events:
        lines.extend(format_event(event) for event in result.events)

    lines.append(f"Events detected: {len(result.events):,}")
    if result.failed_chunks:
        ranges = ", ".join(str(chunk) for chunk in result.failed_chunks)
        lines.append(f"Failed chunks ({len(result.failed_chunks)}): {ranges}")
    if result.cancelled:
        lines.append("WARNING: scan was cancelled before all chunks finished; results are partial")
    lines.append(format_timing(result))
    return "\n".join(lines)


def events_to_dataframe(
    events: Iterable[Event],
    seq1_name: str = "seq1",
    seq2_name: str = "seq2",
) -> pd.DataFrame:
    """
    Convert events to a DataFrame with columns ``EXPORT_COLUMNS``.

    Start is 0-based inclusive and End exclusive, as in the core.
    """
    rows = [
        {
            'Sequence_1': seq1_name,
            'Sequence_2': seq2_name,
            'Start': event.start,
            'End': event.end,
            'Length': event.length,
        }
        for event in events
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.astype({'Start': 'int64', 'End': 'int64', 'Length': 'int64'})


def export_to_csv(
    result: ScanResult,
    filename: Optional[str] = None,
    seq1_name: str = "seq1",
    seq2_name: str = "seq2",
) -> str:
    """
    Export scan events to CSV.

    Args:
        result: Scan result to export
        filename: Optional output path; the CSV is also returned as a string
        seq1_name, seq2_name: Names written into every row

    Returns:
        CSV format string (header only when there are no events)
    """
    df = events_to_dataframe(result.events, seq1_name, seq2_name)
    csv_content = df.to_csv(index=False)

    if filename:
        with open(filename, 'w', newline='') as f:
            f.write(csv_content)
        logger.info(f"Wrote {len(df):,} events to {filename}")

    return csv_content
