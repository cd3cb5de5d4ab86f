"""
Tests for scan parameters, results and the error taxonomy.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from RecombScanner.config.analysis import SCAN_CONFIG
from RecombScanner.core.errors import (
    ChunkExecutionError,
    ConfigurationError,
    InsufficientInputError,
    RecombScannerError,
    ScanCancelledError,
)
from RecombScanner.core.models import Event, ScanParameters, ScanRange, ScanResult


class TestScanParameters(unittest.TestCase):
    """Validation and override rules"""

    def test_defaults_follow_config(self):
        params = ScanParameters()
        self.assertEqual(params.window_size, SCAN_CONFIG['window_size'])
        self.assertEqual(params.threshold, SCAN_CONFIG['threshold'])
        self.assertEqual(params.worker_count, SCAN_CONFIG['worker_count'])
        self.assertIsNone(params.chunk_size)
        self.assertEqual(params.executor_kind, 'thread')
        self.assertEqual(params.scoring_method, 'vectorized')

    def test_original_defaults(self):
        params = ScanParameters()
        self.assertEqual((params.window_size, params.threshold, params.worker_count), (100, 0.1, 4))

    def test_invalid_values(self):
        bad = [
            {'window_size': 0},
            {'window_size': -5},
            {'window_size': 2.5},
            {'window_size': True},
            {'threshold': -0.01},
            {'threshold': 1.01},
            {'threshold': float('nan')},
            {'threshold': '0.1'},
            {'worker_count': 0},
            {'chunk_size': 0},
            {'wait_timeout': 0},
            {'poll_interval': -1},
            {'scoring_method': 'fft'},
            {'executor_kind': 'gpu'},
        ]
        for kwargs in bad:
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(ConfigurationError):
                    ScanParameters(**kwargs)

    def test_threshold_bounds_are_inclusive(self):
        self.assertEqual(ScanParameters(threshold=0).threshold, 0)
        self.assertEqual(ScanParameters(threshold=1.0).threshold, 1.0)

    def test_from_config_ignores_none(self):
        params = ScanParameters.from_config(window_size=50, threshold=None)
        self.assertEqual(params.window_size, 50)
        self.assertEqual(params.threshold, SCAN_CONFIG['threshold'])

    def test_with_overrides_revalidates(self):
        base = ScanParameters(window_size=20)
        self.assertEqual(base.with_overrides(worker_count=8).worker_count, 8)
        self.assertEqual(base.with_overrides(worker_count=8).window_size, 20)
        with self.assertRaises(ConfigurationError):
            base.with_overrides(threshold=2)

    def test_unknown_override(self):
        with self.assertRaises(ConfigurationError):
            ScanParameters().with_overrides(window=10)


class TestScanResult(unittest.TestCase):

    def test_empty_result(self):
        result = ScanResult()
        self.assertEqual(list(result), [])
        self.assertEqual(len(result), 0)
        self.assertTrue(result.complete)
        self.assertEqual(result.elapsed_millis, 0)

    def test_behaves_like_event_list(self):
        result = ScanResult(events=[Event(0, 10), Event(3, 13)])
        self.assertEqual(result[1], Event(3, 13))
        self.assertEqual([e.start for e in result], [0, 3])

    def test_elapsed_millis(self):
        self.assertEqual(ScanResult(elapsed_seconds=1.2346).elapsed_millis, 1235)

    def test_failed_chunks_mean_incomplete(self):
        result = ScanResult(failed_chunks=[ScanRange(1, 10, 20)])
        self.assertFalse(result.complete)
        self.assertFalse(result.cancelled)
        self.assertIs(result.raise_if_cancelled(), result)

    def test_raise_if_cancelled(self):
        result = ScanResult(events=[Event(4, 14)], cancelled=True)
        self.assertFalse(result.complete)
        with self.assertRaises(ScanCancelledError) as ctx:
            result.raise_if_cancelled()
        self.assertIs(ctx.exception.partial_result, result)
        self.assertIn("1 events recovered", str(ctx.exception))


class TestEventAndRange(unittest.TestCase):

    def test_event_message(self):
        self.assertEqual(
            Event(10, 110).describe(),
            "Potential recombination detected between positions 10 and 110",
        )
        self.assertEqual(Event(10, 110).length, 100)

    def test_events_order_by_start(self):
        self.assertEqual(sorted([Event(5, 15), Event(1, 11)]), [Event(1, 11), Event(5, 15)])

    def test_range_size_and_str(self):
        chunk = ScanRange(index=2, start=1000, end=2500)
        self.assertEqual(chunk.size, 1500)
        self.assertEqual(str(chunk), "#2 [1,000-2,500)")


class TestErrors(unittest.TestCase):

    def test_hierarchy(self):
        for cls in (ConfigurationError, InsufficientInputError, ChunkExecutionError, ScanCancelledError):
            self.assertTrue(issubclass(cls, RecombScannerError))
        self.assertTrue(issubclass(ConfigurationError, ValueError))

    def test_insufficient_input_message(self):
        err = InsufficientInputError(1)
        self.assertEqual(err.found, 1)
        self.assertIn("found 1", str(err))

    def test_chunk_execution_error_keeps_cause(self):
        cause = RuntimeError("disk gone")
        err = ChunkExecutionError(ScanRange(0, 0, 5), cause)
        self.assertIs(err.cause, cause)
        self.assertIn("RuntimeError: disk gone", str(err))


if __name__ == '__main__':
    unittest.main()
