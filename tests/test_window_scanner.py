"""
╔══════════════════════════════════════════════════════════════════════════════╗
║            WINDOW SCANNER TEST SUITE                                          ║
║        Sequential Sliding-Window Mismatch Scoring                             ║
╚══════════════════════════════════════════════════════════════════════════════╝

Tests validate:
1. Pinned input/output fixtures
2. Strict threshold comparison
3. Empty results for short or missing sequences
4. Naive, rolling and vectorized counts agree
5. Configuration errors fail fast
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import random
import unittest

import numpy as np

from RecombScanner.core.errors import ConfigurationError
from RecombScanner.core.models import Event, ScanResult
from RecombScanner.core.window_scanner import (
    mismatch_counts,
    scan,
    scan_range,
    valid_start_count,
)
from RecombScanner.core.sequence_context import SequenceContext

_SWAP = {'A': 'C', 'C': 'G', 'G': 'T', 'T': 'A'}


def _mutate(seq: str, positions) -> str:
    chars = list(seq)
    for p in positions:
        chars[p] = _SWAP[chars[p]]
    return ''.join(chars)


def _random_pair(rng: random.Random, length: int, divergence: float):
    seq1 = ''.join(rng.choice('ACGT') for _ in range(length))
    positions = [i for i in range(length) if rng.random() < divergence]
    return seq1, _mutate(seq1, positions)


class TestPinnedFixtures(unittest.TestCase):
    """Exact input/output pairs"""

    def test_120bp_pair_with_block_of_20_mismatches(self):
        """Positions 50-69 differ; every scanned window holds all 20 mismatches"""
        seq1 = "ACGT" * 30
        seq2 = _mutate(seq1, range(50, 70))
        result = scan(seq1, seq2, window_size=100, threshold=0.1)

        expected = [Event(i, i + 100) for i in range(20)]
        self.assertEqual(result.events, expected)
        self.assertTrue(result.complete)

    def test_scattered_mismatches_small_window(self):
        """Mismatches at 5, 12, 14, 27; window 10 needs 2+ mismatches"""
        seq1 = "ACGTACGTAC" * 3
        seq2 = _mutate(seq1, [5, 12, 14, 27])
        result = scan(seq1, seq2, window_size=10, threshold=0.1)

        self.assertEqual([e.start for e in result], list(range(3, 13)))
        self.assertTrue(all(e.end == e.start + 10 for e in result))

    def test_last_valid_window_start_is_not_scanned(self):
        """Upper bound of the start range is exclusive: min_len - window_size"""
        seq1 = "A" * 20
        seq2 = "A" * 10 + "C" * 10
        result = scan(seq1, seq2, window_size=10, threshold=0.5)
        self.assertEqual(valid_start_count(SequenceContext(seq1), SequenceContext(seq2), 10), 10)
        self.assertNotIn(Event(10, 20), result.events)
        self.assertEqual(result.events[-1], Event(9, 19))


class TestThresholdBoundary(unittest.TestCase):
    """Rate equal to the threshold is not an event"""

    def setUp(self):
        self.seq1 = "A" * 101

    def test_exactly_threshold_produces_no_event(self):
        seq2 = "C" * 10 + "A" * 91
        result = scan(self.seq1, seq2, window_size=100, threshold=0.1)
        self.assertEqual(result.events, [])

    def test_one_above_threshold_produces_event(self):
        seq2 = "C" * 11 + "A" * 90
        result = scan(self.seq1, seq2, window_size=100, threshold=0.1)
        self.assertEqual(result.events, [Event(0, 100)])

    def test_threshold_zero_reports_any_mismatch(self):
        seq2 = "A" * 50 + "G" + "A" * 50
        result = scan(self.seq1, seq2, window_size=100, threshold=0.0)
        self.assertEqual(result.events, [Event(0, 100)])

    def test_threshold_one_never_reports(self):
        result = scan("A" * 20, "C" * 20, window_size=5, threshold=1.0)
        self.assertEqual(result.events, [])


class TestEmptyResults(unittest.TestCase):
    """Short and missing inputs return an empty list without error"""

    def test_sequences_shorter_than_window(self):
        result = scan("ACGT" * 12 + "AC", "TGCA" * 12 + "TG", window_size=100, threshold=0.1)
        self.assertIsInstance(result, ScanResult)
        self.assertEqual(result.events, [])

    def test_sequence_length_equal_to_window(self):
        result = scan("A" * 100, "C" * 100, window_size=100, threshold=0.1)
        self.assertEqual(len(result), 0)

    def test_missing_first_sequence(self):
        self.assertEqual(scan(None, "ACGT" * 50).events, [])

    def test_missing_both_sequences(self):
        self.assertEqual(scan(None, None).events, [])

    def test_scan_range_with_empty_interval(self):
        self.assertEqual(scan_range("A" * 50, "C" * 50, 10, 10, 5, 0.1), [])
        self.assertEqual(scan_range("A" * 50, "C" * 50, 12, 4, 5, 0.1), [])


class TestScoringMethods(unittest.TestCase):
    """Incremental and vectorized counts equal naive recounts"""

    def test_counts_agree_on_random_pairs(self):
        rng = random.Random(20240)
        for trial in range(40):
            length = rng.randint(1, 300)
            window = rng.randint(1, 40)
            seq1, seq2 = _random_pair(rng, length, rng.choice([0.0, 0.05, 0.2, 0.6]))
            total = min(len(seq1), len(seq2)) - window
            if total <= 0:
                continue
            naive = mismatch_counts(seq1, seq2, 0, total, window, "naive")
            rolling = mismatch_counts(seq1, seq2, 0, total, window, "rolling")
            vectorized = mismatch_counts(seq1, seq2, 0, total, window, "vectorized")
            np.testing.assert_array_equal(naive, rolling, err_msg=f"trial {trial}")
            np.testing.assert_array_equal(naive, vectorized, err_msg=f"trial {trial}")

    def test_counts_agree_on_sub_ranges(self):
        rng = random.Random(7)
        seq1, seq2 = _random_pair(rng, 500, 0.15)
        for lo, hi in [(0, 1), (17, 18), (100, 250), (390, 401)]:
            naive = mismatch_counts(seq1, seq2, lo, hi, 100, "naive")
            rolling = mismatch_counts(seq1, seq2, lo, hi, 100, "rolling")
            vectorized = mismatch_counts(seq1, seq2, lo, hi, 100, "vectorized")
            np.testing.assert_array_equal(naive, rolling)
            np.testing.assert_array_equal(naive, vectorized)

    def test_events_identical_for_every_method(self):
        rng = random.Random(99)
        seq1, seq2 = _random_pair(rng, 800, 0.1)
        by_method = {
            method: scan(seq1, seq2, window_size=50, threshold=0.1, method=method).events
            for method in ("naive", "rolling", "vectorized")
        }
        self.assertEqual(by_method["naive"], by_method["rolling"])
        self.assertEqual(by_method["naive"], by_method["vectorized"])
        self.assertGreater(len(by_method["naive"]), 0)

    def test_output_strictly_increasing(self):
        rng = random.Random(3)
        seq1, seq2 = _random_pair(rng, 1_000, 0.3)
        starts = [e.start for e in scan(seq1, seq2, window_size=20, threshold=0.25)]
        self.assertTrue(all(a < b for a, b in zip(starts, starts[1:])))

    def test_lowercase_input_matches_uppercase(self):
        upper = scan("ACGTACGTAA" * 5, "ACGAACGTTA" * 5, window_size=10, threshold=0.1)
        lower = scan("acgtacgtaa" * 5, "ACGAACGTTA" * 5, window_size=10, threshold=0.1)
        self.assertEqual(upper.events, lower.events)


class TestSequenceCapability(unittest.TestCase):
    """Anything with length() and symbol_at() can be scanned"""

    class _Store:
        def __init__(self, text):
            self._text = text

        def length(self):
            return len(self._text)

        def symbol_at(self, position):
            return self._text[position]

    def test_capability_objects(self):
        seq1 = "ACGT" * 30
        seq2 = _mutate(seq1, range(50, 70))
        result = scan(self._Store(seq1), self._Store(seq2), window_size=100, threshold=0.1)
        self.assertEqual(len(result), 20)

    def test_unequal_lengths_bounded_by_shorter(self):
        result = scan("A" * 300, "C" * 150, window_size=100, threshold=0.5)
        self.assertEqual([e.start for e in result], list(range(50)))


class TestConfigurationErrors(unittest.TestCase):
    """Invalid parameters raise ConfigurationError"""

    def test_zero_window(self):
        with self.assertRaises(ConfigurationError):
            scan("ACGT", "ACGT", window_size=0)

    def test_threshold_out_of_range(self):
        with self.assertRaises(ConfigurationError):
            scan("ACGT", "ACGT", threshold=1.5)
        with self.assertRaises(ConfigurationError):
            scan("ACGT", "ACGT", threshold=-0.1)

    def test_unknown_method(self):
        with self.assertRaises(ConfigurationError):
            scan("ACGT" * 10, "ACGT" * 10, window_size=4, method="fast")

    def test_range_past_sequence_end(self):
        with self.assertRaises(ConfigurationError):
            scan_range("A" * 50, "C" * 50, 0, 42, 10, 0.1)

    def test_negative_range_start(self):
        with self.assertRaises(ConfigurationError):
            mismatch_counts("A" * 50, "C" * 50, -1, 5, 10)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            scan("ACGT", "ACGT", window_size=-3)


if __name__ == '__main__':
    unittest.main()
