"""
Tests for the recomb-scanner command line.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from RecombScanner.cli import build_parser, main

SEQ1 = "ACGT" * 30
SEQ2 = SEQ1[:50] + "TGCA" * 5 + SEQ1[70:]


@pytest.fixture
def pinned_fasta(tmp_path):
    path = tmp_path / "pair.fasta"
    path.write_text(f">s1\n{SEQ1}\n>s2\n{SEQ2}\n")
    return path


class TestCli:

    def test_parallel_default(self, pinned_fasta, capsys):
        assert main([str(pinned_fasta)]) == 0
        out = capsys.readouterr().out
        assert "Events detected: 20" in out
        assert "Time taken:" in out

    def test_sequential(self, pinned_fasta, capsys):
        assert main([str(pinned_fasta), "--sequential", "--method", "naive"]) == 0
        assert "Events detected: 20" in capsys.readouterr().out

    def test_show_events(self, pinned_fasta, capsys):
        assert main([str(pinned_fasta), "--show-events", "--workers", "3"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Potential recombination detected between positions 0 and 100"
        assert lines[19] == "Potential recombination detected between positions 19 and 119"

    def test_csv_export(self, pinned_fasta, tmp_path, capsys):
        out = tmp_path / "events.csv"
        assert main([str(pinned_fasta), "--csv", str(out)]) == 0
        rows = out.read_text().splitlines()
        assert rows[0] == "Sequence_1,Sequence_2,Start,End,Length"
        assert rows[1] == "s1,s2,0,100,100"
        assert len(rows) == 21

    def test_custom_window(self, pinned_fasta, capsys):
        assert main([str(pinned_fasta), "--window-size", "10", "--threshold", "0.5"]) == 0
        assert "Events detected: 19" in capsys.readouterr().out

    def test_single_record_is_an_error(self, tmp_path, capsys):
        path = tmp_path / "one.fasta"
        path.write_text(">only\nACGT\n")
        assert main([str(path)]) == 1
        assert "at least two sequences" in capsys.readouterr().err

    def test_missing_file_is_an_error(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.fasta")]) == 1
        assert capsys.readouterr().err.startswith("error:")

    def test_bad_threshold_is_an_error(self, pinned_fasta, capsys):
        assert main([str(pinned_fasta), "--threshold", "3"]) == 1
        assert "threshold" in capsys.readouterr().err

    def test_workers_auto(self):
        args = build_parser().parse_args(["x.fasta", "--workers", "auto"])
        assert args.workers >= 1

    def test_workers_rejects_text(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["x.fasta", "--workers", "many"])
