"""Tests for elp_codec.ingest -- batch parsing with quarantine."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from structlog.testing import capture_logs

from elp_codec.errors import CommentLineError, MalformedLineError, MalformedTimestampError
from elp_codec.ingest import parse_file, parse_lines


class TestParseLines:
    def test_skips_comments_and_blanks(self, sample_lines: List[str]) -> None:
        """Comments and blank lines are skipped; the rest keep their line numbers."""
        results = list(parse_lines(sample_lines))
        assert [r.line_no for r in results] == [2, 3, 5, 6, 7, 8]
        assert [r.ok for r in results] == [True, True, True, False, True, False]

    def test_failure_does_not_stop_batch(self) -> None:
        """A rejected line is reported and the next line still parses."""
        results = list(parse_lines(["cpu", "cpu load=1"]))
        assert not results[0].ok
        assert results[1].record is not None
        assert results[1].record.category == "cpu"

    @pytest.mark.parametrize(
        "bad_line", ["'my cat' load=1", '"my cat" load=1', "a\tb load=1"]
    )
    def test_bad_category_quarantined(self, bad_line: str) -> None:
        """A line with an invalid category is rejected without ending the batch."""
        results = list(parse_lines([bad_line, "cpu load=1"]))
        assert len(results) == 2
        assert isinstance(results[0].error, MalformedLineError)
        assert results[0].line_no == 1
        assert results[1].ok

    def test_comments_reported_when_not_skipped(self) -> None:
        """With skipping off, comments come back as failures."""
        results = list(parse_lines(["# note", "cpu load=1"], skip_comments=False))
        assert isinstance(results[0].error, CommentLineError)
        assert results[1].ok

    def test_blank_reported_when_not_skipped(self) -> None:
        """With skipping off, blank lines are malformed."""
        results = list(parse_lines(["", "  "], skip_blank=False))
        assert all(isinstance(r.error, MalformedLineError) for r in results)

    def test_rejection_logged(self) -> None:
        """Each rejected line emits one warning with its error kind."""
        with capture_logs() as logs:
            list(parse_lines(["cpu load=1 tomorrow"]))
        rejected = [e for e in logs if e["event"] == "elp_line_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["log_level"] == "warning"
        assert rejected[0]["line_no"] == 1
        assert rejected[0]["kind"] == "malformed_timestamp"


class TestParseFile:
    def test_report_counts(self, sample_elp_path: Path) -> None:
        """Records, failures and skipped lines add up to the file length."""
        report = parse_file(sample_elp_path)
        assert report.source == str(sample_elp_path)
        assert len(report.records) == 4
        assert len(report.failures) == 2
        assert report.skipped == 2
        assert report.total == 8

    def test_records_in_file_order(self, sample_elp_path: Path) -> None:
        """Records come back in file order with quoted values intact."""
        report = parse_file(sample_elp_path)
        assert [r.category for r in report.records] == ["cpu", "cpu", "net", "mem"]
        net = report.records[2]
        assert [m.value for m in net.measurements] == [
            "primary 192.168.1.1",
            "secondary 10.250.1.1",
        ]

    def test_failures_keep_line_numbers(self, sample_elp_path: Path) -> None:
        """Failures point at the 1-based line they came from."""
        report = parse_file(sample_elp_path)
        assert [f.line_no for f in report.failures] == [6, 8]
        assert isinstance(report.failures[0].error, MalformedTimestampError)

    def test_finish_logged(self, sample_elp_path: Path) -> None:
        """A summary event is logged once the file is read."""
        with capture_logs() as logs:
            parse_file(sample_elp_path)
        finished = [e for e in logs if e["event"] == "elp_ingest_finished"]
        assert finished[0]["records"] == 4
        assert finished[0]["failures"] == 2
