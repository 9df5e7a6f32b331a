"""Parse ELP text streams and files line by line.

Bad lines are quarantined, not fatal: each one is reported as a failed
``LineResult`` and logged, and parsing carries on with the next line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import structlog

from elp_codec.errors import ELPError, abbreviate
from elp_codec.payload import parse_payload
from elp_codec.schemas import PayloadRecord
from elp_codec.splitter import is_comment

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LineResult:
    """Outcome of parsing one line: exactly one of *record* / *error*."""

    line_no: int
    record: Optional[PayloadRecord] = None
    error: Optional[ELPError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class IngestReport:
    """Summary of a batch parse."""

    source: str
    records: List[PayloadRecord] = field(default_factory=list)
    failures: List[LineResult] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.records) + len(self.failures) + self.skipped


def parse_lines(
    lines: Iterable[str],
    *,
    skip_comments: bool = True,
    skip_blank: bool = True,
) -> Iterator[LineResult]:
    """Parse each line of *lines*, yielding one ``LineResult`` per line.

    Parameters
    ----------
    lines:
        Raw lines; trailing newlines are tolerated.
    skip_comments:
        Drop ``#`` lines silently.  When ``False`` they come back as
        ``CommentLineError`` failures.
    skip_blank:
        Drop empty / whitespace-only lines.  When ``False`` they come back
        as ``MalformedLineError`` failures.
    """
    for line_no, line in enumerate(lines, start=1):
        text = line.rstrip("\r\n")
        if skip_blank and not text.strip():
            continue
        if skip_comments and is_comment(text):
            continue
        try:
            yield LineResult(line_no=line_no, record=parse_payload(text))
        except ELPError as exc:
            logger.warning(
                "elp_line_rejected",
                line_no=line_no,
                kind=exc.kind.value,
                reason=exc.message,
                line=abbreviate(text),
            )
            yield LineResult(line_no=line_no, error=exc)


def parse_file(
    path: str | Path,
    *,
    skip_comments: bool = True,
    skip_blank: bool = True,
) -> IngestReport:
    """Parse a UTF-8 ELP file into an ``IngestReport``."""
    path = Path(path)
    with open(path, encoding="utf-8") as fh:
        lines = fh.readlines()

    report = IngestReport(source=str(path))
    for result in parse_lines(
        lines, skip_comments=skip_comments, skip_blank=skip_blank
    ):
        if result.ok:
            report.records.append(result.record)
        else:
            report.failures.append(result)

    report.skipped = len(lines) - len(report.records) - len(report.failures)
    logger.info(
        "elp_ingest_finished",
        source=report.source,
        records=len(report.records),
        failures=len(report.failures),
        skipped=report.skipped,
    )
    return report
