"""Assemble ELP telemetry lines into ``PayloadRecord`` objects and back.

The line format is::

    category measurement1=value1[,measurement2=value2...] [timestamp]

Category and measurement names can not contain spaces.  Values can, as
long as they are quoted.  The optional timestamp is an ISO-8601 instant;
when absent the time of parsing is used.

Examples::

    cpu load=1
    cpu load=1,temperature=20 2022-01-01T01:02:03Z
    net ip1='primary 192.168.1.1',ip2='secondary 10.250.1.1'
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List

import structlog
from pydantic import ValidationError

from elp_codec.errors import (
    CommentLineError,
    MalformedLineError,
    MalformedMeasurementError,
    MalformedTimestampError,
    UnrecognizedValueTypeError,
    abbreviate,
)
from elp_codec.schemas import Measurement, PayloadRecord, ValueType
from elp_codec.splitter import (
    FIELD_SEPARATOR,
    KEY_VALUE_SEPARATOR,
    MEASUREMENT_SEPARATOR,
    is_comment,
    split_line,
    split_measurements,
)
from elp_codec.value_types import TYPE_SUFFIXES, infer_value

logger = structlog.get_logger(__name__)

# Extended ISO-8601 instant: date, time and a mandatory offset.
_INSTANT_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:[.,]\d{1,9})?(?:Z|[+-]\d{2}:\d{2})"
)


def utc_now_iso() -> str:
    """Current instant as ISO-8601 with a ``Z`` designator."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


def is_iso_instant(value: str) -> bool:
    """Return ``True`` for a well-formed ISO-8601 instant with an offset."""
    if not _INSTANT_RE.fullmatch(value):
        return False
    # Range check (month 13, hour 25, ...).  Fractions are dropped because
    # older interpreters only accept 3 or 6 digits.
    head, offset = value[:19], value[19:]
    offset = re.sub(r"^[.,]\d+", "", offset)
    if offset == "Z":
        offset = "+00:00"
    try:
        datetime.fromisoformat(head + offset)
    except ValueError:
        return False
    return True


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_payload(line: str) -> PayloadRecord:
    """Parse one ELP line into a ``PayloadRecord``.

    The line either parses completely or raises; no partial record is
    ever produced.

    Raises
    ------
    CommentLineError
        The line is a comment.  Whether to skip it is up to the caller.
    MalformedLineError
        Wrong number of fields or a bad category
        (``MalformedTimestampError`` when the third field is not an
        ISO-8601 instant).
    MalformedMeasurementError
        A measurement is not a single ``key=value`` pair.
    UnrecognizedValueTypeError
        A value's type could not be detected.
    """
    line = line.rstrip("\r\n")
    if is_comment(line):
        raise CommentLineError(line)

    fields = split_line(line)

    measurements: List[Measurement] = []
    for name, raw_value in split_measurements(fields.measurements, raw=line):
        try:
            value, value_type = infer_value(raw_value)
        except UnrecognizedValueTypeError as exc:
            raise UnrecognizedValueTypeError(exc.token, exc.reason, line) from exc
        try:
            measurement = Measurement(name=name, value=value, value_type=value_type)
        except ValidationError as exc:
            raise MalformedMeasurementError(
                f"{name}{KEY_VALUE_SEPARATOR}{raw_value}", line
            ) from exc
        measurements.append(measurement)

    if fields.timestamp is None:
        timestamp = utc_now_iso()
    elif is_iso_instant(fields.timestamp):
        timestamp = fields.timestamp
    else:
        raise MalformedTimestampError(fields.timestamp, line)

    try:
        record = PayloadRecord(
            category=fields.category,
            timestamp=timestamp,
            measurements=tuple(measurements),
        )
    except ValidationError as exc:
        raise MalformedLineError(
            f"invalid record: {exc.errors()[0]['msg']}", line
        ) from exc
    logger.debug(
        "elp_line_parsed",
        line=abbreviate(line),
        category=record.category,
        measurements=len(record.measurements),
        timestamp_defaulted=fields.timestamp is None,
    )
    return record


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def _format_value(measurement: Measurement) -> str:
    if measurement.value_type is ValueType.STRING:
        quote = "'" if "'" not in measurement.value else '"'
        return f"{quote}{measurement.value}{quote}"
    return measurement.value + TYPE_SUFFIXES.get(measurement.value_type, "")


def format_payload(record: PayloadRecord) -> str:
    """Render *record* as an ELP line, re-applying type hints.

    For records produced by :func:`parse_payload`, parsing the returned
    line yields an equal record.
    """
    measurements = MEASUREMENT_SEPARATOR.join(
        f"{m.name}{KEY_VALUE_SEPARATOR}{_format_value(m)}"
        for m in record.measurements
    )
    return FIELD_SEPARATOR.join((record.category, measurements, record.timestamp))
