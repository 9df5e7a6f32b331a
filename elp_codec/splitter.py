"""Quote-aware splitting of ELP lines.

A line is split into top-level fields on runs of spaces, the measurements
field on commas and each measurement on ``=``.  Separators inside a quoted
span never split:

* ``"..."`` spans may start anywhere;
* ``'...'`` spans start at the beginning of a field or value (after a
  space, ``,`` or ``=``), so apostrophes inside bare words stay literal.

A backslash only escapes a quote character: ``\\"`` neither opens nor
closes a span.  Before anything else it is an ordinary character.  An
unterminated span runs to the end of the text.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Tuple

from elp_codec.errors import MalformedLineError, MalformedMeasurementError

FIELD_SEPARATOR = " "
MEASUREMENT_SEPARATOR = ","
KEY_VALUE_SEPARATOR = "="

_QUOTES = ('"', "'")
_SPAN_OPENERS = (None, FIELD_SEPARATOR, MEASUREMENT_SEPARATOR, KEY_VALUE_SEPARATOR)


class LineFields(NamedTuple):
    """Top-level fields of a telemetry line."""

    category: str
    measurements: str
    timestamp: Optional[str]


def is_comment(line: str) -> bool:
    """Return ``True`` if the first non-space character is ``#``."""
    return line.lstrip().startswith("#")


def _opens_span(ch: str, prev: Optional[str]) -> bool:
    if ch == '"':
        return True
    return ch == "'" and prev in _SPAN_OPENERS


def split_unquoted(text: str, separator: str, *, collapse: bool = False) -> List[str]:
    """Split *text* on *separator* occurrences outside quoted spans.

    With ``collapse=True`` runs of separators count as one and no empty
    fields are returned (used for whitespace).  Otherwise every separator
    splits, so ``"a,,b"`` yields an empty middle field.
    """
    fields: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    escaped = False
    prev: Optional[str] = None

    for ch in text:
        if escaped and ch in _QUOTES:
            current.append(ch)
            escaped = False
            prev = ch
            continue
        escaped = False

        if ch == "\\":
            current.append(ch)
            escaped = True
        elif quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch == separator:
            fields.append("".join(current))
            current = []
        elif _opens_span(ch, prev):
            quote = ch
            current.append(ch)
        else:
            current.append(ch)
        prev = ch

    fields.append("".join(current))
    if collapse:
        fields = [f for f in fields if f]
    return fields


def _category_problem(category: str) -> Optional[str]:
    if category.startswith("#"):
        return "must not start with '#'"
    if any(ch.isspace() for ch in category):
        return "must not contain whitespace"
    if any(q in category for q in _QUOTES):
        return "must not contain quotes"
    return None


def split_line(line: str) -> LineFields:
    """Split a telemetry line into category, measurements and timestamp.

    Raises
    ------
    MalformedLineError
        If the line does not have two or three top-level fields, or the
        category holds a quote or whitespace.
    """
    parts = split_unquoted(line, FIELD_SEPARATOR, collapse=True)
    if len(parts) < 2:
        raise MalformedLineError(
            "line needs category and at least one measurement", line
        )
    if len(parts) > 3:
        raise MalformedLineError(
            f"line has {len(parts)} fields, expected category, measurements "
            f"and an optional timestamp",
            line,
        )
    problem = _category_problem(parts[0])
    if problem is not None:
        raise MalformedLineError(f"category '{parts[0]}' {problem}", line)
    timestamp = parts[2] if len(parts) == 3 else None
    return LineFields(category=parts[0], measurements=parts[1], timestamp=timestamp)


def split_measurements(group: str, *, raw: str = "") -> List[Tuple[str, str]]:
    """Split a measurements field into ``(name, raw_value)`` pairs in order."""
    return [
        split_measurement(token, raw=raw)
        for token in split_unquoted(group, MEASUREMENT_SEPARATOR)
    ]


def split_measurement(token: str, *, raw: str = "") -> Tuple[str, str]:
    """Split one ``key=value`` token.

    An ``=`` inside a quoted value does not count, so ``q='a=b'`` is a
    single pair.

    Raises
    ------
    MalformedMeasurementError
        If the token does not hold exactly one unquoted ``=``, either side
        is empty, or the name contains ``=`` inside quotes.
    """
    pair = split_unquoted(token, KEY_VALUE_SEPARATOR)
    if len(pair) != 2 or not pair[0] or not pair[1]:
        raise MalformedMeasurementError(token, raw or token)
    if KEY_VALUE_SEPARATOR in pair[0]:
        raise MalformedMeasurementError(token, raw or token)
    return pair[0], pair[1]
