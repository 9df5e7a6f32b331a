"""Error taxonomy raised by the ELP codec.

Every failure is terminal for the line that caused it.  Errors carry the
offending raw input (abbreviated, so it is safe to log) and a ``kind`` tag
so callers can branch on the variant without an ``isinstance`` ladder.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

# The size limit when embedding possibly large input in messages and logs.
MESSAGE_LOG_ABBREVIATION_LENGTH = 4096


def abbreviate(text: str, max_length: int = MESSAGE_LOG_ABBREVIATION_LENGTH) -> str:
    """Cap *text* at *max_length* characters, marking truncation with ``...``."""
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."


class ErrorKind(str, Enum):
    COMMENT_LINE = "comment_line"
    MALFORMED_LINE = "malformed_line"
    MALFORMED_TIMESTAMP = "malformed_timestamp"
    MALFORMED_MEASUREMENT = "malformed_measurement"
    UNRECOGNIZED_VALUE_TYPE = "unrecognized_value_type"
    REPLY_DECODE = "reply_decode"


class ELPError(ValueError):
    """Base class for all codec failures."""

    kind: ErrorKind

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.raw = abbreviate(raw)


class CommentLineError(ELPError):
    """The line is a comment, not data."""

    kind = ErrorKind.COMMENT_LINE

    def __init__(self, raw: str) -> None:
        super().__init__(
            f"Requested to parse a comment line '{abbreviate(raw)}'.", raw
        )


class MalformedLineError(ELPError):
    """The line does not split into category, measurements and timestamp."""

    kind = ErrorKind.MALFORMED_LINE


class MalformedTimestampError(MalformedLineError):
    """The third field of a line is not an ISO-8601 instant."""

    kind = ErrorKind.MALFORMED_TIMESTAMP

    def __init__(self, timestamp: str, raw: str) -> None:
        super().__init__(
            f"Invalid timestamp '{abbreviate(timestamp)}', expected an "
            f"ISO-8601 instant such as 2022-01-01T01:02:03Z.",
            raw,
        )
        self.timestamp = timestamp


class MalformedMeasurementError(ELPError):
    """A measurement token is not a single ``key=value`` pair."""

    kind = ErrorKind.MALFORMED_MEASUREMENT

    def __init__(self, token: str, raw: str = "") -> None:
        super().__init__(
            f"Invalid measurement data, expected a key-value pair separated "
            f"by '=', but got '{abbreviate(token)}'.",
            raw,
        )
        self.token = token


class UnrecognizedValueTypeError(ELPError):
    """A value token could not be classified into a ``ValueType``."""

    kind = ErrorKind.UNRECOGNIZED_VALUE_TYPE

    def __init__(self, token: str, reason: str, raw: str = "") -> None:
        super().__init__(
            f"Could not detect the value type of '{abbreviate(token)}': {reason}.",
            raw or token,
        )
        self.token = token
        self.reason = reason


class ReplyDecodeError(ELPError):
    """A command reply body does not match ``correlationId flag payload``."""

    kind = ErrorKind.REPLY_DECODE

    def __init__(self, body: str, cause: Optional[BaseException] = None) -> None:
        detail = f" due to '{cause}'" if cause is not None else ""
        super().__init__(
            f"Failed to parse command reply message '{abbreviate(body)}'"
            f"{detail}. Check that command reply messages are formatted as "
            f"[correlationId] [success] [output].",
            body,
        )
        self.cause = cause
