"""ELP codec -- esthesis Line Protocol parsing and encoding.

Turns telemetry lines sent by devices into ``PayloadRecord`` objects,
decodes command replies and encodes command requests.  All operations
are pure and safe to call from any number of threads.
"""

from elp_codec.commands import decode_reply, encode_request
from elp_codec.errors import (
    CommentLineError,
    ELPError,
    ErrorKind,
    MalformedLineError,
    MalformedMeasurementError,
    MalformedTimestampError,
    ReplyDecodeError,
    UnrecognizedValueTypeError,
)
from elp_codec.payload import format_payload, parse_payload
from elp_codec.schemas import (
    CommandReplyRecord,
    CommandRequestRecord,
    CommandType,
    ExecutionType,
    Measurement,
    PayloadRecord,
    ReplyOutcome,
    ValueType,
)
from elp_codec.value_types import infer_value

__version__ = "0.1.0"

__all__ = [
    "CommandReplyRecord",
    "CommandRequestRecord",
    "CommandType",
    "CommentLineError",
    "ELPError",
    "ErrorKind",
    "ExecutionType",
    "MalformedLineError",
    "MalformedMeasurementError",
    "MalformedTimestampError",
    "Measurement",
    "PayloadRecord",
    "ReplyDecodeError",
    "ReplyOutcome",
    "UnrecognizedValueTypeError",
    "ValueType",
    "decode_reply",
    "encode_request",
    "format_payload",
    "infer_value",
    "parse_payload",
]
