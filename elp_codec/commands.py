"""Command channel codec: reply decoding and request encoding.

Reply lines sent by devices::

    <correlationId> <flag> <payload...>

Request lines sent to devices::

    <id> <commandType><executionType>[ <command>[ <arguments>]]
"""

from __future__ import annotations

import uuid
from typing import Dict, Optional, Tuple

import structlog

from elp_codec.errors import ReplyDecodeError, abbreviate
from elp_codec.payload import utc_now_iso
from elp_codec.schemas import CommandReplyRecord, CommandRequestRecord, ReplyOutcome

logger = structlog.get_logger(__name__)

# Single-character success flags accepted in reply lines.
REPLY_FLAGS: Dict[str, ReplyOutcome] = {
    "s": ReplyOutcome.SUCCESS,
    "1": ReplyOutcome.SUCCESS,
    "f": ReplyOutcome.FAILURE,
    "0": ReplyOutcome.FAILURE,
}


def decode_reply(
    body: str,
    hardware_id: str,
    app_name: str,
    topic: str,
) -> CommandReplyRecord:
    """Decode a command reply line into a ``CommandReplyRecord``.

    Parameters
    ----------
    body:
        The reply line.  Everything after the flag and its trailing space
        is kept verbatim as the payload.
    hardware_id:
        Hardware ID of the device that sent the reply.
    app_name:
        Name of the application decoding the reply (``seen_by``).
    topic:
        Channel the reply was received on.

    Raises
    ------
    ReplyDecodeError
        If the body is not ``correlationId flag payload`` or the flag is
        unknown.  The underlying cause is chained.
    """
    try:
        correlation_id, flag, payload = _split_reply(body)
        outcome = REPLY_FLAGS[flag]
    except (ValueError, KeyError) as exc:
        raise ReplyDecodeError(body, exc) from exc

    logger.debug(
        "elp_reply_fields_extracted",
        correlation_id=correlation_id,
        success=flag,
        payload=abbreviate(payload),
    )
    reply = CommandReplyRecord(
        id=str(uuid.uuid4()),
        correlation_id=correlation_id,
        hardware_id=hardware_id,
        seen_at=utc_now_iso(),
        seen_by=app_name,
        channel=topic,
        type=outcome,
        payload=payload,
    )
    logger.debug(
        "elp_reply_decoded",
        reply_id=reply.id,
        correlation_id=reply.correlation_id,
        hardware_id=hardware_id,
        outcome=outcome.value,
    )
    return reply


def _split_reply(body: str) -> Tuple[str, str, str]:
    first = body.index(" ")
    correlation_id = body[:first]
    if not correlation_id:
        raise ValueError("missing correlation id")
    second = body.index(" ", first + 1)
    flag = body[first + 1 : second]
    if len(flag) != 1:
        raise ValueError(f"flag must be a single character, got '{flag}'")
    return correlation_id, flag, body[second + 1 :]


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def encode_request(request: CommandRequestRecord) -> str:
    """Encode a ``CommandRequestRecord`` into its line form.

    The command type and execution type letters are written back to back.
    ``arguments`` is only written when ``command`` is present.
    """
    parts = [
        request.id,
        " ",
        request.command_type.value,
        request.execution_type.value,
    ]
    if not _is_blank(request.command):
        parts += [" ", request.command]
        if not _is_blank(request.arguments):
            parts += [" ", request.arguments]

    line = "".join(parts)
    logger.debug(
        "elp_request_encoded",
        request_id=request.id,
        line=abbreviate(line),
    )
    return line
