"""Tests for elp_codec.commands -- reply decoding and request encoding."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import pytest

from elp_codec.commands import decode_reply, encode_request
from elp_codec.errors import ErrorKind, ReplyDecodeError
from elp_codec.schemas import (
    CommandRequestRecord,
    CommandType,
    ExecutionType,
    ReplyOutcome,
)


# ---------------------------------------------------------------------------
# decode_reply
# ---------------------------------------------------------------------------

class TestDecodeReply:
    def test_fields(self) -> None:
        """Reply fields come from the body and the decode context."""
        reply = decode_reply("c-1 1 output text", "hw-1", "app", "topic")
        assert reply.correlation_id == "c-1"
        assert reply.type is ReplyOutcome.SUCCESS
        assert reply.payload == "output text"
        assert reply.hardware_id == "hw-1"
        assert reply.seen_by == "app"
        assert reply.channel == "topic"

    def test_id_is_fresh_uuid(self) -> None:
        """Every decode gets a new UUID, even for identical input."""
        first = decode_reply("c-1 s ok", "hw-1", "app", "topic")
        second = decode_reply("c-1 s ok", "hw-1", "app", "topic")
        uuid.UUID(first.id)
        assert first.id != second.id

    def test_seen_at_is_now(self) -> None:
        """seen_at is the decoding instant."""
        reply = decode_reply("c-1 s ok", "hw-1", "app", "topic")
        seen = datetime.fromisoformat(reply.seen_at.replace("Z", "+00:00"))
        assert abs((datetime.now(timezone.utc) - seen).total_seconds()) < 5

    @pytest.mark.parametrize(
        "flag,outcome",
        [
            ("s", ReplyOutcome.SUCCESS),
            ("1", ReplyOutcome.SUCCESS),
            ("f", ReplyOutcome.FAILURE),
            ("0", ReplyOutcome.FAILURE),
        ],
    )
    def test_flag_lookup(self, flag: str, outcome: ReplyOutcome) -> None:
        """Both letter and digit flags map to an outcome."""
        reply = decode_reply(f"c-9 {flag} x", "hw", "app", "t")
        assert reply.type is outcome

    def test_payload_taken_verbatim(self) -> None:
        """Everything after the second space is the payload, untouched."""
        reply = decode_reply('c-2 s  two  spaces "q"', "hw", "app", "t")
        assert reply.payload == ' two  spaces "q"'

    def test_empty_payload(self) -> None:
        """A trailing space with nothing after it gives an empty payload."""
        assert decode_reply("c-3 f ", "hw", "app", "t").payload == ""

    @pytest.mark.parametrize(
        "body",
        ["", "c-1", "c-1 1", "c-1 x payload", "c-1 11 payload", " 1 payload"],
    )
    def test_malformed_bodies(self, body: str) -> None:
        """Bodies not matching the reply shape raise a chained ReplyDecodeError."""
        with pytest.raises(ReplyDecodeError) as exc_info:
            decode_reply(body, "hw", "app", "t")
        exc = exc_info.value
        assert exc.kind is ErrorKind.REPLY_DECODE
        assert exc.raw == body
        assert exc.__cause__ is not None
        assert "[correlationId] [success] [output]" in str(exc)


# ---------------------------------------------------------------------------
# encode_request
# ---------------------------------------------------------------------------

def _request(
    command: Optional[str] = None,
    arguments: Optional[str] = None,
    command_type: CommandType = CommandType.EXECUTE,
    execution_type: ExecutionType = ExecutionType.SYNCHRONOUS,
) -> CommandRequestRecord:
    return CommandRequestRecord(
        id="r1",
        command_type=command_type,
        execution_type=execution_type,
        command=command,
        arguments=arguments,
    )


class TestEncodeRequest:
    def test_no_command(self) -> None:
        """Without a command only the id and type letters are written."""
        assert encode_request(_request()) == "r1 es"

    def test_arguments_suppressed_without_command(self) -> None:
        """Arguments are dropped when there is no command."""
        assert encode_request(_request(command="", arguments="x")) == "r1 es"

    def test_blank_command_suppressed(self) -> None:
        """A whitespace-only command counts as absent."""
        assert encode_request(_request(command="   ", arguments="x")) == "r1 es"

    def test_command_only(self) -> None:
        """A command with no arguments is appended after one space."""
        assert encode_request(_request(command="ls")) == "r1 es ls"

    def test_blank_arguments_suppressed(self) -> None:
        """Whitespace-only arguments are not written."""
        assert encode_request(_request(command="ls", arguments=" ")) == "r1 es ls"

    def test_command_and_arguments(self) -> None:
        """Command and arguments are appended in order."""
        line = encode_request(_request(command="ls", arguments="-la /tmp"))
        assert line == "r1 es ls -la /tmp"

    def test_type_letters_have_no_separator(self) -> None:
        """Command and execution letters are written back to back."""
        request = _request(
            command_type=CommandType.PING,
            execution_type=ExecutionType.ASYNCHRONOUS,
        )
        assert encode_request(request) == "r1 pa"
