"""ELP record models (Pydantic v2).

Records are frozen once built: the codec constructs them from a single
line and hands ownership to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ValueType(str, Enum):
    """Semantic type of a measurement value."""

    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    BYTE = "BYTE"
    SHORT = "SHORT"
    INTEGER = "INTEGER"
    LONG = "LONG"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    BIG_INTEGER = "BIG_INTEGER"
    BIG_DECIMAL = "BIG_DECIMAL"
    UNKNOWN = "UNKNOWN"


class ReplyOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class CommandType(str, Enum):
    """Command kinds; the value is the single wire letter."""

    EXECUTE = "e"
    FIRMWARE = "f"
    PING = "p"
    REBOOT = "r"
    SHUTDOWN = "s"
    HEALTH = "h"


class ExecutionType(str, Enum):
    ASYNCHRONOUS = "a"
    SYNCHRONOUS = "s"


# ---------------------------------------------------------------------------
# Telemetry records
# ---------------------------------------------------------------------------

class Measurement(BaseModel):
    """One named value within a telemetry line."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1, description="Measurement name")
    value: str = Field(..., description="Canonical literal, hints stripped")
    value_type: ValueType = Field(..., description="Inferred value type")

    @field_validator("name")
    @classmethod
    def reject_separator_in_name(cls, v: str) -> str:
        if "=" in v:
            raise ValueError(f"Measurement name must not contain '=', got '{v}'")
        return v

    @model_validator(mode="after")
    def check_value_matches_type(self) -> "Measurement":
        from elp_codec.value_types import is_consistent

        if not is_consistent(self.value, self.value_type):
            raise ValueError(
                f"Value '{self.value}' is not a valid {self.value_type.value} literal"
            )
        return self


class PayloadRecord(BaseModel):
    """A fully parsed telemetry line.

    ``timestamp`` is always set: either the instant carried by the line or
    the moment the line was parsed.
    """

    model_config = {"frozen": True}

    category: str = Field(..., min_length=1, examples=["cpu", "net"])
    timestamp: str = Field(..., description="ISO-8601 instant")
    measurements: Tuple[Measurement, ...] = Field(..., min_length=1)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if v.startswith("#"):
            raise ValueError("Category must not start with '#'")
        if any(ch.isspace() for ch in v):
            raise ValueError(f"Category must not contain whitespace, got '{v}'")
        if '"' in v or "'" in v:
            raise ValueError(f"Category must not contain quotes, got {v!r}")
        return v

    def to_line(self) -> str:
        """Render the record back into an ELP line."""
        from elp_codec.payload import format_payload

        return format_payload(self)


# ---------------------------------------------------------------------------
# Command channel records
# ---------------------------------------------------------------------------

class CommandReplyRecord(BaseModel):
    """A device's reply to a previously dispatched command."""

    model_config = {"frozen": True}

    id: str = Field(..., description="Generated per decode, not from input")
    correlation_id: str = Field(..., min_length=1)
    hardware_id: str
    seen_at: str = Field(..., description="ISO-8601 instant of decoding")
    seen_by: str
    channel: str
    type: ReplyOutcome
    payload: str = ""


class CommandRequestRecord(BaseModel):
    """A command to be dispatched to a device."""

    model_config = {"frozen": True}

    id: str = Field(..., min_length=1)
    command_type: CommandType
    execution_type: ExecutionType
    command: Optional[str] = None
    arguments: Optional[str] = None
