"""Codec configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an env var
prefixed with ``ELP_`` (e.g. ``ELP_LOG_LEVEL``, ``ELP_APP_NAME``).
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class CodecSettings(BaseSettings):
    """ELP codec runtime settings."""

    model_config = {"env_prefix": "ELP_", "env_file": ".env", "extra": "ignore"}

    # -- logging ------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )

    # -- command channel ----------------------------------------------------
    app_name: str = Field(
        default="elp-codec",
        description="Recorded as seen_by on decoded command replies",
    )

    # -- ingestion ----------------------------------------------------------
    skip_comments: bool = Field(
        default=True,
        description="Drop '#' comment lines instead of reporting them",
    )
    skip_blank_lines: bool = Field(
        default=True,
        description="Drop empty or whitespace-only lines",
    )

    # -- derived ------------------------------------------------------------
    @property
    def is_json_logging(self) -> bool:
        """Return ``True`` when logs are rendered as JSON."""
        return self.log_format.strip().lower() == "json"
