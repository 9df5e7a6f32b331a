"""Shared pytest fixtures for ELP codec tests."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from elp_codec.payload import parse_payload
from elp_codec.schemas import PayloadRecord

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture()
def sample_elp_path() -> Path:
    """Path to the sample telemetry file (4 good, 2 bad, 2 skippable lines)."""
    return _FIXTURES_DIR / "telemetry.sample.elp"


@pytest.fixture()
def sample_lines(sample_elp_path: Path) -> List[str]:
    """The sample telemetry file as a list of raw lines."""
    with open(sample_elp_path, encoding="utf-8") as fh:
        return fh.readlines()


@pytest.fixture()
def typed_record() -> PayloadRecord:
    """A record exercising every hint style."""
    return parse_payload(
        "sensor load=1i,ratio=0.5f,up=true,name='a b',mode=eco,"
        "total=10bi,mean=1.25bd 2022-01-01T01:02:03Z"
    )
