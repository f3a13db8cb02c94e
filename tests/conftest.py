"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from qpack import Config, QPack


@pytest.fixture
def codec() -> QPack:
    """Codec instance with default configuration."""
    return QPack()


@pytest.fixture
def text_config() -> Config:
    """Config that decodes raw values as str, so str-keyed documents round-trip."""
    return Config(decode_raw_as_str=True)


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """Time series document: series name -> list of [timestamp, value] points."""
    return {
        "SAMPLE.w00000.flag.string": [[1637979480080, "N"], [1637979485080, "N"]],
        "SAMPLE.w00000.value.float": [[1637979480080, 29.1100001], [1637979485080, 29.1100001]],
        "SAMPLE.w00000.cou.float": [
            [1637979480080, 206.09879787908],
            [1637979485080, 145.5500001],
        ],
    }
